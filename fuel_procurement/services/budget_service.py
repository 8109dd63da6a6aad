from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from fuel_procurement.core.errors import NotFoundError
from fuel_procurement.core.retry import run_read
from fuel_procurement.db.tx import commit
from fuel_procurement.models.enums import FuelType
from fuel_procurement.models.fuel_budget import FuelBudget
from fuel_procurement.policies.rbac import Principal
from fuel_procurement.services.audit_service import AuditAction, AuditService
from fuel_procurement.services.pricing import BUDGET_DIGITS, MONEY_PLACES, require_amount


def _now():
    return datetime.now(timezone.utc)


class BudgetService:
    """Procurement budget per fuel type (one row per type, overwritten on set)."""

    def __init__(self):
        self.audit = AuditService()

    def _find(self, db: Session, fuel_type: FuelType) -> Optional[FuelBudget]:
        return db.execute(
            select(FuelBudget).where(FuelBudget.fuel_type == fuel_type.value)
        ).scalar_one_or_none()

    def set_budget(
        self, db: Session, *, actor: Principal, fuel_type: FuelType, budget: Decimal
    ) -> FuelBudget:
        budget = require_amount("budget", budget, places=MONEY_PLACES, digits=BUDGET_DIGITS)

        row = self._find(db, fuel_type)
        previous = row.budget if row else None
        if row is None:
            row = FuelBudget(fuel_type=fuel_type.value, budget=budget)
            db.add(row)
        row.budget = budget
        row.updated_by = actor.user_id
        row.updated_at = _now()

        self.audit.write(
            db,
            actor=actor,
            action=AuditAction.BUDGET_SET,
            entity="fuel_budget",
            entity_id=fuel_type.value,
            details={"fuel_type": fuel_type.value, "budget": budget, "previous": previous},
        )
        commit(db, op="budget.set")
        db.refresh(row)
        return row

    def find_budget(self, db: Session, fuel_type: FuelType) -> Optional[FuelBudget]:
        return run_read(db, lambda: self._find(db, fuel_type), op="budget.find")

    def get_budget(self, db: Session, fuel_type: FuelType) -> FuelBudget:
        row = self.find_budget(db, fuel_type)
        if not row:
            raise NotFoundError(f"No budget set for {fuel_type.value}.")
        return row

    def list_budgets(self, db: Session) -> List[FuelBudget]:
        return run_read(
            db,
            lambda: list(db.execute(select(FuelBudget).order_by(FuelBudget.fuel_type)).scalars().all()),
            op="budget.list",
        )
