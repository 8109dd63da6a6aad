from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from fuel_procurement.core.errors import NotFoundError
from fuel_procurement.core.retry import run_read
from fuel_procurement.db.tx import commit
from fuel_procurement.models.enums import UserRole
from fuel_procurement.models.user import SupplierProfile, User
from fuel_procurement.policies.rbac import Principal
from fuel_procurement.services.audit_service import AuditAction, AuditService
from fuel_procurement.services.pricing import MONEY_DIGITS, MONEY_PLACES, require_amount


def _now():
    return datetime.now(timezone.utc)


class SupplierService:
    def __init__(self):
        self.audit = AuditService()

    def get_supplier(self, db: Session, supplier_id: uuid.UUID) -> User:
        user = db.get(User, supplier_id)
        if not user or user.role != UserRole.SUPPLIER.value or not user.is_active:
            raise NotFoundError("Supplier not found.")
        return user

    def upsert_profile(
        self,
        db: Session,
        *,
        principal: Principal,
        contact_details: str,
        certification: str,
        performance_history: str,
        price_per_liter: Optional[Decimal],
    ) -> User:
        user = self.get_supplier(db, principal.user_id)
        if price_per_liter is not None:
            price_per_liter = require_amount(
                "price_per_liter", price_per_liter, places=MONEY_PLACES, digits=MONEY_DIGITS
            )

        profile = user.profile
        if profile is None:
            profile = SupplierProfile(user_id=user.id)
            db.add(profile)
            user.profile = profile

        profile.contact_details = contact_details
        profile.certification = certification
        profile.performance_history = performance_history
        profile.price_per_liter = price_per_liter
        profile.updated_at = _now()

        self.audit.write(
            db,
            actor=principal,
            action=AuditAction.SUPPLIER_PROFILE_SAVED,
            entity="supplier",
            entity_id=user.id,
            details={"price_per_liter": price_per_liter},
        )
        commit(db, op="supplier.upsert_profile")
        db.refresh(user)
        return user

    def get_profile(self, db: Session, user_id: uuid.UUID) -> User:
        return run_read(db, lambda: self.get_supplier(db, user_id), op="supplier.get_profile")

    def list_suppliers(self, db: Session) -> List[User]:
        return run_read(
            db,
            lambda: list(
                db.execute(
                    select(User)
                    .where(User.role == UserRole.SUPPLIER.value, User.is_active.is_(True))
                    .order_by(User.display_name.asc(), User.id.asc())
                ).scalars().all()
            ),
            op="supplier.list",
        )
