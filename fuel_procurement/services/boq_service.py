from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from fuel_procurement.core.errors import ConflictError, NotFoundError, ValidationError
from fuel_procurement.core.retry import run_read
from fuel_procurement.db.tx import commit
from fuel_procurement.models.bid import Bid
from fuel_procurement.models.boq import Boq
from fuel_procurement.models.branch import Branch
from fuel_procurement.models.enums import BoqStatus, FuelType
from fuel_procurement.models.selection import SupplierSelection
from fuel_procurement.policies.rbac import Principal
from fuel_procurement.services.audit_service import AuditAction, AuditService
from fuel_procurement.services.pricing import (
    MONEY_DIGITS,
    MONEY_PLACES,
    QUANTITY_DIGITS,
    QUANTITY_PLACES,
    compute_total,
    require_amount,
)

logger = logging.getLogger(__name__)

# fields that carry the economics of the BOQ; frozen once a supplier is selected
LOCKED_AFTER_SELECTION = ("quantity", "estimated_price_per_unit")

UPDATABLE_FIELDS = (
    "fuel_type",
    "description",
    "quantity",
    "unit",
    "estimated_price_per_unit",
    "deadline",
    "branch_id",
)


def _now():
    return datetime.now(timezone.utc)


def _today() -> date:
    return _now().date()


def _parse_fuel_type(value: Any) -> FuelType:
    try:
        return FuelType(value)
    except ValueError:
        allowed = ", ".join(f.value for f in FuelType)
        raise ValidationError(f"Unknown fuel type '{value}'. Expected one of: {allowed}.")


def _quantity(value: Any) -> Decimal:
    return require_amount("quantity", value, places=QUANTITY_PLACES, digits=QUANTITY_DIGITS)


def _estimated_price(value: Any) -> Decimal:
    return require_amount(
        "estimated_price_per_unit", value, places=MONEY_PLACES, digits=MONEY_DIGITS
    )


class BoqService:
    def __init__(self):
        self.audit = AuditService()

    # -----------------------------------------------------------------
    # lookups
    # -----------------------------------------------------------------

    def _get(self, db: Session, boq_id: uuid.UUID, *, for_update: bool = False) -> Boq:
        stmt = select(Boq).where(Boq.id == boq_id)
        if for_update:
            stmt = stmt.with_for_update()
        boq = db.execute(stmt).scalar_one_or_none()
        if not boq:
            raise NotFoundError("BOQ entry not found.")
        return boq

    def selection_for(self, db: Session, boq_id: uuid.UUID) -> Optional[SupplierSelection]:
        return db.execute(
            select(SupplierSelection).where(SupplierSelection.boq_id == boq_id)
        ).scalar_one_or_none()

    def status_of(self, db: Session, boq_id: uuid.UUID) -> BoqStatus:
        return BoqStatus.selected if self.selection_for(db, boq_id) else BoqStatus.open

    def _ensure_branch(self, db: Session, branch_id: Optional[uuid.UUID]) -> None:
        if branch_id is not None and db.get(Branch, branch_id) is None:
            raise NotFoundError("Branch not found.")

    # -----------------------------------------------------------------
    # writes
    # -----------------------------------------------------------------

    def create(
        self,
        db: Session,
        *,
        actor: Principal,
        fuel_type: Any,
        description: str,
        quantity: Decimal,
        unit: str,
        estimated_price_per_unit: Decimal,
        deadline: date,
        branch_id: Optional[uuid.UUID] = None,
    ) -> Boq:
        fuel = _parse_fuel_type(fuel_type)
        qty = _quantity(quantity)
        price = _estimated_price(estimated_price_per_unit)
        if not isinstance(deadline, date):
            raise ValidationError("deadline must be a calendar date.")
        if deadline < _today():
            raise ValidationError("deadline cannot be in the past.")
        unit = (unit or "").strip() or "Liters"
        self._ensure_branch(db, branch_id)

        now = _now()
        boq = Boq(
            id=uuid.uuid4(),
            fuel_type=fuel.value,
            description=(description or "").strip(),
            quantity=qty,
            unit=unit,
            estimated_price_per_unit=price,
            deadline=deadline,
            branch_id=branch_id,
            created_by=actor.user_id,
            created_at=now,
            updated_at=now,
        )
        db.add(boq)
        self.audit.write(
            db,
            actor=actor,
            action=AuditAction.BOQ_CREATED,
            entity="boq",
            entity_id=boq.id,
            details={
                "fuel_type": fuel.value,
                "quantity": qty,
                "estimated_price_per_unit": price,
                "deadline": deadline,
            },
        )
        commit(db, op="boq.create")
        db.refresh(boq)
        logger.info("boq %s created (%s, %s %s)", boq.id, fuel.value, qty, unit)
        return boq

    def update(
        self,
        db: Session,
        *,
        actor: Principal,
        boq_id: uuid.UUID,
        fields: Dict[str, Any],
    ) -> Boq:
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields not updatable: {', '.join(sorted(unknown))}.")

        boq = self._get(db, boq_id, for_update=True)
        changes: Dict[str, Any] = {}

        if "fuel_type" in fields and fields["fuel_type"] is not None:
            changes["fuel_type"] = _parse_fuel_type(fields["fuel_type"]).value
        if "quantity" in fields:
            changes["quantity"] = _quantity(fields["quantity"])
        if "estimated_price_per_unit" in fields:
            changes["estimated_price_per_unit"] = _estimated_price(fields["estimated_price_per_unit"])
        if "deadline" in fields:
            deadline = fields["deadline"]
            if not isinstance(deadline, date):
                raise ValidationError("deadline must be a calendar date.")
            created_on = boq.created_at.date() if boq.created_at else _today()
            if deadline < created_on:
                raise ValidationError("deadline cannot be before the BOQ was created.")
            changes["deadline"] = deadline
        if "description" in fields and fields["description"] is not None:
            changes["description"] = fields["description"].strip()
        if "unit" in fields and fields["unit"] is not None:
            unit = fields["unit"].strip()
            if not unit:
                raise ValidationError("unit cannot be blank.")
            changes["unit"] = unit
        if "branch_id" in fields:
            self._ensure_branch(db, fields["branch_id"])
            changes["branch_id"] = fields["branch_id"]

        changed = {k: v for k, v in changes.items() if getattr(boq, k) != v}

        if self.selection_for(db, boq.id):
            frozen = [f for f in LOCKED_AFTER_SELECTION if f in changed]
            if frozen:
                raise ConflictError(
                    f"Supplier already selected; {', '.join(frozen)} can no longer change.",
                    code="boq_locked",
                )

        for key, value in changed.items():
            setattr(boq, key, value)

        recomputed = 0
        if "quantity" in changed:
            recomputed = self._recompute_totals(db, boq, actor=actor)

        if changed:
            boq.updated_at = _now()
            self.audit.write(
                db,
                actor=actor,
                action=AuditAction.BOQ_UPDATED,
                entity="boq",
                entity_id=boq.id,
                details={"changed": changed, "bids_recomputed": recomputed},
            )
        commit(db, op="boq.update")
        db.refresh(boq)
        return boq

    def _recompute_totals(self, db: Session, boq: Boq, *, actor: Principal) -> int:
        bids = list(db.execute(select(Bid).where(Bid.boq_id == boq.id)).scalars().all())
        if not bids:
            return 0
        for bid in bids:
            bid.total_price = compute_total(bid.bid_price_per_unit, boq.quantity)
        self.audit.write(
            db,
            actor=actor,
            action=AuditAction.BID_TOTALS_RECOMPUTED,
            entity="boq",
            entity_id=boq.id,
            details={
                "quantity": boq.quantity,
                "totals": {str(b.id): b.total_price for b in bids},
            },
        )
        logger.info("recomputed %s bid totals for boq %s", len(bids), boq.id)
        return len(bids)

    def delete(self, db: Session, *, actor: Principal, boq_id: uuid.UUID) -> None:
        """
        Deletion is blocked once any bid references the BOQ. Bids are kept
        for audit, so there is no cascading variant.
        """
        boq = self._get(db, boq_id, for_update=True)
        bid_count = db.execute(
            select(func.count(Bid.id)).where(Bid.boq_id == boq.id)
        ).scalar_one()
        if bid_count:
            raise ConflictError(
                f"BOQ has {bid_count} bid(s) and cannot be deleted.",
                code="boq_has_bids",
            )

        db.delete(boq)
        self.audit.write(
            db,
            actor=actor,
            action=AuditAction.BOQ_DELETED,
            entity="boq",
            entity_id=boq_id,
            details={"fuel_type": boq.fuel_type, "quantity": boq.quantity},
        )
        commit(db, op="boq.delete")

    # -----------------------------------------------------------------
    # reads
    # -----------------------------------------------------------------

    def get(self, db: Session, boq_id: uuid.UUID) -> Tuple[Boq, BoqStatus]:
        def _load():
            boq = self._get(db, boq_id)
            return boq, self.status_of(db, boq.id)

        return run_read(db, _load, op="boq.get")

    def list(
        self,
        db: Session,
        *,
        fuel_type: Optional[FuelType] = None,
        status: Optional[BoqStatus] = None,
        branch_id: Optional[uuid.UUID] = None,
    ) -> List[Tuple[Boq, BoqStatus]]:
        stmt = select(Boq, SupplierSelection.id).outerjoin(
            SupplierSelection, SupplierSelection.boq_id == Boq.id
        )
        if fuel_type is not None:
            stmt = stmt.where(Boq.fuel_type == fuel_type.value)
        if branch_id is not None:
            stmt = stmt.where(Boq.branch_id == branch_id)
        if status == BoqStatus.open:
            stmt = stmt.where(SupplierSelection.id.is_(None))
        elif status == BoqStatus.selected:
            stmt = stmt.where(SupplierSelection.id.is_not(None))
        stmt = stmt.order_by(Boq.deadline.asc(), Boq.created_at.asc(), Boq.id.asc())

        def _load():
            return [
                (boq, BoqStatus.selected if sel_id else BoqStatus.open)
                for boq, sel_id in db.execute(stmt).all()
            ]

        return run_read(db, _load, op="boq.list")
