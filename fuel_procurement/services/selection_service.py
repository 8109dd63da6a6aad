from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fuel_procurement.core.config import get_settings
from fuel_procurement.core.errors import ConflictError, NotFoundError, PersistenceUnavailableError
from fuel_procurement.core.hashing import canonical_hash
from fuel_procurement.core.retry import run_read
from fuel_procurement.db.tx import commit
from fuel_procurement.models.bid import Bid
from fuel_procurement.models.boq import Boq
from fuel_procurement.models.enums import BidState, NotificationStatus
from fuel_procurement.models.selection import SupplierSelection
from fuel_procurement.models.user import User
from fuel_procurement.policies.rbac import Principal
from fuel_procurement.services.audit_service import AuditAction, AuditService
from fuel_procurement.services.notification_service import (
    AwardNotice,
    NotificationResult,
    build_notifier,
)

logger = logging.getLogger(__name__)


def _now():
    return datetime.now(timezone.utc)


@dataclass
class SelectionOutcome:
    selection: SupplierSelection
    bid: Bid
    warnings: List[str] = field(default_factory=list)


class SelectionService:
    """
    Records the award for a BOQ and notifies the winner once.

    Open -> Selected is the only durable transition. The unique boq_id on
    supplier_selections decides concurrent selections; the loser gets
    ConflictError.
    """

    def __init__(self, notifier=None):
        self.audit = AuditService()
        self.notifier = notifier

    def _notifier(self):
        if self.notifier is None:
            self.notifier = build_notifier(get_settings())
        return self.notifier

    def _existing_selection(self, db: Session, boq_id: uuid.UUID) -> Optional[SupplierSelection]:
        return db.execute(
            select(SupplierSelection).where(SupplierSelection.boq_id == boq_id)
        ).scalar_one_or_none()

    def select(
        self,
        db: Session,
        *,
        actor: Principal,
        boq_id: uuid.UUID,
        supplier_id: uuid.UUID,
    ) -> SelectionOutcome:
        boq = db.execute(
            select(Boq).where(Boq.id == boq_id).with_for_update()
        ).scalar_one_or_none()
        if not boq:
            raise NotFoundError("BOQ entry not found.")

        bid = db.execute(
            select(Bid).where(Bid.boq_id == boq.id, Bid.supplier_id == supplier_id)
        ).scalar_one_or_none()
        if not bid:
            raise NotFoundError("No bid from this supplier for this BOQ.")

        if self._existing_selection(db, boq.id):
            raise ConflictError(
                "A supplier has already been selected for this BOQ.", code="already_selected"
            )

        decided_at = _now()
        selection = SupplierSelection(
            id=uuid.uuid4(),
            boq_id=boq.id,
            bid_id=bid.id,
            supplier_id=supplier_id,
            selected_by=actor.user_id,
            decided_at=decided_at,
            signature_hash=canonical_hash(
                {
                    "boq_id": boq.id,
                    "bid_id": bid.id,
                    "supplier_id": supplier_id,
                    "bid_price_per_unit": bid.bid_price_per_unit,
                    "total_price": bid.total_price,
                    "selected_by": actor.user_id,
                    "decided_at": decided_at,
                }
            ),
            notification_status=NotificationStatus.pending.value,
        )
        db.add(selection)
        try:
            # uq_selection_boq decides a concurrent award before any bid is touched
            db.flush()
        except IntegrityError:
            db.rollback()
            raise ConflictError(
                "A supplier has already been selected for this BOQ.", code="already_selected"
            )

        db.execute(
            update(Bid)
            .where(Bid.boq_id == boq.id, Bid.id != bid.id)
            .values(state=BidState.not_selected.value)
        )
        bid.state = BidState.selected.value

        self.audit.write(
            db,
            actor=actor,
            action=AuditAction.SUPPLIER_SELECTED,
            entity="selection",
            entity_id=boq.id,
            details={
                "bid_id": bid.id,
                "supplier_id": supplier_id,
                "total_price": bid.total_price,
                "signature_hash": selection.signature_hash,
            },
        )
        try:
            commit(db, op="selection.select")
        except IntegrityError:
            # a concurrent selection for the same BOQ committed first
            raise ConflictError(
                "A supplier has already been selected for this BOQ.", code="already_selected"
            )
        logger.info("boq %s awarded to supplier %s (bid %s)", boq.id, supplier_id, bid.id)

        outcome = SelectionOutcome(selection=selection, bid=bid)
        result = self._notify(db, boq, bid)
        self._record_notification(db, actor, selection, result, outcome)
        return outcome

    def _notify(self, db: Session, boq: Boq, bid: Bid) -> NotificationResult:
        supplier = db.get(User, bid.supplier_id)
        notice = AwardNotice(
            supplier_name=supplier.display_name if supplier else str(bid.supplier_id),
            supplier_email=supplier.email if supplier else "",
            boq_id=str(boq.id),
            fuel_type=boq.fuel_type,
            quantity=str(boq.quantity),
            unit=boq.unit,
            bid_price_per_unit=str(bid.bid_price_per_unit),
            total_price=str(bid.total_price),
            deadline=boq.deadline.isoformat(),
        )
        try:
            return self._notifier().send_award(notice)
        except Exception as exc:
            # the award is already committed; a broken notifier must not undo it
            logger.exception("notifier raised for boq %s", boq.id)
            return NotificationResult(NotificationStatus.failed, f"{exc.__class__.__name__}: {exc}")

    def _record_notification(
        self,
        db: Session,
        actor: Principal,
        selection: SupplierSelection,
        result: NotificationResult,
        outcome: SelectionOutcome,
    ) -> None:
        selection.notification_status = result.status.value
        selection.notification_detail = result.detail
        selection.notified_at = _now() if result.delivered else None
        self.audit.write(
            db,
            actor=actor,
            action=AuditAction.SELECTION_NOTIFIED,
            entity="selection",
            entity_id=selection.boq_id,
            details={"status": result.status.value, "detail": result.detail},
        )
        if not result.delivered:
            outcome.warnings.append(
                f"Supplier selected, but the notification could not be delivered: {result.detail}"
            )
        try:
            commit(db, op="selection.record_notification")
        except PersistenceUnavailableError:
            logger.warning("notification outcome for boq %s not recorded", selection.boq_id)
            outcome.warnings.append("Notification outcome could not be recorded.")
            return
        db.refresh(selection)

    def get_selection(self, db: Session, boq_id: uuid.UUID) -> Tuple[SupplierSelection, Bid]:
        def _load():
            selection = self._existing_selection(db, boq_id)
            if not selection:
                raise NotFoundError("No supplier has been selected for this BOQ.")
            return selection, db.get(Bid, selection.bid_id)

        return run_read(db, _load, op="selection.get")
