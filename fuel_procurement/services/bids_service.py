from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fuel_procurement.core.config import get_settings
from fuel_procurement.core.errors import ConflictError, NotFoundError
from fuel_procurement.core.retry import run_read
from fuel_procurement.db.tx import commit
from fuel_procurement.models.bid import Bid
from fuel_procurement.models.boq import Boq
from fuel_procurement.models.branch import Branch
from fuel_procurement.models.enums import BidState
from fuel_procurement.models.selection import SupplierSelection
from fuel_procurement.models.user import User
from fuel_procurement.policies.rbac import Principal
from fuel_procurement.services.audit_service import AuditAction, AuditService
from fuel_procurement.services.pricing import MONEY_DIGITS, MONEY_PLACES, compute_total, require_amount
from fuel_procurement.services.suppliers_service import SupplierService

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------


def _now():
    return datetime.now(timezone.utc)


def normalize_terms(values: Optional[Iterable[str]]) -> List[str]:
    """Trimmed, blank-free, first occurrence wins (case-insensitive)."""
    out: List[str] = []
    seen = set()
    for raw in values or []:
        term = str(raw).strip()
        if not term or term.casefold() in seen:
            continue
        seen.add(term.casefold())
        out.append(term)
    return out


AdminBidRow = Tuple[Bid, Boq, User, Optional[Branch]]


# ---------------------------------------------------------------------
# service
# ---------------------------------------------------------------------


class BidService:
    def __init__(self):
        self.audit = AuditService()
        self.suppliers = SupplierService()

    def _get_boq(self, db: Session, boq_id: uuid.UUID, *, for_update: bool = False) -> Boq:
        stmt = select(Boq).where(Boq.id == boq_id)
        if for_update:
            stmt = stmt.with_for_update()
        boq = db.execute(stmt).scalar_one_or_none()
        if not boq:
            raise NotFoundError("BOQ entry not found.")
        return boq

    def _find_bid(self, db: Session, boq_id: uuid.UUID, supplier_id: uuid.UUID) -> Optional[Bid]:
        return db.execute(
            select(Bid).where(Bid.boq_id == boq_id, Bid.supplier_id == supplier_id)
        ).scalar_one_or_none()

    def submit(
        self,
        db: Session,
        *,
        boq_id: uuid.UUID,
        supplier_id: uuid.UUID,
        bid_price_per_unit: Decimal,
        qualifications: Optional[Iterable[str]] = None,
        quality_certificates: Optional[Iterable[str]] = None,
        actor: Optional[Principal] = None,
    ) -> Bid:
        """
        Stores one bid per supplier per BOQ.

        The BOQ row stays locked from the first check to the commit, so a
        selection cannot slip in between the "bidding open" check and the
        insert. A second bid from the same supplier is rejected, never merged.
        """
        # 1) references
        boq = self._get_boq(db, boq_id, for_update=True)
        self.suppliers.get_supplier(db, supplier_id)

        # 2) shape
        price = require_amount(
            "bid_price_per_unit", bid_price_per_unit, places=MONEY_PLACES, digits=MONEY_DIGITS
        )

        now = _now()

        # 3) bidding window
        selected = db.execute(
            select(SupplierSelection.id).where(SupplierSelection.boq_id == boq.id)
        ).scalar_one_or_none()
        if selected:
            raise ConflictError(
                "Bidding closed: a supplier has already been selected for this BOQ.",
                code="bidding_closed",
            )
        if get_settings().enforce_bid_deadline and now.date() > boq.deadline:
            raise ConflictError(
                f"Bidding closed: the deadline {boq.deadline.isoformat()} has passed.",
                code="deadline_passed",
            )

        # 4) one bid per supplier
        if self._find_bid(db, boq.id, supplier_id):
            raise ConflictError(
                "You have already submitted a bid for this BOQ.", code="duplicate_bid"
            )

        # 5) server-side total, 6) server-side timestamp
        bid = Bid(
            id=uuid.uuid4(),
            boq_id=boq.id,
            supplier_id=supplier_id,
            bid_price_per_unit=price,
            total_price=compute_total(price, boq.quantity),
            qualifications=normalize_terms(qualifications),
            quality_certificates=normalize_terms(quality_certificates),
            state=BidState.submitted.value,
            submitted_at=now,
        )
        db.add(bid)
        self.audit.write(
            db,
            actor=actor,
            action=AuditAction.BID_SUBMITTED,
            entity="bid",
            entity_id=bid.id,
            details={"boq_id": boq.id, "supplier_id": supplier_id},
        )
        try:
            commit(db, op="bid.submit")
        except IntegrityError:
            # concurrent submission from the same supplier won the unique constraint
            raise ConflictError(
                "You have already submitted a bid for this BOQ.", code="duplicate_bid"
            )
        db.refresh(bid)
        logger.info("bid %s submitted for boq %s", bid.id, boq.id)
        return bid

    def bids_for_boq(self, db: Session, boq_id: uuid.UUID) -> List[Bid]:
        """Unretried read, ordered for deterministic evaluation."""
        return list(
            db.execute(
                select(Bid)
                .where(Bid.boq_id == boq_id)
                .order_by(Bid.submitted_at.asc(), Bid.id.asc())
            ).scalars().all()
        )

    def list_for_boq(self, db: Session, boq_id: uuid.UUID) -> List[Bid]:
        def _load():
            self._get_boq(db, boq_id)
            return self.bids_for_boq(db, boq_id)

        return run_read(db, _load, op="bid.list_for_boq")

    def list_all(self, db: Session) -> List[AdminBidRow]:
        stmt = (
            select(Bid, Boq, User, Branch)
            .join(Boq, Boq.id == Bid.boq_id)
            .join(User, User.id == Bid.supplier_id)
            .outerjoin(Branch, Branch.id == Boq.branch_id)
            .order_by(Bid.submitted_at.desc(), Bid.id.asc())
        )
        return run_read(
            db,
            lambda: [tuple(row) for row in db.execute(stmt).all()],
            op="bid.list_all",
        )

    def list_for_supplier(self, db: Session, supplier_id: uuid.UUID) -> List[Bid]:
        return run_read(
            db,
            lambda: list(
                db.execute(
                    select(Bid)
                    .where(Bid.supplier_id == supplier_id)
                    .order_by(Bid.submitted_at.desc(), Bid.id.asc())
                ).scalars().all()
            ),
            op="bid.list_for_supplier",
        )
