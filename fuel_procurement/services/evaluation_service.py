from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from fuel_procurement.core.errors import NoBidsError, NoQualifyingBidError, NotFoundError
from fuel_procurement.core.retry import run_read
from fuel_procurement.models.bid import Bid
from fuel_procurement.models.boq import Boq
from fuel_procurement.models.enums import FuelType
from fuel_procurement.models.fuel_budget import FuelBudget
from fuel_procurement.models.selection import SupplierSelection
from fuel_procurement.models.user import User
from fuel_procurement.services.bids_service import BidService


def _now():
    return datetime.now(timezone.utc)


def _term_set(values: Optional[Iterable[str]]) -> Set[str]:
    return {v.strip().casefold() for v in (values or []) if v and v.strip()}


def ranking_key(bid: Bid) -> Tuple[Decimal, datetime, uuid.UUID]:
    # lowest price, then first come, then id for a total order
    return (Decimal(bid.bid_price_per_unit), bid.submitted_at, bid.id)


def qualifies(
    bid: Bid,
    *,
    required_qualifications: Set[str],
    required_quality_certificates: Set[str],
    budget: Optional[Decimal],
) -> bool:
    if not required_qualifications <= _term_set(bid.qualifications):
        return False
    if not required_quality_certificates <= _term_set(bid.quality_certificates):
        return False
    if budget is not None and Decimal(bid.total_price) > budget:
        return False
    return True


def pick_winner(
    bids: Sequence[Bid],
    *,
    required_qualifications: Optional[Iterable[str]] = None,
    required_quality_certificates: Optional[Iterable[str]] = None,
    budget: Optional[Decimal] = None,
) -> Tuple[Bid, int]:
    """
    Pure ranking over an already-fetched bid list.

    Returns (winner, number of qualifying bids). Raises NoBidsError on an
    empty list and NoQualifyingBidError when the filters remove every bid.
    """
    if not bids:
        raise NoBidsError("No bids have been submitted for this BOQ yet.")

    req_q = _term_set(required_qualifications)
    req_c = _term_set(required_quality_certificates)
    candidates: List[Bid] = [
        b
        for b in bids
        if qualifies(
            b,
            required_qualifications=req_q,
            required_quality_certificates=req_c,
            budget=budget,
        )
    ]
    if not candidates:
        raise NoQualifyingBidError(
            f"None of the {len(bids)} bid(s) meet the required qualifications, certificates or budget."
        )
    return min(candidates, key=ranking_key), len(candidates)


@dataclass(frozen=True)
class Evaluation:
    boq: Boq
    winner: Bid
    supplier: User
    total_bids: int
    qualifying_bids: int
    budget_applied: Optional[Decimal]
    is_final: bool
    evaluated_at: datetime


class EvaluationService:
    """
    Read-only: proposes a winner, never changes state. Safe to run any
    number of times, concurrently with bidding.
    """

    def __init__(self):
        self.bids = BidService()

    def _resolve_budget(self, db: Session, boq: Boq, budget: Optional[Decimal]) -> Optional[Decimal]:
        if budget is not None:
            return Decimal(budget)
        stored = db.execute(
            select(FuelBudget.budget).where(FuelBudget.fuel_type == FuelType(boq.fuel_type).value)
        ).scalar_one_or_none()
        return Decimal(stored) if stored is not None else None

    def evaluate(
        self,
        db: Session,
        *,
        boq_id: uuid.UUID,
        required_qualifications: Optional[Iterable[str]] = None,
        required_quality_certificates: Optional[Iterable[str]] = None,
        budget: Optional[Decimal] = None,
    ) -> Evaluation:
        def _run() -> Evaluation:
            boq = db.get(Boq, boq_id)
            if not boq:
                raise NotFoundError("BOQ entry not found.")

            bids = self.bids.bids_for_boq(db, boq.id)
            ceiling = self._resolve_budget(db, boq, budget)
            winner, qualifying = pick_winner(
                bids,
                required_qualifications=required_qualifications,
                required_quality_certificates=required_quality_certificates,
                budget=ceiling,
            )
            is_final = db.execute(
                select(SupplierSelection.id).where(SupplierSelection.boq_id == boq.id)
            ).scalar_one_or_none() is not None

            return Evaluation(
                boq=boq,
                winner=winner,
                supplier=db.get(User, winner.supplier_id),
                total_bids=len(bids),
                qualifying_bids=qualifying,
                budget_applied=ceiling,
                is_final=is_final,
                evaluated_at=_now(),
            )

        return run_read(db, _run, op="evaluation.evaluate")
