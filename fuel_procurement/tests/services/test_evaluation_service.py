import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from fuel_procurement.core.errors import ConflictError, NoBidsError, NoQualifyingBidError, NotFoundError
from fuel_procurement.models.bid import Bid
from fuel_procurement.models.enums import FuelType, UserRole
from fuel_procurement.services import bids_service as bids_module
from fuel_procurement.services.bids_service import BidService
from fuel_procurement.services.budget_service import BudgetService
from fuel_procurement.services.evaluation_service import EvaluationService, pick_winner
from fuel_procurement.services.selection_service import SelectionService
from fuel_procurement.tests.factories import make_user, principal_for


def _bid(price, at, **kw):
    return Bid(
        id=kw.pop("id", uuid.uuid4()),
        boq_id=uuid.uuid4(),
        supplier_id=uuid.uuid4(),
        bid_price_per_unit=Decimal(price),
        total_price=Decimal(price) * 10,
        qualifications=kw.pop("qualifications", []),
        quality_certificates=kw.pop("quality_certificates", []),
        submitted_at=at,
    )


T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def test_lowest_price_wins_and_earliest_breaks_ties():
    a = _bid("100", T0)
    b = _bid("90", T0 + timedelta(seconds=1))
    c = _bid("90", T0 + timedelta(seconds=2))

    winner, qualifying = pick_winner([a, c, b])
    assert winner is b
    assert qualifying == 3


def test_id_breaks_exact_ties():
    low, high = sorted([uuid.uuid4(), uuid.uuid4()])
    x = _bid("90", T0, id=high)
    y = _bid("90", T0, id=low)
    assert pick_winner([x, y])[0] is y


def test_empty_bid_list():
    with pytest.raises(NoBidsError):
        pick_winner([])


def test_required_sets_are_subset_matches_case_insensitive():
    cheap = _bid("80", T0, qualifications=["ISO 9001"])
    qualified = _bid("95", T0, qualifications=[" iso 9001 ", "HSE"], quality_certificates=["EN 590"])

    winner, qualifying = pick_winner(
        [cheap, qualified],
        required_qualifications=["ISO 9001", "hse", "  "],
        required_quality_certificates=["en 590"],
    )
    assert winner is qualified
    assert qualifying == 1


def test_filters_that_remove_everything():
    with pytest.raises(NoQualifyingBidError):
        pick_winner([_bid("80", T0)], required_qualifications=["ISO 14001"])


def test_budget_ceiling_on_total():
    over = _bid("100", T0)   # total 1000
    under = _bid("120", T0)  # total 1200
    assert pick_winner([over, under], budget=Decimal("1000"))[0] is over
    with pytest.raises(NoQualifyingBidError):
        pick_winner([over, under], budget=Decimal("999"))


# ---------------------------------------------------------------------
# against the database
# ---------------------------------------------------------------------


def test_diesel_scenario(db, admin, supplier1, supplier2, diesel_boq):
    bids = BidService()
    bids.submit(db, boq_id=diesel_boq.id, supplier_id=supplier1.id, bid_price_per_unit=Decimal("1150"))
    bids.submit(db, boq_id=diesel_boq.id, supplier_id=supplier2.id, bid_price_per_unit=Decimal("1180"))

    result = EvaluationService().evaluate(db, boq_id=diesel_boq.id)
    assert result.winner.supplier_id == supplier1.id
    assert result.winner.total_price == Decimal("1150000")
    assert result.supplier.id == supplier1.id
    assert result.total_bids == 2
    assert result.is_final is False

    SelectionService().select(db, actor=principal_for(admin), boq_id=diesel_boq.id, supplier_id=supplier1.id)

    late = make_user(db, UserRole.SUPPLIER)
    with pytest.raises(ConflictError):
        bids.submit(db, boq_id=diesel_boq.id, supplier_id=late.id, bid_price_per_unit=Decimal("1000"))

    assert EvaluationService().evaluate(db, boq_id=diesel_boq.id).is_final is True


def test_tie_break_uses_server_submission_time(db, diesel_boq, monkeypatch):
    base = datetime.now(timezone.utc)
    stamps = iter([base, base + timedelta(seconds=1), base + timedelta(seconds=2)])
    monkeypatch.setattr(bids_module, "_now", lambda: next(stamps))

    a, b, c = (make_user(db, UserRole.SUPPLIER) for _ in range(3))
    svc = BidService()
    svc.submit(db, boq_id=diesel_boq.id, supplier_id=a.id, bid_price_per_unit=Decimal("100"))
    svc.submit(db, boq_id=diesel_boq.id, supplier_id=b.id, bid_price_per_unit=Decimal("90"))
    svc.submit(db, boq_id=diesel_boq.id, supplier_id=c.id, bid_price_per_unit=Decimal("90"))

    assert EvaluationService().evaluate(db, boq_id=diesel_boq.id).winner.supplier_id == b.id


def test_evaluate_is_repeatable(db, supplier1, supplier2, diesel_boq):
    bids = BidService()
    bids.submit(db, boq_id=diesel_boq.id, supplier_id=supplier1.id, bid_price_per_unit=Decimal("1180"))
    bids.submit(db, boq_id=diesel_boq.id, supplier_id=supplier2.id, bid_price_per_unit=Decimal("1150"))

    svc = EvaluationService()
    winners = {svc.evaluate(db, boq_id=diesel_boq.id).winner.id for _ in range(3)}
    assert len(winners) == 1

    # nothing was selected by evaluating
    assert {b.state for b in bids.list_for_boq(db, diesel_boq.id)} == {"submitted"}


def test_evaluate_unknown_boq(db):
    with pytest.raises(NotFoundError):
        EvaluationService().evaluate(db, boq_id=uuid.uuid4())


def test_evaluate_without_bids(db, diesel_boq):
    with pytest.raises(NoBidsError):
        EvaluationService().evaluate(db, boq_id=diesel_boq.id)


def test_stored_budget_applies_when_none_given(db, admin, supplier1, supplier2, diesel_boq):
    bids = BidService()
    bids.submit(db, boq_id=diesel_boq.id, supplier_id=supplier1.id, bid_price_per_unit=Decimal("1150"))
    bids.submit(db, boq_id=diesel_boq.id, supplier_id=supplier2.id, bid_price_per_unit=Decimal("1180"))
    BudgetService().set_budget(db, actor=principal_for(admin), fuel_type=FuelType.Diesel, budget=Decimal("1000000"))

    with pytest.raises(NoQualifyingBidError):
        EvaluationService().evaluate(db, boq_id=diesel_boq.id)

    # an explicit ceiling overrides the stored one
    result = EvaluationService().evaluate(db, boq_id=diesel_boq.id, budget=Decimal("1200000"))
    assert result.winner.supplier_id == supplier1.id
    assert result.budget_applied == Decimal("1200000")
