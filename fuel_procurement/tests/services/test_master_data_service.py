import uuid
from decimal import Decimal

import pytest

from fuel_procurement.core.errors import ConflictError, NotFoundError, ValidationError
from fuel_procurement.models.enums import FuelType
from fuel_procurement.services.branches_service import BranchService
from fuel_procurement.services.budget_service import BudgetService
from fuel_procurement.services.idempotency_service import IdempotencyService
from fuel_procurement.services.suppliers_service import SupplierService
from fuel_procurement.tests.factories import principal_for


def test_budget_set_and_overwrite(db, admin):
    svc = BudgetService()
    svc.set_budget(db, actor=principal_for(admin), fuel_type=FuelType.Petrol, budget=Decimal("500000"))
    svc.set_budget(db, actor=principal_for(admin), fuel_type=FuelType.Petrol, budget=Decimal("750000"))

    row = svc.get_budget(db, FuelType.Petrol)
    assert row.budget == Decimal("750000")
    assert row.updated_by == admin.id
    assert len(svc.list_budgets(db)) == 1


def test_budget_must_be_positive(db, admin):
    with pytest.raises(ValidationError):
        BudgetService().set_budget(db, actor=principal_for(admin), fuel_type=FuelType.Diesel, budget=Decimal("0"))


def test_missing_budget(db):
    with pytest.raises(NotFoundError):
        BudgetService().get_budget(db, FuelType.Gasoline)


def test_branch_create_and_list(db, admin):
    svc = BranchService()
    svc.create(db, actor=principal_for(admin), name="North", location="Ring road")
    svc.create(db, actor=principal_for(admin), name="East")

    assert [b.name for b in svc.list(db)] == ["East", "North"]
    with pytest.raises(ConflictError):
        svc.create(db, actor=principal_for(admin), name="North")
    with pytest.raises(ValidationError):
        svc.create(db, actor=principal_for(admin), name="  ")


def test_supplier_profile_upsert(db, supplier1, supplier2):
    svc = SupplierService()
    svc.upsert_profile(
        db,
        principal=principal_for(supplier1),
        contact_details="+1-555-0101",
        certification="ISO 9001",
        performance_history="3 years, no late deliveries",
        price_per_liter=Decimal("1.45"),
    )
    user = svc.upsert_profile(
        db,
        principal=principal_for(supplier1),
        contact_details="+1-555-0199",
        certification="ISO 9001",
        performance_history="",
        price_per_liter=None,
    )

    assert user.profile.contact_details == "+1-555-0199"
    assert user.profile.price_per_liter is None
    assert svc.get_profile(db, supplier1.id).profile.certification == "ISO 9001"
    assert {u.id for u in svc.list_suppliers(db)} == {supplier1.id, supplier2.id}


def test_profile_only_for_suppliers(db, admin):
    with pytest.raises(NotFoundError):
        SupplierService().get_profile(db, admin.id)


def test_idempotency_replay_and_conflict(db, supplier1):
    svc = IdempotencyService()
    scope = dict(user_id=supplier1.id, endpoint_key="POST:/api/v1/boq/x/bids", idem_key="k-1")

    replay, status, req_hash = svc.reserve_or_replay(db, request_payload={"bid_price_per_unit": "10"}, **scope)
    assert replay is None and status is None

    svc.store_response(db, request_hash=req_hash, response_json={"id": "abc"}, response_status=201, **scope)

    replay, status, _ = svc.reserve_or_replay(db, request_payload={"bid_price_per_unit": "10"}, **scope)
    assert replay == {"id": "abc"}
    assert status == 201

    with pytest.raises(ConflictError):
        svc.reserve_or_replay(db, request_payload={"bid_price_per_unit": "11"}, **scope)

    # another user with the same key is a different scope
    other = dict(scope, user_id=uuid.uuid4())
    assert svc.reserve_or_replay(db, request_payload={}, **other)[0] is None
