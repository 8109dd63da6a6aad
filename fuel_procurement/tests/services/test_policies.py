import uuid

import pytest

from fuel_procurement.core.errors import PermissionDeniedError
from fuel_procurement.core.hashing import canonical_hash
from fuel_procurement.models.enums import UserRole
from fuel_procurement.policies.rbac import (
    ACTION_EVALUATE,
    ACTION_READ_BOQ,
    ACTION_SELECT_SUPPLIER,
    ACTION_SUBMIT_BID,
    Principal,
    allowed_actions,
    require_action,
)


def _p(role):
    return Principal(user_id=uuid.uuid4(), role=role, display_name="x")


def test_only_suppliers_submit_bids():
    require_action(_p(UserRole.SUPPLIER), ACTION_SUBMIT_BID)
    for role in (UserRole.ADMIN, UserRole.BRANCH_MANAGER):
        with pytest.raises(PermissionDeniedError):
            require_action(_p(role), ACTION_SUBMIT_BID)


def test_only_admin_evaluates_and_selects():
    assert {ACTION_EVALUATE, ACTION_SELECT_SUPPLIER} <= allowed_actions(UserRole.ADMIN)
    assert ACTION_SELECT_SUPPLIER not in allowed_actions(UserRole.BRANCH_MANAGER)
    assert ACTION_EVALUATE not in allowed_actions(UserRole.SUPPLIER)


def test_everyone_reads_boq():
    for role in UserRole:
        assert ACTION_READ_BOQ in allowed_actions(role)


def test_canonical_hash_ignores_key_order():
    assert canonical_hash({"a": 1, "b": [1, 2]}) == canonical_hash({"b": [1, 2], "a": 1})
    assert canonical_hash({"a": 1}) != canonical_hash({"a": 2})
