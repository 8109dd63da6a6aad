from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional, Set

from fuel_procurement.core.errors import PermissionDeniedError
from fuel_procurement.models.enums import UserRole


@dataclass(frozen=True)
class Principal:
    user_id: uuid.UUID
    role: UserRole
    display_name: str
    branch_id: Optional[uuid.UUID] = None


# --- Core action constants ---
ACTION_MANAGE_BOQ = "MANAGE_BOQ"
ACTION_READ_BOQ = "READ_BOQ"
ACTION_READ_BOQ_BIDS = "READ_BOQ_BIDS"
ACTION_LIST_ALL_BIDS = "LIST_ALL_BIDS"
ACTION_SUBMIT_BID = "SUBMIT_BID"
ACTION_READ_OWN_BIDS = "READ_OWN_BIDS"
ACTION_EVALUATE = "EVALUATE"
ACTION_SELECT_SUPPLIER = "SELECT_SUPPLIER"
ACTION_READ_SELECTION = "READ_SELECTION"
ACTION_MANAGE_PROFILE = "MANAGE_PROFILE"
ACTION_LIST_SUPPLIERS = "LIST_SUPPLIERS"
ACTION_MANAGE_BUDGET = "MANAGE_BUDGET"
ACTION_MANAGE_BRANCHES = "MANAGE_BRANCHES"


def allowed_actions(role: UserRole) -> Set[str]:
    """
    Pure RBAC: which actions a role may attempt.
    """
    if role == UserRole.ADMIN:
        return {
            ACTION_MANAGE_BOQ,
            ACTION_READ_BOQ,
            ACTION_READ_BOQ_BIDS,
            ACTION_LIST_ALL_BIDS,
            ACTION_EVALUATE,
            ACTION_SELECT_SUPPLIER,
            ACTION_READ_SELECTION,
            ACTION_LIST_SUPPLIERS,
            ACTION_MANAGE_BUDGET,
            ACTION_MANAGE_BRANCHES,
        }

    if role == UserRole.BRANCH_MANAGER:
        return {ACTION_READ_BOQ, ACTION_READ_BOQ_BIDS, ACTION_READ_SELECTION}

    if role == UserRole.SUPPLIER:
        return {ACTION_READ_BOQ, ACTION_SUBMIT_BID, ACTION_READ_OWN_BIDS, ACTION_MANAGE_PROFILE}

    return set()


def require_action(principal: Principal, action: str) -> None:
    if action not in allowed_actions(principal.role):
        raise PermissionDeniedError(
            f"Role {principal.role.value} not permitted for action {action}."
        )
