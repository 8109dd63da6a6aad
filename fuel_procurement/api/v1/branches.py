from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fuel_procurement.core.auth_deps import get_current_principal
from fuel_procurement.core.errors import ProcurementError, to_http
from fuel_procurement.db.session import get_db
from fuel_procurement.policies.rbac import ACTION_MANAGE_BRANCHES, Principal, require_action
from fuel_procurement.schemas.branches import BranchCreate, BranchList, BranchOut
from fuel_procurement.services.branches_service import BranchService

router = APIRouter(prefix="/branches")


@router.post("", response_model=BranchOut, status_code=201)
async def create_branch(
    payload: BranchCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        require_action(principal, ACTION_MANAGE_BRANCHES)
        row = BranchService().create(db, actor=principal, name=payload.name, location=payload.location)
    except ProcurementError as e:
        raise to_http(e)
    return BranchOut.model_validate(row)


@router.get("", response_model=BranchList)
async def list_branches(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        require_action(principal, ACTION_MANAGE_BRANCHES)
        rows = BranchService().list(db)
    except ProcurementError as e:
        raise to_http(e)
    return BranchList(count=len(rows), items=[BranchOut.model_validate(r) for r in rows])
