from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fuel_procurement.core.auth_deps import get_current_principal
from fuel_procurement.core.errors import ProcurementError, to_http
from fuel_procurement.db.session import get_db
from fuel_procurement.models.enums import FuelType
from fuel_procurement.policies.rbac import ACTION_MANAGE_BUDGET, Principal, require_action
from fuel_procurement.schemas.budgets import BudgetOut, BudgetSet
from fuel_procurement.services.budget_service import BudgetService

router = APIRouter(prefix="/procurement")


@router.post("/budget", response_model=BudgetOut)
async def set_budget(
    payload: BudgetSet,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        require_action(principal, ACTION_MANAGE_BUDGET)
        row = BudgetService().set_budget(
            db, actor=principal, fuel_type=payload.fuel_type, budget=payload.budget
        )
    except ProcurementError as e:
        raise to_http(e)
    return BudgetOut.model_validate(row)


@router.get("/budget", response_model=List[BudgetOut])
async def list_budgets(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        require_action(principal, ACTION_MANAGE_BUDGET)
        rows = BudgetService().list_budgets(db)
    except ProcurementError as e:
        raise to_http(e)
    return [BudgetOut.model_validate(r) for r in rows]


@router.get("/budget/{fuel_type}", response_model=BudgetOut)
async def get_budget(
    fuel_type: FuelType,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        require_action(principal, ACTION_MANAGE_BUDGET)
        row = BudgetService().get_budget(db, fuel_type)
    except ProcurementError as e:
        raise to_http(e)
    return BudgetOut.model_validate(row)
