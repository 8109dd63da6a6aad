from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fuel_procurement.core.auth_deps import get_current_principal
from fuel_procurement.core.errors import ProcurementError, to_http
from fuel_procurement.db.session import get_db
from fuel_procurement.models.user import User
from fuel_procurement.policies.rbac import (
    ACTION_LIST_SUPPLIERS,
    ACTION_MANAGE_PROFILE,
    Principal,
    require_action,
)
from fuel_procurement.schemas.suppliers import SupplierList, SupplierProfileIn, SupplierProfileOut
from fuel_procurement.services.suppliers_service import SupplierService

router = APIRouter(prefix="/suppliers")


def _profile_to_schema(user: User) -> SupplierProfileOut:
    profile = user.profile
    return SupplierProfileOut(
        user_id=user.id,
        display_name=user.display_name,
        email=user.email,
        contact_details=profile.contact_details if profile else "",
        certification=profile.certification if profile else "",
        performance_history=profile.performance_history if profile else "",
        price_per_liter=profile.price_per_liter if profile else None,
    )


@router.post("/details", response_model=SupplierProfileOut)
async def save_my_details(
    payload: SupplierProfileIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        require_action(principal, ACTION_MANAGE_PROFILE)
        user = SupplierService().upsert_profile(
            db,
            principal=principal,
            contact_details=payload.contact_details,
            certification=payload.certification,
            performance_history=payload.performance_history,
            price_per_liter=payload.price_per_liter,
        )
    except ProcurementError as e:
        raise to_http(e)
    return _profile_to_schema(user)


@router.get("/my-details", response_model=SupplierProfileOut)
async def get_my_details(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        require_action(principal, ACTION_MANAGE_PROFILE)
        user = SupplierService().get_profile(db, principal.user_id)
    except ProcurementError as e:
        raise to_http(e)
    return _profile_to_schema(user)


@router.get("", response_model=SupplierList)
async def list_suppliers(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        require_action(principal, ACTION_LIST_SUPPLIERS)
        users = SupplierService().list_suppliers(db)
    except ProcurementError as e:
        raise to_http(e)
    return SupplierList(count=len(users), items=[_profile_to_schema(u) for u in users])
