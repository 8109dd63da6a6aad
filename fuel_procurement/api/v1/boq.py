from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from fuel_procurement.core.auth_deps import get_current_principal
from fuel_procurement.core.errors import ProcurementError, to_http
from fuel_procurement.db.session import get_db
from fuel_procurement.models.boq import Boq
from fuel_procurement.models.enums import BoqStatus, FuelType
from fuel_procurement.policies.rbac import (
    ACTION_MANAGE_BOQ,
    ACTION_READ_BOQ,
    Principal,
    require_action,
)
from fuel_procurement.schemas.boq import BoqCreate, BoqList, BoqOut, BoqUpdate
from fuel_procurement.services.boq_service import BoqService

router = APIRouter(prefix="/boq")


def boq_to_schema(boq: Boq, status: BoqStatus) -> BoqOut:
    out = BoqOut.model_validate(boq)
    out.status = status
    return out


@router.post("", response_model=BoqOut, status_code=201)
async def create_boq(
    payload: BoqCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        require_action(principal, ACTION_MANAGE_BOQ)
        boq = BoqService().create(
            db,
            actor=principal,
            fuel_type=payload.fuel_type,
            description=payload.description,
            quantity=payload.quantity,
            unit=payload.unit,
            estimated_price_per_unit=payload.estimated_price_per_unit,
            deadline=payload.deadline,
            branch_id=payload.branch_id,
        )
    except ProcurementError as e:
        raise to_http(e)
    return boq_to_schema(boq, BoqStatus.open)


@router.get("", response_model=BoqList)
async def list_boq(
    fuel_type: Optional[FuelType] = Query(default=None),
    status: Optional[BoqStatus] = Query(default=None),
    branch_id: Optional[uuid.UUID] = Query(default=None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        require_action(principal, ACTION_READ_BOQ)
        rows = BoqService().list(db, fuel_type=fuel_type, status=status, branch_id=branch_id)
    except ProcurementError as e:
        raise to_http(e)
    return BoqList(count=len(rows), items=[boq_to_schema(b, s) for b, s in rows])


@router.get("/{boq_id}", response_model=BoqOut)
async def get_boq(
    boq_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        require_action(principal, ACTION_READ_BOQ)
        boq, status = BoqService().get(db, boq_id)
    except ProcurementError as e:
        raise to_http(e)
    return boq_to_schema(boq, status)


@router.put("/{boq_id}", response_model=BoqOut)
async def update_boq(
    boq_id: uuid.UUID,
    payload: BoqUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    svc = BoqService()
    try:
        require_action(principal, ACTION_MANAGE_BOQ)
        boq = svc.update(
            db,
            actor=principal,
            boq_id=boq_id,
            fields=payload.model_dump(exclude_unset=True),
        )
    except ProcurementError as e:
        raise to_http(e)
    return boq_to_schema(boq, svc.status_of(db, boq.id))


@router.delete("/{boq_id}", status_code=204)
async def delete_boq(
    boq_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        require_action(principal, ACTION_MANAGE_BOQ)
        BoqService().delete(db, actor=principal, boq_id=boq_id)
    except ProcurementError as e:
        raise to_http(e)
    return Response(status_code=204)
