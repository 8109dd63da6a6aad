from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from fuel_procurement.core.auth_deps import get_current_principal
from fuel_procurement.core.deps_idempotency import (
    idempotency_guard,
    remember_response,
    replayed_response,
)
from fuel_procurement.core.errors import ProcurementError, to_http
from fuel_procurement.db.session import get_db
from fuel_procurement.policies.rbac import (
    ACTION_LIST_ALL_BIDS,
    ACTION_READ_BOQ_BIDS,
    ACTION_READ_OWN_BIDS,
    ACTION_SUBMIT_BID,
    Principal,
    require_action,
)
from fuel_procurement.schemas.bids import BidAdminList, BidAdminRow, BidList, BidOut, BidSubmit
from fuel_procurement.services.bids_service import BidService

router = APIRouter()


# ---------------------------------------------------------------------
# POST /boq/{boq_id}/bids  (supplier submit)
# ---------------------------------------------------------------------


@router.post(
    "/boq/{boq_id}/bids",
    response_model=BidOut,
    status_code=201,
    dependencies=[Depends(idempotency_guard)],
)
async def submit_bid(
    request: Request,
    boq_id: uuid.UUID,
    payload: BidSubmit,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        require_action(principal, ACTION_SUBMIT_BID)
    except ProcurementError as e:
        raise to_http(e)

    replay = replayed_response(request)
    if replay is not None:
        return replay

    try:
        # supplier identity comes from the token, never from the body
        bid = BidService().submit(
            db,
            boq_id=boq_id,
            supplier_id=principal.user_id,
            bid_price_per_unit=payload.bid_price_per_unit,
            qualifications=payload.qualifications,
            quality_certificates=payload.quality_certificates,
            actor=principal,
        )
    except ProcurementError as e:
        raise to_http(e)

    out = BidOut.model_validate(bid)
    remember_response(request, db, principal, out.model_dump(mode="json"), 201)
    return out


# ---------------------------------------------------------------------
# GET /boq/{boq_id}/bids  (buyer view)
# ---------------------------------------------------------------------


@router.get("/boq/{boq_id}/bids", response_model=BidList)
async def list_bids_for_boq(
    boq_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        require_action(principal, ACTION_READ_BOQ_BIDS)
        rows = BidService().list_for_boq(db, boq_id)
    except ProcurementError as e:
        raise to_http(e)
    return BidList(count=len(rows), items=[BidOut.model_validate(r) for r in rows])


# ---------------------------------------------------------------------
# GET /bids  (admin view, joined)
# ---------------------------------------------------------------------


@router.get("/bids", response_model=BidAdminList)
async def list_all_bids(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        require_action(principal, ACTION_LIST_ALL_BIDS)
        rows = BidService().list_all(db)
    except ProcurementError as e:
        raise to_http(e)

    items = [
        BidAdminRow(
            **BidOut.model_validate(bid).model_dump(),
            fuel_type=boq.fuel_type,
            boq_description=boq.description,
            supplier_name=supplier.display_name,
            supplier_email=supplier.email,
            branch_id=branch.id if branch else None,
            branch_name=branch.name if branch else None,
        )
        for bid, boq, supplier, branch in rows
    ]
    return BidAdminList(count=len(items), items=items)


# ---------------------------------------------------------------------
# GET /bids/my  (supplier's own bids)
# ---------------------------------------------------------------------


@router.get("/bids/my", response_model=BidList)
async def list_my_bids(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        require_action(principal, ACTION_READ_OWN_BIDS)
        rows = BidService().list_for_supplier(db, principal.user_id)
    except ProcurementError as e:
        raise to_http(e)
    return BidList(count=len(rows), items=[BidOut.model_validate(r) for r in rows])
