from __future__ import annotations

import uuid
from typing import Optional

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
from fuel_procurement.models.bid import Bid
from fuel_procurement.models.selection import SupplierSelection
from fuel_procurement.policies.rbac import (
    ACTION_EVALUATE,
    ACTION_READ_SELECTION,
    ACTION_SELECT_SUPPLIER,
    Principal,
    require_action,
)
from fuel_procurement.schemas.bids import BidOut
from fuel_procurement.schemas.evaluation import (
    EvaluateRequest,
    EvaluationOut,
    SelectionOut,
    SelectRequest,
    SupplierSnapshot,
)
from fuel_procurement.services.evaluation_service import EvaluationService
from fuel_procurement.services.selection_service import SelectionService

router = APIRouter(prefix="/boq")


def _selection_to_schema(selection: SupplierSelection, bid: Bid, warnings=None) -> SelectionOut:
    return SelectionOut(
        id=selection.id,
        boq_id=selection.boq_id,
        bid_id=selection.bid_id,
        supplier_id=selection.supplier_id,
        selected_by=selection.selected_by,
        decided_at=selection.decided_at,
        signature_hash=selection.signature_hash,
        total_price=bid.total_price,
        notification_status=selection.notification_status,
        notification_detail=selection.notification_detail,
        notified_at=selection.notified_at,
        warnings=list(warnings or []),
    )


@router.post("/{boq_id}/evaluate", response_model=EvaluationOut)
async def evaluate_boq(
    boq_id: uuid.UUID,
    payload: Optional[EvaluateRequest] = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """
    Proposes the winning bid. Read-only: repeatable, and only a
    recommendation until a selection is recorded.
    """
    payload = payload or EvaluateRequest()
    try:
        require_action(principal, ACTION_EVALUATE)
        result = EvaluationService().evaluate(
            db,
            boq_id=boq_id,
            required_qualifications=payload.required_qualifications,
            required_quality_certificates=payload.required_quality_certificates,
            budget=payload.budget,
        )
    except ProcurementError as e:
        raise to_http(e)

    supplier = result.supplier
    profile = supplier.profile if supplier else None
    return EvaluationOut(
        boq_id=result.boq.id,
        winner=BidOut.model_validate(result.winner),
        supplier=SupplierSnapshot(
            user_id=result.winner.supplier_id,
            display_name=supplier.display_name if supplier else "",
            email=supplier.email if supplier else "",
            contact_details=profile.contact_details if profile else None,
            certification=profile.certification if profile else None,
            performance_history=profile.performance_history if profile else None,
        ),
        total_bids=result.total_bids,
        qualifying_bids=result.qualifying_bids,
        budget_applied=result.budget_applied,
        is_final=result.is_final,
        evaluated_at=result.evaluated_at,
    )


@router.post(
    "/{boq_id}/selection",
    response_model=SelectionOut,
    status_code=201,
    dependencies=[Depends(idempotency_guard)],
)
def select_supplier(
    request: Request,
    boq_id: uuid.UUID,
    payload: SelectRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """
    Records the award and notifies the supplier once. A failed
    notification comes back as a warning; the award stands.
    """
    try:
        require_action(principal, ACTION_SELECT_SUPPLIER)
    except ProcurementError as e:
        raise to_http(e)

    replay = replayed_response(request)
    if replay is not None:
        return replay

    try:
        outcome = SelectionService().select(
            db,
            actor=principal,
            boq_id=boq_id,
            supplier_id=payload.supplier_id,
        )
    except ProcurementError as e:
        raise to_http(e)

    out = _selection_to_schema(outcome.selection, outcome.bid, outcome.warnings)
    remember_response(request, db, principal, out.model_dump(mode="json"), 201)
    return out


@router.get("/{boq_id}/selection", response_model=SelectionOut)
async def get_selection(
    boq_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        require_action(principal, ACTION_READ_SELECTION)
        selection, bid = SelectionService().get_selection(db, boq_id)
    except ProcurementError as e:
        raise to_http(e)
    return _selection_to_schema(selection, bid)
