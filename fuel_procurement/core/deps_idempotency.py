from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from fuel_procurement.core.auth_deps import get_current_principal
from fuel_procurement.core.errors import ProcurementError, to_http
from fuel_procurement.core.hashing import json_safe
from fuel_procurement.db.session import get_db
from fuel_procurement.policies.rbac import Principal
from fuel_procurement.services.idempotency_service import IdempotencyService

IDEMPOTENCY_HEADER = "Idempotency-Key"


async def optional_idempotency_key(request: Request) -> Optional[str]:
    key = request.headers.get(IDEMPOTENCY_HEADER)
    if key is None:
        return None
    key = key.strip()
    if not key:
        raise HTTPException(status_code=400, detail="Idempotency-Key header is empty.")
    if len(key) > 128:
        raise HTTPException(status_code=400, detail="Idempotency-Key too long.")
    return key


async def idempotency_guard(
    request: Request,
    idem_key: Optional[str] = Depends(optional_idempotency_key),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Optional[str]:
    """
    Use on mutating POST endpoints.

    Without the header the request runs normally. With it, a repeat of the
    same request replays the stored response instead of repeating the side
    effect. Stores in request.state:
      - idempotency_key
      - idempotency_request_hash
      - idempotency_replay_json / idempotency_replay_status (on replay)
    """
    request.state.idempotency_key = idem_key
    request.state.idempotency_replay_json = None
    request.state.idempotency_replay_status = None
    if idem_key is None:
        return None

    endpoint_key = f"{request.method}:{request.url.path}"

    try:
        payload = await request.json()
    except ValueError:
        payload = {}

    try:
        replay_json, replay_status, req_hash = IdempotencyService().reserve_or_replay(
            db,
            user_id=principal.user_id,
            endpoint_key=endpoint_key,
            idem_key=idem_key,
            request_payload=payload if isinstance(payload, dict) else {"_": payload},
        )
    except ProcurementError as e:
        raise to_http(e)

    request.state.idempotency_endpoint_key = endpoint_key
    request.state.idempotency_request_hash = req_hash
    request.state.idempotency_replay_json = replay_json
    request.state.idempotency_replay_status = replay_status
    return idem_key


def replayed_response(request: Request) -> Optional[JSONResponse]:
    replay = getattr(request.state, "idempotency_replay_json", None)
    if replay is None:
        return None
    return JSONResponse(
        status_code=request.state.idempotency_replay_status,
        content=replay,
        headers={"Idempotent-Replayed": "true"},
    )


def remember_response(
    request: Request,
    db: Session,
    principal: Principal,
    body: Dict[str, Any],
    status_code: int,
) -> None:
    idem_key = getattr(request.state, "idempotency_key", None)
    if not idem_key:
        return
    IdempotencyService().store_response(
        db,
        user_id=principal.user_id,
        endpoint_key=request.state.idempotency_endpoint_key,
        idem_key=idem_key,
        request_hash=request.state.idempotency_request_hash,
        response_json=json_safe(body),
        response_status=status_code,
    )
