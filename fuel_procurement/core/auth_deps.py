from __future__ import annotations

import uuid

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from fuel_procurement.core.security import decode_token
from fuel_procurement.models.enums import UserRole
from fuel_procurement.policies.rbac import Principal

bearer = HTTPBearer(auto_error=True)


def get_current_principal(
    request: Request,
    creds: HTTPAuthorizationCredentials = Depends(bearer),
) -> Principal:
    """
    Canonical authentication dependency.

    Guarantees:
    - JWT is valid
    - sub (user id) and role are present
    - role is a valid UserRole
    - branch_id, when present, is a UUID

    The principal is passed explicitly into every service call; nothing
    downstream reads identity from ambient state.
    """
    try:
        payload = decode_token(creds.credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token.")

    sub = payload.get("sub")
    role = payload.get("role")
    display_name = payload.get("display_name") or "Unknown"
    branch_id = payload.get("branch_id")

    if not sub or not role:
        raise HTTPException(status_code=401, detail="Token missing required claims.")

    try:
        user_id = uuid.UUID(str(sub))
        role_enum = UserRole(role)
        branch_uuid = uuid.UUID(str(branch_id)) if branch_id else None
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid claims in token.")

    principal = Principal(
        user_id=user_id,
        role=role_enum,
        display_name=str(display_name),
        branch_id=branch_uuid,
    )

    request.state.principal = principal
    return principal
