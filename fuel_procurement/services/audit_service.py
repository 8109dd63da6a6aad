from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from fuel_procurement.core.hashing import canonical_hash, json_safe
from fuel_procurement.core.logging import request_id_var
from fuel_procurement.models.audit_log import AuditLog
from fuel_procurement.policies.rbac import Principal


def _now():
    return datetime.now(timezone.utc)


class AuditAction:
    # BOQ registry
    BOQ_CREATED = "BOQ_CREATED"
    BOQ_UPDATED = "BOQ_UPDATED"
    BOQ_DELETED = "BOQ_DELETED"

    # Bid ledger
    BID_SUBMITTED = "BID_SUBMITTED"
    BID_TOTALS_RECOMPUTED = "BID_TOTALS_RECOMPUTED"

    # Selection
    SUPPLIER_SELECTED = "SUPPLIER_SELECTED"
    SELECTION_NOTIFIED = "SELECTION_NOTIFIED"

    # Master data
    BUDGET_SET = "BUDGET_SET"
    BRANCH_CREATED = "BRANCH_CREATED"
    SUPPLIER_PROFILE_SAVED = "SUPPLIER_PROFILE_SAVED"


class AuditService:
    def write(
        self,
        db: Session,
        *,
        actor: Optional[Principal],
        action: str,
        entity: str,
        entity_id: Optional[Any],
        details: Dict[str, Any],
    ) -> AuditLog:
        """
        Append-only audit insert.

        The row joins the caller's transaction so the audit entry commits
        or rolls back together with the change it describes.
        details MUST be safe: no other supplier's prices in a supplier-facing action.
        """
        rid = request_id_var.get()
        row = AuditLog(
            created_at=_now(),
            request_id=None if rid == "-" else rid,
            actor_user_id=actor.user_id if actor else None,
            actor_role=actor.role.value if actor else None,
            action=action,
            entity=entity,
            entity_id=str(entity_id) if entity_id is not None else None,
            payload_hash=canonical_hash(details),
            details_json=json_safe(details),
        )
        db.add(row)
        return row

    def list_for_entity(self, db: Session, *, entity: str, entity_id: Any) -> List[AuditLog]:
        return list(
            db.execute(
                select(AuditLog)
                .where(AuditLog.entity == entity, AuditLog.entity_id == str(entity_id))
                .order_by(AuditLog.created_at.asc(), AuditLog.id.asc())
            ).scalars().all()
        )
