from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Index, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from fuel_procurement.db.base import Base


class AuditLog(Base):
    """
    Append-only audit trail.
    Stores request-id, actor, the entity touched, action, payload hash and a safe summary.
    """
    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    request_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    actor_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    actor_role: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    action: Mapped[str] = mapped_column(String(64), nullable=False)  # e.g. BID_SUBMITTED
    entity: Mapped[str] = mapped_column(String(32), nullable=False)  # boq | bid | selection | ...
    entity_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    payload_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    details_json: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        Index("ix_audit_entity", "entity", "entity_id"),
        Index("ix_audit_action", "action"),
        Index("ix_audit_created", "created_at"),
    )
