from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, Integer, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from fuel_procurement.db.base import Base


class IdempotencyKeyRecord(Base):
    """
    Stored response for a POST sent with an Idempotency-Key header.

    Scope: (user_id, endpoint_key, idem_key) is unique.
    """
    __tablename__ = "idempotency_key_records"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    endpoint_key: Mapped[str] = mapped_column(String(256), nullable=False)  # e.g. "POST:/api/v1/boq/<id>/bids"
    idem_key: Mapped[str] = mapped_column(String(128), nullable=False)

    request_hash: Mapped[str] = mapped_column(String(128), nullable=False)

    response_status: Mapped[int] = mapped_column(Integer, nullable=False, default=200)
    response_json: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("user_id", "endpoint_key", "idem_key", name="uq_idem_scope"),
    )
