from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from fuel_procurement.db.base import Base
from fuel_procurement.models.enums import NotificationStatus


class SupplierSelection(Base):
    """
    Terminal award decision for a BOQ.

    The unique constraint on boq_id is what serializes concurrent
    selections: of two racing inserts exactly one commits.
    """
    __tablename__ = "supplier_selections"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    boq_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("boq_entries.id", ondelete="RESTRICT"), nullable=False
    )
    bid_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bids.id", ondelete="RESTRICT"), nullable=False
    )
    supplier_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )

    selected_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    decided_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # sha256 over the canonical decision payload
    signature_hash: Mapped[str] = mapped_column(String(128), nullable=False)

    notification_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=NotificationStatus.pending.value
    )
    notification_detail: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("boq_id", name="uq_selection_boq"),
    )
