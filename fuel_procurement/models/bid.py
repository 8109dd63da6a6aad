from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import List

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from fuel_procurement.db.base import Base
from fuel_procurement.models.enums import BidState


class Bid(Base):
    """
    A supplier's priced response to one BOQ entry.

    - One bid per (boq_id, supplier_id)
    - total_price is always bid_price_per_unit * boq.quantity, computed here,
      never taken from the client
    - submitted_at is server time and never changes
    - never deleted; losing bids are marked not_selected
    """
    __tablename__ = "bids"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    boq_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("boq_entries.id", ondelete="RESTRICT"), nullable=False
    )
    supplier_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )

    bid_price_per_unit: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(28, 5), nullable=False)

    qualifications: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    quality_certificates: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    state: Mapped[str] = mapped_column(
        String(16), nullable=False, default=BidState.submitted.value
    )

    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("boq_id", "supplier_id", name="uq_bid_boq_supplier"),
        CheckConstraint("bid_price_per_unit > 0", name="ck_bid_price_positive"),
        Index("ix_bids_boq_submitted", "boq_id", "submitted_at"),
        Index("ix_bids_supplier", "supplier_id"),
    )
