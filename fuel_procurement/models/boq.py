from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Index, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from fuel_procurement.db.base import Base


class Boq(Base):
    """
    Bill of Quantities entry: what the buyer wants suppliers to bid on.

    Status is not stored. A BOQ is "selected" exactly when a row exists in
    supplier_selections for it.
    """
    __tablename__ = "boq_entries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    fuel_type: Mapped[str] = mapped_column(String(32), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False)
    unit: Mapped[str] = mapped_column(String(32), nullable=False, default="Liters")
    estimated_price_per_unit: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    deadline: Mapped[date] = mapped_column(Date, nullable=False)

    branch_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("branches.id", ondelete="SET NULL"), nullable=True
    )
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_boq_quantity_positive"),
        CheckConstraint("estimated_price_per_unit > 0", name="ck_boq_price_positive"),
        Index("ix_boq_fuel_type", "fuel_type"),
        Index("ix_boq_branch", "branch_id"),
    )
