from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Numeric, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from fuel_procurement.db.base import Base


class FuelBudget(Base):
    """Procurement ceiling per fuel type, applied to a bid's total price."""
    __tablename__ = "fuel_budgets"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    fuel_type: Mapped[str] = mapped_column(String(32), nullable=False)
    budget: Mapped[Decimal] = mapped_column(Numeric(28, 2), nullable=False)

    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("fuel_type", name="uq_fuel_budget_type"),
        CheckConstraint("budget > 0", name="ck_fuel_budget_positive"),
    )
