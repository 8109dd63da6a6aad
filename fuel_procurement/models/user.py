from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fuel_procurement.db.base import Base


class User(Base):
    """
    Identity record for anyone the service refers to by id.

    Credentials are not stored here; tokens are issued by the surrounding
    application and carry `sub` = users.id.
    """
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(256), nullable=False)
    display_name: Mapped[str] = mapped_column(String(256), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False)

    branch_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("branches.id", ondelete="SET NULL"), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    profile: Mapped[Optional["SupplierProfile"]] = relationship(
        back_populates="user", uselist=False, lazy="selectin"
    )

    __table_args__ = (
        Index("ix_users_role", "role"),
    )


class SupplierProfile(Base):
    __tablename__ = "supplier_profiles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )

    contact_details: Mapped[str] = mapped_column(Text, nullable=False, default="")
    certification: Mapped[str] = mapped_column(Text, nullable=False, default="")
    performance_history: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # indicative list price, not a bid
    price_per_liter: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 2), nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    user: Mapped[User] = relationship(back_populates="profile")
