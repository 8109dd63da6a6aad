from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from fuel_procurement.models.enums import BoqStatus, FuelType
from fuel_procurement.schemas.primitives import Money, Quantity, StrictModel


class BoqCreate(StrictModel):
    fuel_type: FuelType
    description: str = Field(default="", max_length=2000)
    quantity: Quantity = Field(..., description="Requested liters")
    unit: str = Field(default="Liters", min_length=1, max_length=32)
    estimated_price_per_unit: Money
    deadline: date = Field(..., description="Calendar date; bids close at the end of this day")
    branch_id: Optional[uuid.UUID] = None


class BoqUpdate(StrictModel):
    """Partial update; omitted fields are left unchanged."""

    fuel_type: Optional[FuelType] = None
    description: Optional[str] = Field(default=None, max_length=2000)
    quantity: Optional[Quantity] = None
    unit: Optional[str] = Field(default=None, min_length=1, max_length=32)
    estimated_price_per_unit: Optional[Money] = None
    deadline: Optional[date] = None
    branch_id: Optional[uuid.UUID] = None


class BoqOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    fuel_type: FuelType
    description: str
    quantity: Decimal
    unit: str
    estimated_price_per_unit: Decimal
    deadline: date
    branch_id: Optional[uuid.UUID] = None
    created_by: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    status: BoqStatus = BoqStatus.open


class BoqList(BaseModel):
    count: int
    items: List[BoqOut]
