from __future__ import annotations

import uuid
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from fuel_procurement.schemas.primitives import Money, StrictModel


class SupplierProfileIn(StrictModel):
    contact_details: str = Field(default="", max_length=2000)
    certification: str = Field(default="", max_length=2000)
    performance_history: str = Field(default="", max_length=4000)
    price_per_liter: Optional[Money] = None


class SupplierProfileOut(BaseModel):
    user_id: uuid.UUID
    display_name: str
    email: str
    contact_details: str = ""
    certification: str = ""
    performance_history: str = ""
    price_per_liter: Optional[Decimal] = None


class SupplierList(BaseModel):
    count: int
    items: List[SupplierProfileOut]
