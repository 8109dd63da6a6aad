from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from fuel_procurement.models.enums import FuelType
from fuel_procurement.schemas.primitives import BudgetAmount, StrictModel


class BudgetSet(StrictModel):
    fuel_type: FuelType
    budget: BudgetAmount


class BudgetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    fuel_type: FuelType
    budget: Decimal
    updated_by: Optional[uuid.UUID] = None
    updated_at: datetime
