from __future__ import annotations

import uuid
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from fuel_procurement.schemas.primitives import StrictModel


class BranchCreate(StrictModel):
    name: str = Field(..., min_length=1, max_length=128)
    location: str = Field(default="", max_length=256)


class BranchOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    location: str


class BranchList(BaseModel):
    count: int
    items: List[BranchOut]
