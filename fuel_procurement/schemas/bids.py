from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from fuel_procurement.models.enums import BidState, FuelType
from fuel_procurement.schemas.primitives import Money, StrictModel, TermList


class BidSubmit(StrictModel):
    """
    Supplier bid body.

    supplier_id is not a field: the supplier is always the authenticated
    caller, so a body carrying it is rejected as an unknown field.
    total_price is tolerated for older clients and discarded; the server
    computes it from the BOQ quantity.
    """

    bid_price_per_unit: Money
    qualifications: TermList = Field(default_factory=list)
    quality_certificates: TermList = Field(default_factory=list)
    total_price: Optional[Decimal] = Field(default=None, exclude=True)


class BidOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    boq_id: uuid.UUID
    supplier_id: uuid.UUID
    bid_price_per_unit: Decimal
    total_price: Decimal
    qualifications: List[str]
    quality_certificates: List[str]
    state: BidState
    submitted_at: datetime


class BidList(BaseModel):
    count: int
    items: List[BidOut]


class BidAdminRow(BidOut):
    """Admin view: the bid plus the BOQ, supplier and branch it belongs to."""

    fuel_type: FuelType
    boq_description: str
    supplier_name: str
    supplier_email: str
    branch_id: Optional[uuid.UUID] = None
    branch_name: Optional[str] = None


class BidAdminList(BaseModel):
    count: int
    items: List[BidAdminRow]
