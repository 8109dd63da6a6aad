from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from fuel_procurement.schemas.bids import BidOut
from fuel_procurement.schemas.primitives import BudgetAmount, StrictModel, TermList


class EvaluateRequest(StrictModel):
    required_qualifications: TermList = Field(default_factory=list)
    required_quality_certificates: TermList = Field(default_factory=list)
    budget: Optional[BudgetAmount] = Field(
        default=None,
        description="Ceiling on a bid's total price; defaults to the stored budget for the fuel type",
    )


class SupplierSnapshot(BaseModel):
    user_id: uuid.UUID
    display_name: str
    email: str
    contact_details: Optional[str] = None
    certification: Optional[str] = None
    performance_history: Optional[str] = None


class EvaluationOut(BaseModel):
    boq_id: uuid.UUID
    winner: BidOut
    supplier: SupplierSnapshot
    total_bids: int
    qualifying_bids: int
    budget_applied: Optional[Decimal] = None
    is_final: bool = Field(..., description="True once a selection has been recorded for the BOQ")
    evaluated_at: datetime


class SelectRequest(StrictModel):
    supplier_id: uuid.UUID


class SelectionOut(BaseModel):
    id: uuid.UUID
    boq_id: uuid.UUID
    bid_id: uuid.UUID
    supplier_id: uuid.UUID
    selected_by: uuid.UUID
    decided_at: datetime
    signature_hash: str
    total_price: Decimal
    notification_status: str
    notification_detail: Optional[str] = None
    notified_at: Optional[datetime] = None
    warnings: List[str] = Field(default_factory=list)
