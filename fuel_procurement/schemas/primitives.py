from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, List

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


# --- Numeric primitives (structural; ranges are checked by the services) ---
Quantity = Annotated[Decimal, Field(max_digits=18, decimal_places=3)]
Money = Annotated[Decimal, Field(max_digits=18, decimal_places=2)]
BudgetAmount = Annotated[Decimal, Field(max_digits=28, decimal_places=2)]


def split_terms(value: Any) -> Any:
    """
    Accepts either a list of strings or one comma-separated string, the
    shape the supplier form sends. Trimming and blank removal happen in
    the services, which also serve callers that bypass this schema.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return value.split(",")
    return value


TermList = Annotated[List[str], BeforeValidator(split_terms)]


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ErrorDetail(BaseModel):
    code: str
    message: str
