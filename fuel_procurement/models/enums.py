from __future__ import annotations
from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    BRANCH_MANAGER = "BRANCH_MANAGER"
    SUPPLIER = "SUPPLIER"


class FuelType(str, Enum):
    Petrol = "Petrol"
    Diesel = "Diesel"
    Gasoline = "Gasoline"


class BidState(str, Enum):
    submitted = "submitted"
    selected = "selected"
    not_selected = "not_selected"


class BoqStatus(str, Enum):
    # derived from the presence of a selection, never stored
    open = "open"
    selected = "selected"


class NotificationStatus(str, Enum):
    pending = "pending"
    sent = "sent"
    logged = "logged"  # no SMTP relay configured; message written to the log
    failed = "failed"
