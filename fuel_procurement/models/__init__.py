# Import every model so Base.metadata is complete for create_all and alembic.
from fuel_procurement.models.audit_log import AuditLog
from fuel_procurement.models.bid import Bid
from fuel_procurement.models.boq import Boq
from fuel_procurement.models.branch import Branch
from fuel_procurement.models.fuel_budget import FuelBudget
from fuel_procurement.models.idempotency_key import IdempotencyKeyRecord
from fuel_procurement.models.selection import SupplierSelection
from fuel_procurement.models.user import SupplierProfile, User

__all__ = [
    "AuditLog",
    "Bid",
    "Boq",
    "Branch",
    "FuelBudget",
    "IdempotencyKeyRecord",
    "SupplierProfile",
    "SupplierSelection",
    "User",
]
