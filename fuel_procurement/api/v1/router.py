from fastapi import APIRouter

from fuel_procurement.api.v1.health import router as health_router
from fuel_procurement.api.v1.boq import router as boq_router
from fuel_procurement.api.v1.bids import router as bids_router
from fuel_procurement.api.v1.evaluation import router as evaluation_router
from fuel_procurement.api.v1.suppliers import router as suppliers_router
from fuel_procurement.api.v1.budgets import router as budgets_router
from fuel_procurement.api.v1.branches import router as branches_router


v1_router = APIRouter()

# ------------------------------------------------------------------
# SYSTEM
# ------------------------------------------------------------------
v1_router.include_router(health_router, tags=["health"])

# ------------------------------------------------------------------
# PROCUREMENT LIFECYCLE
# ------------------------------------------------------------------
v1_router.include_router(boq_router, tags=["boq"])
v1_router.include_router(bids_router, tags=["bids"])
v1_router.include_router(evaluation_router, tags=["evaluation"])

# ------------------------------------------------------------------
# MASTER DATA
# ------------------------------------------------------------------
v1_router.include_router(suppliers_router, tags=["suppliers"])
v1_router.include_router(budgets_router, tags=["budgets"])
v1_router.include_router(branches_router, tags=["branches"])
