"""HTTP API package."""

from fastapi import APIRouter

from parcelhub.api import couriers, handovers, parcels

router = APIRouter()
# Parcel routes go first so /api/parcels/... never falls into /api/{platform}/...
router.include_router(parcels.router)
router.include_router(handovers.router)
router.include_router(couriers.router)

__all__ = ["router"]
