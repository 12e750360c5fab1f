"""Services package."""

from parcelhub.services.couriers import CourierService
from parcelhub.services.handovers import HandoverService
from parcelhub.services.parcels import ParcelQueryService
from parcelhub.services.platform_loader import PlatformRegistry

__all__ = ["CourierService", "HandoverService", "ParcelQueryService", "PlatformRegistry"]
