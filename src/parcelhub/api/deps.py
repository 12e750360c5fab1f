"""Shared FastAPI dependencies."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from parcelhub.db import get_db
from parcelhub.services import (
    CourierService,
    HandoverService,
    ParcelQueryService,
    PlatformRegistry,
)


def get_platforms(request: Request) -> PlatformRegistry:
    return request.app.state.platforms


async def get_handover_service(
    db: AsyncSession = Depends(get_db),
    platforms: PlatformRegistry = Depends(get_platforms),
) -> HandoverService:
    return HandoverService(db, platforms)


async def get_parcel_service(db: AsyncSession = Depends(get_db)) -> ParcelQueryService:
    return ParcelQueryService(db)


async def get_courier_service(
    db: AsyncSession = Depends(get_db),
    platforms: PlatformRegistry = Depends(get_platforms),
) -> CourierService:
    return CourierService(db, platforms)
