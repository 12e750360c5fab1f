"""Service for managing courier profiles."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parcelhub.db import fits_integer, transaction
from parcelhub.db.models import Courier, CourierType, Platform
from parcelhub.errors import NotFoundError, ValidationError
from parcelhub.schemas import CourierPayload
from parcelhub.services.platform_loader import PlatformRegistry

logger = logging.getLogger(__name__)


class CourierService:
    """CRUD over couriers with per-platform rate rules."""

    def __init__(self, db: AsyncSession, platforms: PlatformRegistry):
        self.db = db
        self.platforms = platforms

    def _validate(self, payload: CourierPayload) -> dict:
        """Check a payload and resolve it into column values.

        A rate is only kept for a platform the courier serves; a missing rate
        for a served platform falls back to the platform's default for the
        vehicle class.
        """
        if not payload.name or not payload.type:
            raise ValidationError("Name and type are required")

        try:
            courier_type = CourierType(payload.type)
        except ValueError:
            raise ValidationError("Type must be 2w, 3w, or 4w")

        is_lazada = bool(payload.is_lazada)
        is_shopee = bool(payload.is_shopee)

        if payload.laz_rate is not None and not is_lazada:
            raise ValidationError("lazRate can only be set for Lazada couriers")
        if payload.shopee_rate is not None and not is_shopee:
            raise ValidationError("shopeeRate can only be set for Shopee couriers")

        laz_rate = payload.laz_rate
        if is_lazada and laz_rate is None:
            laz_rate = self.platforms.get(Platform.LAZADA).default_rate(courier_type)

        shopee_rate = payload.shopee_rate
        if is_shopee and shopee_rate is None:
            shopee_rate = self.platforms.get(Platform.SHOPEE).default_rate(courier_type)

        return {
            "name": payload.name.strip(),
            "type": courier_type,
            "is_lazada": is_lazada,
            "is_shopee": is_shopee,
            "laz_rate": laz_rate,
            "shopee_rate": shopee_rate,
        }

    async def list_couriers(self) -> list[Courier]:
        result = await self.db.execute(
            select(Courier).order_by(Courier.created_at.desc(), Courier.id.desc())
        )
        return list(result.scalars().all())

    async def get_courier(self, courier_id: int) -> Courier:
        courier = None
        if fits_integer(courier_id):
            courier = await self.db.get(Courier, courier_id)
        if courier is None:
            raise NotFoundError("Courier not found")
        return courier

    async def create_courier(self, payload: CourierPayload) -> Courier:
        values = self._validate(payload)

        async with transaction(self.db, "create courier"):
            courier = Courier(**values)
            self.db.add(courier)

        logger.info("Created courier %s (%s)", courier.id, courier.name)
        return courier

    async def update_courier(self, courier_id: int, payload: CourierPayload) -> Courier:
        """Replace every editable field of a courier."""
        values = self._validate(payload)

        async with transaction(self.db, "update courier"):
            courier = await self.get_courier(courier_id)
            for key, value in values.items():
                setattr(courier, key, value)

        await self.db.refresh(courier)
        return courier

    async def delete_courier(self, courier_id: int) -> None:
        async with transaction(self.db, "delete courier"):
            courier = await self.get_courier(courier_id)
            await self.db.delete(courier)

        logger.info("Deleted courier %s", courier_id)
