"""Tests for courier management."""

import pytest

from parcelhub.db.models import CourierType
from parcelhub.errors import ConstraintViolation, NotFoundError, ValidationError
from parcelhub.schemas import CourierPayload
from parcelhub.services.couriers import CourierService


@pytest.fixture
def service(db_session, platforms):
    return CourierService(db_session, platforms)


def payload(**fields):
    fields.setdefault("name", "Juan Dela Cruz")
    fields.setdefault("type", "2w")
    return CourierPayload(**fields)


class TestRateRules:
    """Test per-platform rate validation and defaults."""

    async def test_rates_for_served_platforms(self, service):
        courier = await service.create_courier(
            payload(is_lazada=True, is_shopee=True, laz_rate=12.5, shopee_rate=13)
        )

        assert courier.type == CourierType.TWO_WHEEL
        assert courier.laz_rate == 12.5
        assert courier.shopee_rate == 13

    async def test_missing_rate_uses_platform_default(self, service):
        courier = await service.create_courier(payload(type="4w", is_shopee=True))

        assert courier.laz_rate is None
        assert courier.shopee_rate == 20

    async def test_rate_without_platform_flag(self, service):
        with pytest.raises(ValidationError, match="lazRate"):
            await service.create_courier(payload(laz_rate=10))

    async def test_invalid_type(self, service):
        with pytest.raises(ValidationError, match="2w, 3w, or 4w"):
            await service.create_courier(payload(type="6w"))

    async def test_name_required(self, service):
        with pytest.raises(ValidationError):
            await service.create_courier(payload(name=""))


class TestCourierCrud:
    async def test_duplicate_name(self, service):
        await service.create_courier(payload())

        with pytest.raises(ConstraintViolation):
            await service.create_courier(payload(name="Juan Dela Cruz"))

    async def test_update_replaces_fields(self, service):
        courier = await service.create_courier(payload(is_lazada=True))

        updated = await service.update_courier(
            courier.id, payload(name="Maria", type="3w", is_shopee=True)
        )

        assert updated.name == "Maria"
        assert updated.type == CourierType.THREE_WHEEL
        assert updated.is_lazada is False
        assert updated.laz_rate is None

    async def test_list_newest_first(self, service):
        first = await service.create_courier(payload(name="First"))
        second = await service.create_courier(payload(name="Second"))

        couriers = await service.list_couriers()

        assert [c.id for c in couriers] == [second.id, first.id]

    async def test_delete(self, service):
        courier = await service.create_courier(payload())

        await service.delete_courier(courier.id)

        with pytest.raises(NotFoundError):
            await service.get_courier(courier.id)

    async def test_update_missing(self, service):
        with pytest.raises(NotFoundError):
            await service.update_courier(99, payload())

    async def test_id_past_integer_range_is_not_found(self, service):
        with pytest.raises(NotFoundError):
            await service.get_courier(10**20)
