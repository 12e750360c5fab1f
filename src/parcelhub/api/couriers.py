"""API routes for couriers."""

from fastapi import APIRouter, Depends

from parcelhub.api.deps import get_courier_service
from parcelhub.schemas import CourierPayload, CourierRead
from parcelhub.services.couriers import CourierService

router = APIRouter(prefix="/api/couriers", tags=["couriers"])


@router.get("")
async def list_couriers(service: CourierService = Depends(get_courier_service)):
    couriers = await service.list_couriers()
    return {"success": True, "couriers": [CourierRead.model_validate(c) for c in couriers]}


@router.post("")
async def create_courier(
    payload: CourierPayload,
    service: CourierService = Depends(get_courier_service),
):
    courier = await service.create_courier(payload)
    return {
        "success": True,
        "courier": CourierRead.model_validate(courier),
        "message": "Courier created successfully",
    }


@router.get("/{courier_id}")
async def get_courier(
    courier_id: int,
    service: CourierService = Depends(get_courier_service),
):
    courier = await service.get_courier(courier_id)
    return {"success": True, "courier": CourierRead.model_validate(courier)}


@router.put("/{courier_id}")
async def update_courier(
    courier_id: int,
    payload: CourierPayload,
    service: CourierService = Depends(get_courier_service),
):
    """Replace a courier's details."""
    courier = await service.update_courier(courier_id, payload)
    return {
        "success": True,
        "courier": CourierRead.model_validate(courier),
        "message": "Courier updated successfully",
    }


@router.delete("/{courier_id}")
async def delete_courier(
    courier_id: int,
    service: CourierService = Depends(get_courier_service),
):
    await service.delete_courier(courier_id)
    return {"success": True, "message": "Courier deleted successfully"}
