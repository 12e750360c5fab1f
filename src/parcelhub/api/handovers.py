"""API routes for handovers."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from parcelhub.api.deps import get_handover_service, get_parcel_service
from parcelhub.config import settings
from parcelhub.db.models import Platform
from parcelhub.errors import ValidationError
from parcelhub.schemas import (
    HandoverCreate,
    HandoverListItem,
    HandoverRead,
    HandoverStatusUpdate,
    HandoverStatusUpdateById,
    HandoverWithParcels,
    PaginationRead,
    ParcelRead,
    TrackingNumbersPayload,
)
from parcelhub.services.dedup import TrackingCandidate
from parcelhub.services.handovers import HandoverMeta, HandoverService, IngestionResult
from parcelhub.services.parcels import ParcelFilters, ParcelQueryService, SortSpec, split_values

router = APIRouter(tags=["handovers"])


def _candidates(payload: HandoverCreate) -> list[TrackingCandidate]:
    candidates = [
        TrackingCandidate(
            tracking_number=item.tracking_no,
            port_code=item.port_code,
            package_type=item.package_type,
        )
        for item in payload.extracted_data
    ]
    candidates.extend(
        TrackingCandidate(tracking_number=tn, port_code="", package_type="")
        for tn in payload.tracking_numbers
    )
    return candidates


def _ingestion_response(result: IngestionResult, label: str) -> dict:
    return {
        "success": True,
        "handover": HandoverWithParcels.model_validate(result.handover),
        "addedCount": result.added_count,
        "duplicatesSkipped": result.dedup.duplicate_count,
        "internalDuplicates": result.dedup.internal_duplicate_count,
        "databaseDuplicates": result.dedup.database_duplicate_count,
        "blankSkipped": result.dedup.blank_count,
        "message": result.message(label),
    }


def _handover_list(rows) -> list[HandoverListItem]:
    return [
        HandoverListItem(
            **HandoverRead.model_validate(handover).model_dump(), parcel_count=count
        )
        for handover, count in rows
    ]


async def _create(
    payload: HandoverCreate, platform: Platform, service: HandoverService
) -> dict:
    meta = HandoverMeta(
        handover_date=payload.handover_data.handover_date,
        platform=platform,
        file_name=payload.handover_data.file_name,
    )
    result = await service.create_handover(meta, _candidates(payload))
    return _ingestion_response(result, service.platforms.get(platform).name)


# --------------------------------------------------------------------------- #
# Generic handovers                                                           #
# --------------------------------------------------------------------------- #
@router.post("/api/handovers")
async def create_handover(
    payload: HandoverCreate,
    service: HandoverService = Depends(get_handover_service),
):
    """Create a handover; the platform comes from the payload, Lazada by default."""
    platform = payload.handover_data.type or Platform.LAZADA
    return await _create(payload, platform, service)


@router.get("/api/handovers")
async def list_handovers(service: HandoverService = Depends(get_handover_service)):
    """List all handovers, newest first."""
    return {"success": True, "handovers": _handover_list(await service.list_handovers())}


@router.put("/api/handovers")
async def update_handover_status_by_body(
    payload: HandoverStatusUpdateById,
    service: HandoverService = Depends(get_handover_service),
):
    """Update a handover status with the id in the body."""
    if not payload.id or not payload.status:
        raise ValidationError("Handover ID and status are required")

    handover = await service.set_status(payload.id, payload.status)
    return {"success": True, "handover": HandoverRead.model_validate(handover)}


@router.get("/api/handovers/{handover_id}")
async def handover_detail(
    handover_id: int,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=settings.max_page_size),
    status: Optional[list[str]] = Query(None),
    updated_by: Optional[list[str]] = Query(None),
    direction: Optional[list[str]] = Query(None),
    service: HandoverService = Depends(get_handover_service),
    parcels: ParcelQueryService = Depends(get_parcel_service),
):
    """Show a handover with one page of its parcels and the filter values present."""
    handover = await service.get_handover(handover_id)
    total_parcels = await service.count_parcels(handover_id)

    filters = ParcelFilters(
        handover=handover_id,
        statuses=split_values(status),
        updated_by=split_values(updated_by),
        directions=split_values(direction),
    )
    result = await parcels.list_parcels(
        filters,
        SortSpec(field="created_at", order="desc"),
        page=page,
        page_size=limit or settings.handover_parcel_page_size,
    )
    options = await parcels.filter_options(handover_id=handover_id)

    return {
        "success": True,
        "handover": {
            **HandoverRead.model_validate(handover).model_dump(),
            "totalParcels": total_parcels,
        },
        "parcels": [ParcelRead.model_validate(p) for p in result.items],
        "availableStatuses": options.statuses,
        "availableUpdatedBy": options.updated_by,
        "availableDirections": options.directions,
        "pagination": PaginationRead.model_validate(result.pagination),
    }


@router.patch("/api/handovers/{handover_id}")
async def update_handover_status(
    handover_id: int,
    payload: HandoverStatusUpdate,
    service: HandoverService = Depends(get_handover_service),
):
    """Set a handover to pending or done."""
    if not payload.status:
        raise ValidationError("Status is required")

    handover = await service.set_status(handover_id, payload.status)
    return {"success": True, "handover": HandoverRead.model_validate(handover)}


@router.delete("/api/handovers/{handover_id}")
async def delete_handover(
    handover_id: int,
    service: HandoverService = Depends(get_handover_service),
):
    """Delete a handover and all of its parcels."""
    deleted = await service.delete_handover_cascade(handover_id)
    return {
        "success": True,
        "deletedParcelCount": deleted,
        "message": f"Handover and {deleted} related parcels deleted successfully",
    }


# --------------------------------------------------------------------------- #
# Platform handovers                                                          #
# --------------------------------------------------------------------------- #
@router.get("/api/{platform}/handovers")
async def list_platform_handovers(
    platform: Platform,
    service: HandoverService = Depends(get_handover_service),
):
    """List the handovers of one platform, newest first."""
    rows = await service.list_handovers(platform)
    return {"success": True, "handovers": _handover_list(rows)}


@router.post("/api/{platform}/handovers")
async def create_platform_handover(
    platform: Platform,
    payload: HandoverCreate,
    service: HandoverService = Depends(get_handover_service),
):
    """Create a handover whose type is forced to the platform in the path."""
    return await _create(payload, platform, service)


@router.post("/api/{platform}/handovers/{handover_id}/add-tracking")
async def add_tracking_numbers(
    platform: Platform,
    handover_id: int,
    payload: TrackingNumbersPayload,
    service: HandoverService = Depends(get_handover_service),
):
    """Append tracking numbers to an existing handover of this platform."""
    result = await service.append_tracking(handover_id, payload.tracking_numbers, platform)
    return {
        "success": True,
        "addedCount": result.added_count,
        "duplicatesSkipped": result.dedup.duplicate_count,
        "internalDuplicates": result.dedup.internal_duplicate_count,
        "databaseDuplicates": result.dedup.database_duplicate_count,
        "blankSkipped": result.dedup.blank_count,
        "quantity": result.handover.quantity,
        "message": result.message,
    }


@router.delete("/api/{platform}/handovers/{handover_id}")
async def delete_platform_handover(
    platform: Platform,
    handover_id: int,
    service: HandoverService = Depends(get_handover_service),
):
    """Delete a handover of this platform and all of its parcels."""
    deleted = await service.delete_handover_cascade(handover_id, platform)
    label = service.platforms.get(platform).name
    return {
        "success": True,
        "deletedParcelCount": deleted,
        "message": (
            f"{label} handover deleted successfully. "
            f"{deleted} tracking records were also removed."
        ),
    }
