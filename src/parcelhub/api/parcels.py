"""API routes for parcels."""

from dataclasses import dataclass
from typing import Optional

from fastapi import APIRouter, Depends, Query

from parcelhub.api.deps import get_parcel_service
from parcelhub.config import settings
from parcelhub.db.models import Platform
from parcelhub.schemas import (
    FilterOptionsRead,
    HandoverSummary,
    PaginationRead,
    ParcelEventLogRead,
    ParcelWithHandover,
    TrackingNumbersPayload,
)
from parcelhub.services.parcels import (
    FilterOptions,
    ParcelFilters,
    ParcelQueryService,
    SortSpec,
    parse_handover_ref,
    split_values,
)

router = APIRouter(tags=["parcels"])


@dataclass
class ListingParams:
    filters: ParcelFilters
    sort: SortSpec
    page: int
    limit: int


def listing_params(
    search: Optional[str] = None,
    status: Optional[list[str]] = Query(None),
    direction: Optional[list[str]] = Query(None),
    port_code: Optional[str] = Query(None, alias="portCode"),
    legacy_port_code: Optional[str] = Query(None, alias="port_code"),
    handover_id: Optional[str] = Query(None, alias="handoverId"),
    updated_by: Optional[list[str]] = Query(None, alias="updatedBy"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=settings.max_page_size),
) -> ListingParams:
    """Parse the query string shared by every parcel listing."""
    port_code = port_code or legacy_port_code
    return ListingParams(
        filters=ParcelFilters(
            search=search.strip() if search else None,
            statuses=split_values(status),
            directions=split_values(direction),
            port_code=port_code.strip() if port_code else None,
            handover=parse_handover_ref(handover_id),
            updated_by=split_values(updated_by),
        ),
        sort=SortSpec.parse(sort_by, sort_order),
        page=page,
        limit=limit or settings.parcel_page_size,
    )


async def _list(
    params: ListingParams, platform: Optional[Platform], service: ParcelQueryService
) -> dict:
    params.filters.platform = platform
    result = await service.list_parcels(
        params.filters, params.sort, page=params.page, page_size=params.limit
    )
    return {
        "success": True,
        "data": {
            "parcels": [ParcelWithHandover.model_validate(p) for p in result.items],
            "pagination": PaginationRead.model_validate(result.pagination),
        },
    }


def _options_response(options: FilterOptions) -> dict:
    return {
        "success": True,
        "data": FilterOptionsRead(
            statuses=options.statuses,
            directions=options.directions,
            updated_by=options.updated_by,
            port_codes=options.port_codes,
            handovers=[HandoverSummary.model_validate(h) for h in options.handovers],
        ),
    }


# --------------------------------------------------------------------------- #
# All parcels                                                                 #
# --------------------------------------------------------------------------- #
@router.get("/api/parcels")
async def list_parcels(
    platform: Optional[Platform] = None,
    params: ListingParams = Depends(listing_params),
    service: ParcelQueryService = Depends(get_parcel_service),
):
    """List parcels, optionally restricted to one platform's view."""
    return await _list(params, platform, service)


@router.get("/api/parcels/filters")
async def parcel_filter_options(
    platform: Optional[Platform] = None,
    service: ParcelQueryService = Depends(get_parcel_service),
):
    """Distinct values available for the parcel filters."""
    return _options_response(await service.filter_options(platform))


@router.get("/api/parcels/{tracking_number}")
async def parcel_detail(
    tracking_number: str,
    service: ParcelQueryService = Depends(get_parcel_service),
):
    """Show a parcel with its handover and event history."""
    parcel = await service.get_parcel(tracking_number)
    event_logs = await service.get_event_logs(tracking_number)
    return {
        "success": True,
        "data": {
            "parcel": ParcelWithHandover.model_validate(parcel),
            "eventLogs": [ParcelEventLogRead.model_validate(e) for e in event_logs],
        },
    }


@router.get("/api/parcels/{tracking_number}/event-logs")
async def parcel_event_logs(
    tracking_number: str,
    service: ParcelQueryService = Depends(get_parcel_service),
):
    """Event history of a parcel, newest first."""
    event_logs = await service.get_event_logs(tracking_number)
    return {
        "success": True,
        "data": [ParcelEventLogRead.model_validate(e) for e in event_logs],
    }


# --------------------------------------------------------------------------- #
# Platform views                                                              #
# --------------------------------------------------------------------------- #
@router.get("/api/{platform}/parcels")
async def list_platform_parcels(
    platform: Platform,
    params: ListingParams = Depends(listing_params),
    service: ParcelQueryService = Depends(get_parcel_service),
):
    """List parcels of a platform's handovers plus parcels with no handover."""
    return await _list(params, platform, service)


@router.get("/api/{platform}/parcels/filters")
async def platform_parcel_filter_options(
    platform: Platform,
    service: ParcelQueryService = Depends(get_parcel_service),
):
    """Distinct filter values within a platform's view."""
    return _options_response(await service.filter_options(platform))


@router.delete("/api/{platform}/parcels")
async def delete_platform_parcels(
    platform: Platform,
    payload: TrackingNumbersPayload,
    service: ParcelQueryService = Depends(get_parcel_service),
):
    """Delete parcels by tracking number within a platform's view."""
    deleted = await service.delete_parcels(payload.tracking_numbers, platform)
    return {
        "success": True,
        "deletedCount": deleted,
        "message": f"Successfully deleted {deleted} parcel(s)",
    }
