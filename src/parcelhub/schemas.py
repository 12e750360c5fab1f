"""Request and response models for the HTTP API."""

from datetime import date, datetime
from typing import Optional

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from parcelhub.db.models import CourierType, HandoverStatus, Platform


class CamelInput(BaseModel):
    """Accepts camelCase keys, and snake_case as a fallback."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CamelOutput(BaseModel):
    """Reads attributes by field name and emits camelCase keys."""

    model_config = ConfigDict(
        alias_generator=AliasGenerator(serialization_alias=to_camel),
        from_attributes=True,
    )


# --------------------------------------------------------------------------- #
# Handovers                                                                   #
# --------------------------------------------------------------------------- #
class ExtractedParcel(CamelInput):
    tracking_no: str
    port_code: Optional[str] = None
    package_type: Optional[str] = None


class HandoverData(CamelInput):
    handover_date: date = Field(alias="date")
    file_name: Optional[str] = None
    type: Optional[Platform] = None


class HandoverCreate(CamelInput):
    handover_data: HandoverData
    extracted_data: list[ExtractedParcel] = Field(default_factory=list)
    # Plain tracking numbers, as sent by manual Shopee entry.
    tracking_numbers: list[str] = Field(default_factory=list)


class TrackingNumbersPayload(CamelInput):
    tracking_numbers: list[str] = Field(default_factory=list)


class HandoverStatusUpdate(BaseModel):
    status: Optional[str] = None


class HandoverStatusUpdateById(BaseModel):
    id: Optional[int] = None
    status: Optional[str] = None


class HandoverSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    file_name: Optional[str] = None
    handover_date: date
    status: HandoverStatus
    platform: str
    type: Platform


class HandoverRead(HandoverSummary):
    quantity: int
    date_added: datetime


class HandoverListItem(HandoverRead):
    parcel_count: int = Field(serialization_alias="parcelCount")


# --------------------------------------------------------------------------- #
# Parcels                                                                     #
# --------------------------------------------------------------------------- #
class ParcelRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tracking_number: str
    handover_id: Optional[int] = None
    port_code: Optional[str] = None
    package_type: Optional[str] = None
    direction: Optional[str] = None
    status: str
    updated_by: str
    created_at: datetime
    updated_at: datetime


class ParcelWithHandover(ParcelRead):
    handover: Optional[HandoverSummary] = None


class HandoverWithParcels(HandoverRead):
    parcels: list[ParcelRead] = Field(default_factory=list)


class ParcelEventLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tracking_number: str
    event: str
    status: Optional[str] = None
    updated_by: Optional[str] = None
    details: Optional[str] = None
    created_at: datetime


class PaginationRead(CamelOutput):
    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool
    limit: int


class FilterOptionsRead(CamelOutput):
    statuses: list[str]
    directions: list[str]
    updated_by: list[str]
    port_codes: list[str]
    handovers: list[HandoverSummary]


# --------------------------------------------------------------------------- #
# Couriers                                                                    #
# --------------------------------------------------------------------------- #
class CourierPayload(CamelInput):
    # name and type are checked by the service so the error matches the API
    # contract instead of pydantic's default wording.
    name: Optional[str] = None
    type: Optional[str] = None
    is_lazada: Optional[bool] = False
    is_shopee: Optional[bool] = False
    laz_rate: Optional[float] = None
    shopee_rate: Optional[float] = None


class CourierRead(CamelOutput):
    id: int
    name: str
    is_lazada: bool
    is_shopee: bool
    laz_rate: Optional[float] = None
    shopee_rate: Optional[float] = None
    type: CourierType
    created_at: datetime
    updated_at: datetime
