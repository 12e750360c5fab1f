"""Database models."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Platform(str, Enum):
    """Marketplace a handover belongs to."""

    LAZADA = "lazada"
    SHOPEE = "shopee"


class HandoverStatus(str, Enum):
    PENDING = "pending"
    DONE = "done"


class CourierType(str, Enum):
    """Vehicle class of a courier."""

    TWO_WHEEL = "2w"
    THREE_WHEEL = "3w"
    FOUR_WHEEL = "4w"


# Parcel statuses are an open set written by downstream processing; only the
# ingestion default is fixed here.
PARCEL_STATUS_PENDING = "pending"
SYSTEM_ACTOR = "system"


def _enum_column(enum_cls: type[Enum]) -> SAEnum:
    """Store enum values (not member names) in a plain string column."""
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=20,
        values_callable=lambda members: [m.value for m in members],
    )


class Courier(Base):
    """A delivery agent with per-platform eligibility and pay rates."""

    __tablename__ = "couriers"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True)
    is_lazada: Mapped[bool] = mapped_column(default=False)
    is_shopee: Mapped[bool] = mapped_column(default=False)
    laz_rate: Mapped[float | None] = mapped_column(nullable=True)
    shopee_rate: Mapped[float | None] = mapped_column(nullable=True)
    type: Mapped[CourierType] = mapped_column(_enum_column(CourierType))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class Handover(Base):
    """A batch of parcels handed over on one date for one platform."""

    __tablename__ = "handovers"

    id: Mapped[int] = mapped_column(primary_key=True)
    handover_date: Mapped[date] = mapped_column(Date)
    # Denormalised parcel count, only changed in the same transaction as the
    # parcel rows it counts.
    quantity: Mapped[int] = mapped_column(Integer, default=0)
    file_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    platform: Mapped[str] = mapped_column(String(50), default="manual")
    type: Mapped[Platform] = mapped_column(
        _enum_column(Platform), default=Platform.LAZADA, index=True
    )
    status: Mapped[HandoverStatus] = mapped_column(
        _enum_column(HandoverStatus), default=HandoverStatus.PENDING
    )
    date_added: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    # Relationships
    parcels: Mapped[list["Parcel"]] = relationship(back_populates="handover")


class Parcel(Base):
    """A shipment unit identified by its globally unique tracking number."""

    __tablename__ = "parcels"

    tracking_number: Mapped[str] = mapped_column(String(100), primary_key=True)
    handover_id: Mapped[int | None] = mapped_column(
        ForeignKey("handovers.id"), nullable=True, index=True
    )

    port_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    package_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    direction: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(
        String(100), default=PARCEL_STATUS_PENDING, index=True
    )
    updated_by: Mapped[str] = mapped_column(String(255), default=SYSTEM_ACTOR)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, index=True
    )

    # Relationships
    handover: Mapped[Optional["Handover"]] = relationship(back_populates="parcels")


class ParcelEventLog(Base):
    """Append-only history entry for a tracking number."""

    __tablename__ = "parcel_event_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    # Loose reference: history outlives the parcel row it describes.
    tracking_number: Mapped[str] = mapped_column(String(100), index=True)

    event: Mapped[str] = mapped_column(String(100))
    status: Mapped[str | None] = mapped_column(String(100), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
