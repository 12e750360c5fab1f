"""Database package."""

from parcelhub.db.database import SQL_INT_MAX, Database, fits_integer, get_db, transaction
from parcelhub.db.models import (
    Base,
    Courier,
    CourierType,
    Handover,
    HandoverStatus,
    Parcel,
    ParcelEventLog,
    Platform,
)

__all__ = [
    "Base",
    "Courier",
    "CourierType",
    "Database",
    "Handover",
    "HandoverStatus",
    "Parcel",
    "ParcelEventLog",
    "Platform",
    "SQL_INT_MAX",
    "fits_integer",
    "get_db",
    "transaction",
]
