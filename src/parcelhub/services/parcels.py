"""Service for listing, inspecting and removing parcels."""

import logging
import math
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from sqlalchemy import delete, distinct, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager, selectinload

from parcelhub.db import fits_integer, transaction
from parcelhub.db.models import Handover, Parcel, ParcelEventLog, Platform
from parcelhub.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

UNATTACHED = "unattached"
# "null" is what older clients send for parcels without a handover.
_UNATTACHED_ALIASES = {UNATTACHED, "null"}

SORT_COLUMNS = {
    "updated_at": Parcel.updated_at,
    "created_at": Parcel.created_at,
    "tracking_number": Parcel.tracking_number,
    "handover_id": Parcel.handover_id,
    "handover": Handover.handover_date,
    "handover_date": Handover.handover_date,
}


def parse_handover_ref(value: str | int | None) -> int | str | None:
    """Turn a ``handoverId`` query value into an id, ``UNATTACHED`` or None."""
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    if value.lower() in _UNATTACHED_ALIASES:
        return UNATTACHED
    try:
        handover_id = int(value)
    except ValueError:
        handover_id = None
    if handover_id is None or not fits_integer(handover_id):
        raise ValidationError(
            f"Invalid handoverId {value!r}. Use a numeric id or '{UNATTACHED}'"
        )
    return handover_id


def split_values(values: Sequence[str] | None) -> list[str]:
    """Flatten repeated and comma-separated query values, dropping blanks."""
    result: list[str] = []
    for value in values or []:
        result.extend(part.strip() for part in value.split(",") if part.strip())
    return result


@dataclass
class ParcelFilters:
    """Optional predicates combined with AND."""

    search: str | None = None
    statuses: Sequence[str] = ()
    directions: Sequence[str] = ()
    port_code: str | None = None
    handover: int | str | None = None
    updated_by: Sequence[str] = ()
    platform: Platform | None = None

    def clauses(self) -> list:
        clauses = []

        if self.handover == UNATTACHED:
            clauses.append(Parcel.handover_id.is_(None))
        elif self.handover is not None:
            clauses.append(Parcel.handover_id == self.handover)
            if self.platform is not None:
                clauses.append(Handover.type == self.platform)
        elif self.platform is not None:
            # Unattached parcels are visible from every platform view.
            clauses.append(
                or_(Handover.type == self.platform, Parcel.handover_id.is_(None))
            )

        if self.search:
            clauses.append(Parcel.tracking_number.icontains(self.search, autoescape=True))
        if self.statuses:
            clauses.append(Parcel.status.in_(list(self.statuses)))
        if self.directions:
            clauses.append(Parcel.direction.in_(list(self.directions)))
        if self.port_code:
            clauses.append(Parcel.port_code.icontains(self.port_code, autoescape=True))
        if self.updated_by:
            clauses.append(Parcel.updated_by.in_(list(self.updated_by)))

        return clauses


@dataclass
class SortSpec:
    field: str = "updated_at"
    order: str = "desc"

    @classmethod
    def parse(cls, sort_by: str | None, sort_order: str | None) -> "SortSpec":
        sort_by = sort_by or "updated_at"
        sort_order = (sort_order or "desc").lower()
        if sort_by not in SORT_COLUMNS:
            raise ValidationError(
                f"Invalid sortBy {sort_by!r}. Must be one of: {', '.join(SORT_COLUMNS)}"
            )
        if sort_order not in ("asc", "desc"):
            raise ValidationError("Invalid sortOrder. Must be 'asc' or 'desc'")
        return cls(field=sort_by, order=sort_order)

    def order_by(self) -> list:
        column = SORT_COLUMNS[self.field]
        primary = column.asc() if self.order == "asc" else column.desc()
        # Tracking number breaks ties so pages never overlap.
        return [primary, Parcel.tracking_number.asc()]


@dataclass
class Pagination:
    current_page: int
    limit: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.current_page > 1


@dataclass
class ParcelPage:
    items: list[Parcel]
    pagination: Pagination


@dataclass
class FilterOptions:
    statuses: list[str] = field(default_factory=list)
    directions: list[str] = field(default_factory=list)
    updated_by: list[str] = field(default_factory=list)
    port_codes: list[str] = field(default_factory=list)
    handovers: list[Handover] = field(default_factory=list)


class ParcelQueryService:
    """Filtered listings and lookups over parcels."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_parcels(
        self,
        filters: ParcelFilters,
        sort: SortSpec | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> ParcelPage:
        """Return one page of parcels matching ``filters``.

        The count and the page are built from the same predicate. An empty
        match yields ``total_pages == 0`` and no items.
        """
        if page < 1:
            raise ValidationError("page must be 1 or greater")
        if page_size < 1:
            raise ValidationError("limit must be 1 or greater")

        sort = sort or SortSpec()
        clauses = filters.clauses()

        count_query = (
            select(func.count())
            .select_from(Parcel)
            .outerjoin(Parcel.handover)
            .where(*clauses)
        )
        total = (await self.db.execute(count_query)).scalar_one()
        pagination = Pagination(current_page=page, limit=page_size, total_count=total)

        offset = (page - 1) * page_size
        if offset >= total:
            return ParcelPage(items=[], pagination=pagination)

        query = (
            select(Parcel)
            .outerjoin(Parcel.handover)
            .options(contains_eager(Parcel.handover))
            .where(*clauses)
            .order_by(*sort.order_by())
            .offset(offset)
            .limit(page_size)
        )
        result = await self.db.execute(query)

        return ParcelPage(items=list(result.scalars().all()), pagination=pagination)

    async def _distinct_values(self, column, clauses: list) -> list[str]:
        query = (
            select(distinct(column))
            .select_from(Parcel)
            .outerjoin(Parcel.handover)
            .where(*clauses, column.is_not(None), column != "")
        )
        result = await self.db.execute(query)
        return sorted(result.scalars().all())

    async def filter_options(
        self,
        platform: Platform | None = None,
        handover_id: int | None = None,
    ) -> FilterOptions:
        """Distinct non-empty values present within a platform view or handover.

        Handovers are listed only for platform (or global) views, newest
        handover date first.
        """
        clauses = ParcelFilters(platform=platform, handover=handover_id).clauses()

        options = FilterOptions(
            statuses=await self._distinct_values(Parcel.status, clauses),
            directions=await self._distinct_values(Parcel.direction, clauses),
            updated_by=await self._distinct_values(Parcel.updated_by, clauses),
            port_codes=await self._distinct_values(Parcel.port_code, clauses),
        )

        if handover_id is None:
            query = select(Handover).order_by(
                Handover.handover_date.desc(), Handover.id.desc()
            )
            if platform is not None:
                query = query.where(Handover.type == platform)
            result = await self.db.execute(query)
            options.handovers = list(result.scalars().all())

        return options

    async def get_parcel(self, tracking_number: str) -> Parcel:
        """Get a parcel with its handover loaded."""
        result = await self.db.execute(
            select(Parcel)
            .options(selectinload(Parcel.handover))
            .where(Parcel.tracking_number == tracking_number)
        )
        parcel = result.scalar_one_or_none()
        if parcel is None:
            raise NotFoundError("Parcel not found")
        return parcel

    async def get_event_logs(self, tracking_number: str) -> list[ParcelEventLog]:
        """Event history of an existing parcel, newest first."""
        exists = await self.db.scalar(
            select(Parcel.tracking_number).where(Parcel.tracking_number == tracking_number)
        )
        if exists is None:
            raise NotFoundError("Parcel not found")

        result = await self.db.execute(
            select(ParcelEventLog)
            .where(ParcelEventLog.tracking_number == tracking_number)
            .order_by(ParcelEventLog.created_at.desc(), ParcelEventLog.id.desc())
        )
        return list(result.scalars().all())

    async def delete_parcels(
        self, tracking_numbers: Sequence[str], platform: Platform | None = None
    ) -> int:
        """Delete parcels by tracking number within a platform view.

        Handover quantities are decremented in the same transaction.
        """
        tracking_numbers = [tn.strip() for tn in tracking_numbers if tn and tn.strip()]
        if not tracking_numbers:
            raise ValidationError("No tracking numbers provided")

        clauses = [Parcel.tracking_number.in_(tracking_numbers)]
        if platform is not None:
            platform_handovers = select(Handover.id).where(Handover.type == platform)
            clauses.append(
                or_(
                    Parcel.handover_id.is_(None),
                    Parcel.handover_id.in_(platform_handovers),
                )
            )

        async with transaction(self.db, "delete parcels"):
            rows = await self.db.execute(
                select(Parcel.tracking_number, Parcel.handover_id).where(*clauses)
            )
            matched = rows.all()
            if not matched:
                return 0

            await self.db.execute(
                delete(Parcel)
                .where(Parcel.tracking_number.in_([tn for tn, _ in matched]))
                .execution_options(synchronize_session=False)
            )

            per_handover = Counter(hid for _, hid in matched if hid is not None)
            for handover_id, removed in per_handover.items():
                await self.db.execute(
                    update(Handover)
                    .where(Handover.id == handover_id)
                    .values(quantity=Handover.quantity - removed)
                    .execution_options(synchronize_session=False)
                )

        logger.info("Deleted %d parcels (platform=%s)", len(matched), platform)
        return len(matched)
