"""Deduplication of tracking-number batches before insertion.

A batch is reconciled in two passes:

1. Within the batch: the first occurrence of a (normalised) tracking number
   is kept in input order, later occurrences are counted and dropped.
2. Against the store: the surviving numbers are looked up in one batched
   query, and those already persisted are counted and dropped.

The lookup is passed in as a coroutine so the same engine serves handover
creation and appends without knowing about sessions.
"""

from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parcelhub.db.models import PARCEL_STATUS_PENDING, SYSTEM_ACTOR, Parcel

ExistingLookup = Callable[[Sequence[str]], Awaitable[set[str]]]
Normaliser = Callable[[str], str]


@dataclass
class TrackingCandidate:
    """One extracted row of an upload."""

    tracking_number: str
    port_code: str | None = None
    package_type: str | None = None


@dataclass
class InsertableParcel:
    """A normalised candidate that is safe to insert."""

    tracking_number: str
    port_code: str | None = None
    package_type: str | None = None
    status: str = PARCEL_STATUS_PENDING
    updated_by: str = SYSTEM_ACTOR

    def to_model(self, handover_id: int | None = None) -> Parcel:
        return Parcel(
            tracking_number=self.tracking_number,
            handover_id=handover_id,
            port_code=self.port_code,
            package_type=self.package_type,
            status=self.status,
            updated_by=self.updated_by,
        )


@dataclass
class DedupResult:
    """Partition of a candidate batch."""

    insertable: list[InsertableParcel] = field(default_factory=list)
    internal_duplicate_count: int = 0
    database_duplicate_count: int = 0
    blank_count: int = 0

    @property
    def duplicate_count(self) -> int:
        return self.internal_duplicate_count + self.database_duplicate_count

    @property
    def tracking_numbers(self) -> list[str]:
        return [p.tracking_number for p in self.insertable]


async def existing_tracking_numbers(
    db: AsyncSession, tracking_numbers: Sequence[str]
) -> set[str]:
    """Return the subset of ``tracking_numbers`` already stored, in one query."""
    if not tracking_numbers:
        return set()
    result = await db.execute(
        select(Parcel.tracking_number).where(
            Parcel.tracking_number.in_(list(tracking_numbers))
        )
    )
    return set(result.scalars().all())


async def partition(
    candidates: Iterable[TrackingCandidate],
    existing_lookup: ExistingLookup,
    normalise: Normaliser = str.strip,
) -> DedupResult:
    """Split ``candidates`` into insertable rows and duplicate counts.

    Candidates that are blank after normalisation are skipped and counted
    separately, so that ``len(insertable) + internal + database + blank``
    always equals the number of candidates. Lookup failures propagate.
    """
    result = DedupResult()
    seen: set[str] = set()
    first_occurrences: list[InsertableParcel] = []

    for candidate in candidates:
        tracking_number = normalise(candidate.tracking_number or "")
        if not tracking_number:
            result.blank_count += 1
            continue
        if tracking_number in seen:
            result.internal_duplicate_count += 1
            continue
        seen.add(tracking_number)
        first_occurrences.append(
            InsertableParcel(
                tracking_number=tracking_number,
                port_code=candidate.port_code,
                package_type=candidate.package_type,
            )
        )

    if not first_occurrences:
        return result

    existing = await existing_lookup([p.tracking_number for p in first_occurrences])

    for parcel in first_occurrences:
        if parcel.tracking_number in existing:
            result.database_duplicate_count += 1
        else:
            result.insertable.append(parcel)

    return result
