"""Service for handover ingestion and lifecycle."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from functools import partial

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from parcelhub.db import fits_integer, transaction
from parcelhub.db.models import Handover, HandoverStatus, Parcel, Platform
from parcelhub.errors import NotFoundError, ValidationError
from parcelhub.services.dedup import (
    DedupResult,
    TrackingCandidate,
    existing_tracking_numbers,
    partition,
)
from parcelhub.services.platform_loader import PlatformRegistry

logger = logging.getLogger(__name__)


@dataclass
class HandoverMeta:
    """Metadata of a handover upload."""

    handover_date: date
    platform: Platform
    file_name: str | None = None
    source_label: str | None = None


@dataclass
class IngestionResult:
    """Outcome of creating a handover from an upload."""

    handover: Handover
    dedup: DedupResult

    @property
    def added_count(self) -> int:
        return len(self.dedup.insertable)

    def message(self, label: str) -> str:
        total = self.dedup.duplicate_count
        if not total:
            return f"{label} handover created successfully."
        return (
            f"{label} handover created successfully. {total} duplicate tracking "
            f"numbers were skipped ({self.dedup.internal_duplicate_count} within "
            f"upload, {self.dedup.database_duplicate_count} already in database)."
        )


@dataclass
class AppendResult:
    """Outcome of adding tracking numbers to an existing handover."""

    handover: Handover
    dedup: DedupResult

    @property
    def added_count(self) -> int:
        return len(self.dedup.insertable)

    @property
    def message(self) -> str:
        total = self.dedup.duplicate_count
        if not self.added_count:
            return "No new tracking numbers were added (all were duplicates)."
        if total:
            return (
                f"{self.added_count} tracking numbers added successfully. "
                f"{total} duplicates were skipped."
            )
        return f"{self.added_count} tracking numbers added successfully."


class HandoverService:
    """Creates handovers from uploads and manages their lifecycle."""

    def __init__(self, db: AsyncSession, platforms: PlatformRegistry):
        self.db = db
        self.platforms = platforms
        self._lookup = partial(existing_tracking_numbers, db)

    async def create_handover(
        self, meta: HandoverMeta, candidates: Sequence[TrackingCandidate]
    ) -> IngestionResult:
        """Create a handover together with its non-duplicate parcels.

        The handover row and all its parcels are written in one transaction;
        ``quantity`` is the number of parcels actually inserted.
        """
        profile = self.platforms.get(meta.platform)

        async with transaction(self.db, "create handover"):
            dedup = await partition(candidates, self._lookup, profile.normalise)
            handover = Handover(
                handover_date=meta.handover_date,
                quantity=len(dedup.insertable),
                file_name=meta.file_name,
                platform=meta.source_label or profile.source_label,
                type=profile.id,
                status=HandoverStatus.PENDING,
                parcels=[p.to_model() for p in dedup.insertable],
            )
            self.db.add(handover)

        logger.info(
            "Created %s handover %s: %d added, %d internal duplicates, "
            "%d database duplicates, %d blank",
            profile.id.value,
            handover.id,
            len(dedup.insertable),
            dedup.internal_duplicate_count,
            dedup.database_duplicate_count,
            dedup.blank_count,
        )
        return IngestionResult(handover=handover, dedup=dedup)

    async def append_tracking(
        self,
        handover_id: int,
        tracking_numbers: Sequence[str],
        platform: Platform | None = None,
    ) -> AppendResult:
        """Add new tracking numbers to an existing handover.

        Only non-duplicate numbers are inserted, with empty port code and
        package type, and ``quantity`` grows by the number inserted.
        """
        if not tracking_numbers:
            raise ValidationError("Please provide tracking numbers")

        async with transaction(self.db, "add tracking numbers to handover"):
            handover = await self.get_handover(handover_id, platform)
            profile = self.platforms.get(handover.type)
            candidates = [
                TrackingCandidate(tracking_number=tn, port_code="", package_type="")
                for tn in tracking_numbers
            ]
            dedup = await partition(candidates, self._lookup, profile.normalise)

            if dedup.insertable:
                self.db.add_all([p.to_model(handover.id) for p in dedup.insertable])
                await self.db.flush()
                await self.db.execute(
                    update(Handover)
                    .where(Handover.id == handover.id)
                    .values(quantity=Handover.quantity + len(dedup.insertable))
                    .execution_options(synchronize_session=False)
                )

        await self.db.refresh(handover)
        logger.info(
            "Appended %d tracking numbers to handover %s (%d duplicates skipped)",
            len(dedup.insertable),
            handover.id,
            dedup.duplicate_count,
        )
        return AppendResult(handover=handover, dedup=dedup)

    async def get_handover(
        self, handover_id: int, platform: Platform | None = None
    ) -> Handover:
        """Get a handover, optionally requiring it to belong to ``platform``."""
        handover = None
        if fits_integer(handover_id):
            query = select(Handover).where(Handover.id == handover_id)
            if platform is not None:
                query = query.where(Handover.type == platform)
            result = await self.db.execute(query)
            handover = result.scalar_one_or_none()

        if handover is None:
            label = f"{platform.value.capitalize()} handover" if platform else "Handover"
            raise NotFoundError(f"{label} not found")
        return handover

    async def count_parcels(self, handover_id: int) -> int:
        return await self.db.scalar(
            select(func.count()).select_from(Parcel).where(Parcel.handover_id == handover_id)
        )

    async def list_handovers(
        self, platform: Platform | None = None
    ) -> list[tuple[Handover, int]]:
        """Handovers newest first, each with its live parcel count."""
        counts = (
            select(Parcel.handover_id, func.count().label("parcel_count"))
            .where(Parcel.handover_id.is_not(None))
            .group_by(Parcel.handover_id)
            .subquery()
        )
        query = (
            select(Handover, func.coalesce(counts.c.parcel_count, 0))
            .outerjoin(counts, counts.c.handover_id == Handover.id)
            .order_by(Handover.date_added.desc(), Handover.id.desc())
        )
        if platform is not None:
            query = query.where(Handover.type == platform)

        result = await self.db.execute(query)
        return [(handover, count) for handover, count in result.all()]

    async def set_status(
        self,
        handover_id: int,
        status: str | HandoverStatus,
        platform: Platform | None = None,
    ) -> Handover:
        """Move a handover between pending and done."""
        try:
            new_status = HandoverStatus(status)
        except ValueError:
            raise ValidationError('Invalid status. Must be "pending" or "done"')

        async with transaction(self.db, "update handover status"):
            handover = await self.get_handover(handover_id, platform)
            handover.status = new_status

        return handover

    async def delete_handover_cascade(
        self, handover_id: int, platform: Platform | None = None
    ) -> int:
        """Delete a handover and every parcel attached to it, atomically.

        Returns the number of parcels removed.
        """
        async with transaction(self.db, "delete handover"):
            handover = await self.get_handover(handover_id, platform)
            result = await self.db.execute(
                delete(Parcel)
                .where(Parcel.handover_id == handover.id)
                .execution_options(synchronize_session=False)
            )
            deleted = result.rowcount
            await self.db.execute(
                delete(Handover)
                .where(Handover.id == handover.id)
                .execution_options(synchronize_session=False)
            )

        logger.info("Deleted handover %s with %d parcels", handover_id, deleted)
        return deleted
