"""Async engine, session handling and transaction boundaries."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from parcelhub.db.models import Base
from parcelhub.errors import ConstraintViolation, ParcelHubError, StorageFailure

logger = logging.getLogger(__name__)

# Largest value an INTEGER column (and OFFSET) accepts.
SQL_INT_MAX = 2**63 - 1


def fits_integer(value: int) -> bool:
    return -SQL_INT_MAX <= value <= SQL_INT_MAX


class Database:
    """Owns one async engine and the session factory bound to it.

    Constructed by the process entry point and handed to request handlers
    through the application state.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        engine_kwargs: dict = {"echo": echo, "future": True}
        if url.startswith("sqlite") and ":memory:" in url:
            # Every connection to :memory: is a fresh database, so share one.
            engine_kwargs["poolclass"] = StaticPool
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        """Create any missing tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        yield session


@asynccontextmanager
async def transaction(session: AsyncSession, action: str):
    """Commit the work done in the block, or roll it back and raise.

    ``action`` describes the operation for log lines and error messages,
    e.g. ``"create handover"``.
    """
    try:
        yield session
        await session.commit()
    except ParcelHubError:
        await session.rollback()
        raise
    except IntegrityError as e:
        await session.rollback()
        logger.warning("Constraint violation during %s: %s", action, e.orig)
        raise ConstraintViolation(
            f"Failed to {action}: a record with the same key already exists"
        ) from e
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("Storage failure during %s", action)
        raise StorageFailure(f"Failed to {action}") from e
