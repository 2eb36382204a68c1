"""Transaction Coordinator — runs a caller-supplied unit of work atomically.

Invariants:
    - Exactly one session and one transaction per unit; commit only on clean exit
    - Any exception inside the unit rolls back everything written so far
    - SQLAlchemy failures leave as DatabaseError; SynapseError passes through untouched
    - read() never commits, whatever the work does; the objects it returns stay loaded
      (detached, not expired) so callers can read them after the unit ends
    - A timed-out unit is cancelled, rolled back, then reported as TransactionTimeoutError

Design Decisions:
    - No business logic here: services are parameterized by a coordinator and hand it
      an async callable (ADR: unit of work owned by the shell, rules by the core)
    - Isolation comes from the database transaction alone; no in-process locks
    - asyncio.wait_for for the timeout: cancellation propagates into session.begin(),
      whose exit path issues the rollback
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import AsyncGenerator, TypeVar

from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from synapse.core.errors import DatabaseError, TransactionTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")
Work = Callable[[AsyncSession], Awaitable[T]]


def to_database_error(exc: SQLAlchemyError) -> DatabaseError:
    """Map a SQLAlchemy exception onto the opaque infrastructure error."""
    if isinstance(exc, IntegrityError):
        logger.error(f"DB integrity error: {exc}")
        return DatabaseError("Integrity constraint violated", "commit")
    if isinstance(exc, OperationalError):
        logger.error(f"DB operational error: {exc}")
        return DatabaseError("Connection or operational error", "execute")
    if isinstance(exc, DBAPIError):
        logger.error(f"DB driver error: {exc}")
        return DatabaseError("Database driver error", "query")
    logger.error(f"SQLAlchemy error: {exc}")
    return DatabaseError("Database operation failed", "unknown")


class TransactionCoordinator:
    """Executes units of work with commit/rollback semantics."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        default_timeout: float | None = None,
    ):
        self._session_factory = session_factory
        self.default_timeout = default_timeout

    @asynccontextmanager
    async def unit(self) -> AsyncGenerator[AsyncSession, None]:
        """Session inside one transaction: commit on exit, rollback on raise."""
        session = self._session_factory()
        try:
            async with session.begin():
                yield session
        except SQLAlchemyError as e:
            raise to_database_error(e) from e
        finally:
            await session.close()

    async def run(self, work: Work[T], timeout_seconds: float | None = None) -> T:
        """Run work(session) as one atomic unit, optionally bounded in time."""
        timeout = timeout_seconds if timeout_seconds is not None else self.default_timeout

        async def _execute() -> T:
            async with self.unit() as session:
                return await work(session)

        if timeout is None:
            return await _execute()
        try:
            return await asyncio.wait_for(_execute(), timeout)
        except asyncio.TimeoutError:
            logger.error(
                f"Unit of work exceeded {timeout}s, rolled back",
                extra={"error_code": "TRANSACTION_TIMEOUT"},
            )
            raise TransactionTimeoutError(timeout) from None

    async def read(self, work: Work[T]) -> T:
        """Run work(session) and roll back unconditionally."""
        session = self._session_factory()
        try:
            return await work(session)
        except SQLAlchemyError as e:
            raise to_database_error(e) from e
        finally:
            # Detach first: rollback would expire everything still in the session
            session.expunge_all()
            await session.rollback()
            await session.close()
