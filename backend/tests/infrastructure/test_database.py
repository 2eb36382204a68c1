"""Database Session Manager — health checks and coordinator factory."""

import pytest
from sqlalchemy import text

from synapse.core.errors import DatabaseError
from synapse.infrastructure.database import DatabaseSessionManager
from synapse.infrastructure.unit_of_work import TransactionCoordinator


@pytest.fixture
async def manager():
    m = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    yield m
    await m.dispose()


async def test_health_check_ok(manager):
    assert await manager.health_check() is True


async def test_coordinator_bound_to_manager(manager):
    coordinator = manager.coordinator(default_timeout=3.0)
    assert isinstance(coordinator, TransactionCoordinator)
    assert coordinator.default_timeout == 3.0
    assert await coordinator.read(
        lambda s: _scalar(s, "SELECT 41 + 1")
    ) == 42


async def test_session_maps_sqlalchemy_errors(manager):
    with pytest.raises(DatabaseError):
        async with manager.session() as db:
            await db.execute(text("SELECT * FROM no_such_table"))


async def _scalar(session, sql):
    return (await session.execute(text(sql))).scalar_one()


async def test_sqlite_lower_folds_unicode(manager):
    assert await manager.coordinator().read(
        lambda s: _scalar(s, "SELECT lower('ÜBER Ça')")
    ) == "über ça"
