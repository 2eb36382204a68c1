"""Root conftest — shared test configuration and database fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database built from Base.metadata
    - Seeding and assertions use short-lived sessions that commit/close at once:
      the in-memory database is one shared connection (StaticPool), so a session
      left open would share transaction state with the code under test

Design Decisions:
    - SQLite in-memory: fast, no external dependency; FK enforcement stays off, so
      every cascade the engine relies on must be performed explicitly
"""

import os

# Never touch a real database or recommender from tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.pop("RECOMMENDER_API_URL", None)

import pytest  # noqa: E402
from sqlalchemy import select  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from synapse.core.domain_types import (  # noqa: E402
    Availability, TaskStatus, UserRole,
)
from synapse.db.base import Base  # noqa: E402
from synapse.infrastructure.database import install_sqlite_functions  # noqa: E402
from synapse.infrastructure.unit_of_work import TransactionCoordinator  # noqa: E402
from synapse.models import (  # noqa: E402
    Invitation, Project, Skill, Task, Team, User,
)


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    install_sqlite_functions(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
def coordinator(test_session_factory):
    return TransactionCoordinator(test_session_factory)


class DataFactory:
    """Seeds rows and reads them back, one committed session per call."""

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    async def add(self, *objects):
        async with self._session_factory() as session:
            session.add_all(objects)
            await session.commit()
        return objects[0] if len(objects) == 1 else objects

    async def team(self, name: str | None = None) -> Team:
        return await self.add(Team(team_name=name or f"Team {self._next()}"))

    async def user(
        self,
        role: UserRole = UserRole.ENGINEER,
        team_id: int | None = None,
        email: str | None = None,
        availability: Availability = Availability.AVAILABLE,
    ) -> User:
        n = self._next()
        return await self.add(User(
            name=f"User {n}",
            email=email or f"user{n}@example.com",
            password_hash="hashed",
            role=role.value,
            team_id=team_id,
            availability=availability.value,
        ))

    async def manager_of(self, team: Team) -> User:
        """Manager user placed on team and recorded as its manager."""
        manager = await self.user(UserRole.MANAGER, team_id=team.id)
        async with self._session_factory() as session:
            row = await session.get(Team, team.id)
            row.manager_id = manager.id
            await session.commit()
        team.manager_id = manager.id
        return manager

    async def project(self, team_id: int, archived: bool = False) -> Project:
        return await self.add(Project(
            project_name=f"Project {self._next()}", team_id=team_id, archived=archived,
        ))

    async def task(
        self,
        project_id: int,
        assignee_id: int | None = None,
        status: TaskStatus = TaskStatus.OPEN,
        archived: bool = False,
    ) -> Task:
        return await self.add(Task(
            project_id=project_id,
            title=f"Task {self._next()}",
            assignee_id=assignee_id,
            status=status.value,
            archived=archived,
        ))

    async def skill(self, name: str, verified: bool = True) -> Skill:
        return await self.add(Skill(skill_name=name, is_verified=verified))

    async def get(self, model, pk):
        async with self._session_factory() as session:
            return await session.get(model, pk)

    async def all(self, model, *where) -> list:
        async with self._session_factory() as session:
            result = await session.execute(select(model).where(*where))
            return list(result.scalars())

    async def invitations_for(self, email: str) -> list[Invitation]:
        return await self.all(Invitation, Invitation.email == email)


@pytest.fixture
def data(test_session_factory) -> DataFactory:
    return DataFactory(test_session_factory)
