"""Skill Resolver — resolve-or-create canonical skill records inside an open unit of work.

Invariants:
    - One skill row per case-insensitive name, even across concurrent units
      (unique index on lower(skill_name) + ON CONFLICT DO NOTHING + re-fetch)
    - Auto-created skills are unverified
    - Empty input returns {} without touching the database
    - Never commits: the caller's TransactionCoordinator owns the transaction

Design Decisions:
    - Batch fold, fetch, insert, re-fetch: four statements regardless of input
      size (ADR: no per-name round trips)
    - Folding happens in SQL only: keys come from the same lower() the unique
      index uses, so lookups and the index can never disagree on a name
    - Dialect-specific insert for ON CONFLICT: PostgreSQL and SQLite both accept
      DO NOTHING without a conflict target, which covers the expression index
    - Duplicate links collapse onto the first occurrence: two spellings of one
      skill must not violate the (user_id, skill_id) primary key
"""

import logging
from collections.abc import Iterable, Mapping

from sqlalchemy import String, func, insert, literal, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from synapse.core.domain_types import ProficiencyLevel, TaskId, UserId
from synapse.core.skill_normalization import coerce_proficiencies
from synapse.models.skill import Skill, SkillAlias
from synapse.models.task_required_skill import TaskRequiredSkill
from synapse.models.user_skill import UserSkill

logger = logging.getLogger(__name__)


async def load_alias_map(session: AsyncSession) -> dict[str, str]:
    """Lowercase alias -> canonical skill name, for normalize_skill_names()."""
    result = await session.execute(
        select(SkillAlias.alias_name, Skill.skill_name)
        .join(Skill, Skill.id == SkillAlias.skill_id)
    )
    return {alias.lower(): canonical for alias, canonical in result.all()}


def _insert_ignoring_conflicts(session: AsyncSession, rows: list[dict]):
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert(Skill).values(rows).on_conflict_do_nothing()
    if dialect == "sqlite":
        return sqlite_insert(Skill).values(rows).on_conflict_do_nothing()
    return insert(Skill).values(rows)


class SkillResolver:
    """Maps free-text skill names onto Skill rows, creating the missing ones."""

    async def resolve_skills(
        self, session: AsyncSession, names: Iterable[str],
    ) -> dict[str, Skill]:
        """Return {input name: Skill} for every non-blank input name."""
        stripped = [name for name in ((raw or "").strip() for raw in names) if name]
        if not stripped:
            return {}

        wanted = await self._fold(session, list(dict.fromkeys(stripped)))
        keys = set(wanted.values())
        found = await self._fetch_by_lower(session, keys)
        missing = keys - found.keys()
        if missing:
            # First spelling seen becomes the stored display name
            spelling: dict[str, str] = {}
            for name, key in wanted.items():
                spelling.setdefault(key, name)
            rows = [
                {"skill_name": spelling[key], "is_verified": False}
                for key in sorted(missing)
            ]
            await session.execute(_insert_ignoring_conflicts(session, rows))
            found.update(await self._fetch_by_lower(session, missing))
            logger.info(f"Resolved {len(missing)} new skill name(s)")

        return {name: found[key] for name, key in wanted.items()}

    async def _fold(
        self, session: AsyncSession, names: list[str],
    ) -> dict[str, str]:
        """Case-fold names with the database's own lower(), as the index does."""
        result = await session.execute(
            select(*[
                func.lower(literal(name, String)).label(f"k{i}")
                for i, name in enumerate(names)
            ])
        )
        return dict(zip(names, result.one()))

    async def _fetch_by_lower(
        self, session: AsyncSession, keys: set[str],
    ) -> dict[str, Skill]:
        folded = func.lower(Skill.skill_name)
        result = await session.execute(
            select(folded, Skill).where(folded.in_(keys))
        )
        return {key: skill for key, skill in result.all()}

    async def link_user_skills(
        self,
        session: AsyncSession,
        user_id: UserId,
        skills_with_proficiency: Mapping[str, str | None],
    ) -> list[UserSkill]:
        """Resolve names then attach them to the user at the given proficiency."""
        levels = coerce_proficiencies({
            (name or "").strip(): level
            for name, level in skills_with_proficiency.items()
        })
        skill_map = await self.resolve_skills(session, levels.keys())
        links: dict[int, UserSkill] = {}
        for name, skill in skill_map.items():
            if skill.id in links:
                continue
            level = levels.get(name, ProficiencyLevel.BEGINNER)
            links[skill.id] = UserSkill(
                user_id=user_id, skill_id=skill.id, proficiency=level.value,
            )
        session.add_all(links.values())
        await session.flush()
        return list(links.values())

    async def link_task_skills(
        self, session: AsyncSession, task_id: TaskId, names: Iterable[str],
    ) -> list[TaskRequiredSkill]:
        skill_map = await self.resolve_skills(session, names)
        links: dict[int, TaskRequiredSkill] = {}
        for skill in skill_map.values():
            links.setdefault(
                skill.id, TaskRequiredSkill(task_id=task_id, skill_id=skill.id),
            )
        session.add_all(links.values())
        await session.flush()
        return list(links.values())
