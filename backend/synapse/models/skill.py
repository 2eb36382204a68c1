"""Skill & SkillAlias ORM — controlled skill vocabulary and its synonyms.

Invariants:
    - skill_name unique case-insensitively (expression index on lower(skill_name))
    - Auto-created skills are unverified; curated skills are verified
    - An alias points at exactly one canonical skill; deleting the skill drops its aliases

Design Decisions:
    - Functional unique index over a citext column: works identically on SQLite
      and lets ON CONFLICT DO NOTHING absorb concurrent creations of the same name
"""

from sqlalchemy import Boolean, ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from synapse.db.base import Base, BigIntId


class Skill(Base):
    __tablename__ = "skills"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    skill_name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


Index("uq_skills_skill_name_lower", func.lower(Skill.skill_name), unique=True)


class SkillAlias(Base):
    __tablename__ = "skill_aliases"

    alias_name: Mapped[str] = mapped_column(String(100), primary_key=True)
    skill_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("skills.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
