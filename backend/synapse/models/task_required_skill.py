"""TaskRequiredSkill ORM — skills a task needs, populated from text analysis."""

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from synapse.db.base import Base, BigIntId


class TaskRequiredSkill(Base):
    __tablename__ = "task_required_skills"

    task_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True,
    )
    skill_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True,
    )
