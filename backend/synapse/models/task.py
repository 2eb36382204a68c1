"""Task ORM — unit of work assigned to at most one user.

Invariants:
    - status in {open, in_progress, done}; priority in {low, medium, high, critical}
    - assignee deletion sets assignee_id NULL; project deletion cascades
    - completed_at set when status becomes done
    - archived tasks are excluded from every active-state rule

Design Decisions:
    - created_at defaulted in Python (UTC-aware) so SQLite and PostgreSQL agree
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, CheckConstraint, DateTime, ForeignKey, Index, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from synapse.core.domain_types import TaskPriority, TaskStatus
from synapse.db.base import Base, BigIntId


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint("status IN ('open', 'in_progress', 'done')", name="chk_tasks_status"),
        CheckConstraint(
            "priority IN ('low', 'medium', 'high', 'critical')", name="chk_tasks_priority",
        ),
        Index("idx_tasks_project_archived", "project_id", "archived"),
        Index("idx_tasks_assignee_status", "assignee_id", "status"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    project_id: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("projects.id", ondelete="CASCADE"), nullable=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaskStatus.OPEN.value,
    )
    priority: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaskPriority.MEDIUM.value,
    )
    assignee_id: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    archived_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
