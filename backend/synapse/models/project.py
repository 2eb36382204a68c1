"""Project ORM — groups tasks under a team.

Invariants:
    - Always belongs to a team (team deletion cascades to its projects)
    - archived is terminal: once true, the project and its tasks are read-only
    - archived_at set exactly when archived flips to true
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from synapse.db.base import Base, BigIntId


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (
        Index("idx_projects_team_archived", "team_id", "archived"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    project_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    team_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False,
    )
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    archived_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
