"""Team ORM — organizational unit with at most one manager.

Invariants:
    - team_name unique
    - manager_id unique across teams (a manager runs at most one team)
    - manager deletion sets manager_id NULL (team survives, becomes unmanaged)

Design Decisions:
    - use_alter on the manager FK: users.team_id and teams.manager_id reference each
      other, so one side must be created after both tables exist
"""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from synapse.db.base import Base, BigIntId


class Team(Base):
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    team_name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    manager_id: Mapped[int | None] = mapped_column(
        BigIntId,
        ForeignKey(
            "users.id", ondelete="SET NULL",
            use_alter=True, name="fk_teams_manager",
        ),
        unique=True, nullable=True,
    )
