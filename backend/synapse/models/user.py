"""User ORM — a person in the organization, the subject of roles and assignments.

Invariants:
    - email unique
    - role in {admin, manager, engineer}; availability in {available, busy}
    - availability is busy exactly while the user holds an in-progress active task

Design Decisions:
    - String columns + str Enums (core/domain_types.py) instead of native DB enums:
      portable across PostgreSQL and the SQLite test database
    - password_hash only: hashing happens outside this package
"""

from sqlalchemy import CheckConstraint, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from synapse.core.domain_types import Availability, UserRole
from synapse.db.base import Base, BigIntId


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'manager', 'engineer')", name="chk_users_role"),
        CheckConstraint("availability IN ('available', 'busy')", name="chk_users_availability"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserRole.ENGINEER.value,
    )
    team_id: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("teams.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )
    availability: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Availability.AVAILABLE.value,
    )
