"""UserSkill ORM — a user's proficiency in one skill.

Invariants:
    - (user_id, skill_id) is the primary key: one proficiency per pairing
    - proficiency in {beginner, intermediate, expert}
    - Removed with the user or the skill (CASCADE)
"""

from sqlalchemy import CheckConstraint, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from synapse.db.base import Base, BigIntId


class UserSkill(Base):
    __tablename__ = "user_skills"
    __table_args__ = (
        CheckConstraint(
            "proficiency IN ('beginner', 'intermediate', 'expert')",
            name="chk_user_skills_proficiency",
        ),
    )

    user_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True,
    )
    skill_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True,
    )
    proficiency: Mapped[str] = mapped_column(String(20), nullable=False)
