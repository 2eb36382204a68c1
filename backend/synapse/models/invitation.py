"""Invitation ORM — tokenized, expiring offer to join with a fixed role and team.

Invariants:
    - invitation_token unique and secret
    - At most one pending invitation per email (partial unique index)
    - status in {pending, accepted, expired}; expires_at = created_at + TTL
    - Inviter deletion removes their invitations (CASCADE)

Design Decisions:
    - Partial index instead of a plain UNIQUE(email): an accepted or expired
      invitation must not block re-inviting the same address
    - Role/team stored here are authoritative at acceptance time, never client input
"""

from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint, DateTime, ForeignKey, Index, String, text,
)
from sqlalchemy.orm import Mapped, mapped_column

from synapse.core.domain_types import InvitationStatus
from synapse.db.base import Base, BigIntId


class Invitation(Base):
    __tablename__ = "invitations"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'accepted', 'expired')", name="chk_status",
        ),
        Index(
            "uq_invitations_pending_email", "email", unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    invitation_token: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False,
    )
    role_to_invite: Mapped[str] = mapped_column(String(20), nullable=False)
    inviter_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    team_id: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("teams.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=InvitationStatus.PENDING.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
