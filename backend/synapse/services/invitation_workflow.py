"""Invitation Workflow — role-hierarchy-checked invitation issuance and acceptance.

Invariants:
    - Inviter identity comes from the SessionContext; the role checked is the one
      stored on the inviter's row, never a client-supplied value
    - An inviter may only invite the role directly below their own (core/role_hierarchy.py)
    - Manager invitations target an existing team without a manager; engineer
      invitations inherit the inviting manager's team, input team_id ignored
    - At most one pending invitation per email (checked, and backed by a partial
      unique index for concurrent creators)
    - Acceptance creates the user from the invitation's email/role/team only
    - Unknown, expired and consumed tokens are indistinguishable to the caller
    - Acceptance steps (user, team manager, status, skills) are one unit of work;
      the recommender refresh is scheduled only after that unit commits

Design Decisions:
    - Stale pending invitations are expired before the duplicate check, so an
      unused, lapsed invitation never blocks a fresh one
    - secrets.token_urlsafe(32) tokens: 256 bits, URL-safe for invitation links
    - Team vacancy re-validated at acceptance: the team may have gained a manager
      since the invitation was issued
"""

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from synapse.core.domain_types import Availability, InvitationStatus, TeamId, UserRole
from synapse.core.errors import (
    DuplicateInvitationError,
    InvitationNotPendingError,
    ManagerHasNoTeamError,
    ResourceNotFoundError,
    SkillExtractorUnavailableError,
    TeamAlreadyHasManagerError,
    TeamIdRequiredError,
    TeamNotFoundError,
)
from synapse.core.repository_protocols import RefreshNotifier, SkillExtractor
from synapse.core.role_hierarchy import TeamRule, check_invitable
from synapse.core.session_context import SessionContext
from synapse.core.skill_normalization import normalize_skill_names
from synapse.infrastructure.unit_of_work import TransactionCoordinator
from synapse.models.invitation import Invitation
from synapse.models.team import Team
from synapse.models.user import User
from synapse.models.user_skill import UserSkill
from synapse.services.skill_resolver import SkillResolver, load_alias_map

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


@dataclass
class AcceptInvitationResult:
    user: User
    invitation: Invitation
    skills: list[UserSkill] = field(default_factory=list)


async def expire_stale_in(
    session: AsyncSession, now: datetime, email: str | None = None,
) -> int:
    """Mark pending invitations past expires_at as expired. Returns count."""
    stmt = (
        update(Invitation)
        .where(
            Invitation.status == InvitationStatus.PENDING.value,
            Invitation.expires_at <= now,
        )
        .values(status=InvitationStatus.EXPIRED.value)
        .execution_options(synchronize_session=False)
    )
    if email is not None:
        stmt = stmt.where(Invitation.email == email)
    result = await session.execute(stmt)
    return result.rowcount or 0


async def _load_vacant_team(session: AsyncSession, team_id: TeamId | None) -> Team:
    if team_id is None:
        raise TeamIdRequiredError()
    team = await session.get(Team, team_id)
    if team is None:
        raise TeamNotFoundError(team_id)
    if team.manager_id is not None:
        raise TeamAlreadyHasManagerError(team_id)
    return team


class InvitationWorkflow:
    """CreateInvitation / AcceptInvitation and their supporting operations."""

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        resolver: SkillResolver,
        notifier: RefreshNotifier | None = None,
        extractor: SkillExtractor | None = None,
        ttl_hours: int = 72,
    ):
        self._coordinator = coordinator
        self._resolver = resolver
        self._notifier = notifier
        self._extractor = extractor
        self.ttl = timedelta(hours=ttl_hours)

    # ─── Issuance ────────────────────────────────────────────────

    async def create_invitation(
        self,
        actor: SessionContext,
        email: str,
        role_to_invite: UserRole | str,
        team_id: TeamId | None = None,
    ) -> Invitation:
        email = email.strip().lower()

        async def work(session: AsyncSession) -> Invitation:
            inviter = await session.get(User, actor.user_id)
            if inviter is None:
                raise ResourceNotFoundError("User", actor.user_id)
            policy = check_invitable(inviter.role, role_to_invite)

            if policy.team_rule is TeamRule.EXPLICIT_VACANT:
                await _load_vacant_team(session, team_id)
                target_team = team_id
            else:
                if inviter.team_id is None:
                    raise ManagerHasNoTeamError()
                target_team = inviter.team_id

            now = datetime.now(timezone.utc)
            await expire_stale_in(session, now, email=email)
            existing = (await session.execute(
                select(Invitation.id).where(
                    Invitation.email == email,
                    Invitation.status == InvitationStatus.PENDING.value,
                )
            )).first()
            if existing is not None:
                raise DuplicateInvitationError(email)

            invitation = Invitation(
                email=email,
                invitation_token=secrets.token_urlsafe(TOKEN_BYTES),
                role_to_invite=policy.invitable_role.value,
                inviter_id=inviter.id,
                team_id=target_team,
                status=InvitationStatus.PENDING.value,
                created_at=now,
                expires_at=now + self.ttl,
            )
            session.add(invitation)
            try:
                await session.flush()
            except IntegrityError:
                # Lost a race with a concurrent creator for the same email
                raise DuplicateInvitationError(email) from None
            return invitation

        invitation = await self._coordinator.run(work)
        logger.info(
            f"Invitation {invitation.id} issued for role {invitation.role_to_invite}",
            extra={
                "invitation_id": invitation.id,
                "user_id": actor.user_id,
                "team_id": invitation.team_id,
            },
        )
        return invitation

    async def expire_stale_invitations(self) -> int:
        count = await self._coordinator.run(
            lambda session: expire_stale_in(session, datetime.now(timezone.utc))
        )
        if count:
            logger.info(f"Expired {count} stale invitation(s)")
        return count

    # ─── Acceptance ──────────────────────────────────────────────

    async def accept_invitation(
        self,
        token: str,
        name: str | None,
        password_hash: str,
        skills_with_proficiency: dict[str, str | None] | None = None,
    ) -> AcceptInvitationResult:
        async def work(session: AsyncSession) -> AcceptInvitationResult:
            invitation = (await session.execute(
                select(Invitation).where(
                    Invitation.invitation_token == token,
                    Invitation.status == InvitationStatus.PENDING.value,
                    Invitation.expires_at > datetime.now(timezone.utc),
                )
            )).scalar_one_or_none()
            if invitation is None:
                raise InvitationNotPendingError()

            team = None
            if invitation.role_to_invite == UserRole.MANAGER:
                team = await _load_vacant_team(session, invitation.team_id)

            user = User(
                name=name,
                email=invitation.email,
                password_hash=password_hash,
                role=invitation.role_to_invite,
                team_id=invitation.team_id,
                availability=Availability.AVAILABLE.value,
            )
            session.add(user)
            await session.flush()

            if team is not None:
                team.manager_id = user.id
            invitation.status = InvitationStatus.ACCEPTED.value
            await session.flush()

            skills: list[UserSkill] = []
            if skills_with_proficiency:
                skills = await self._resolver.link_user_skills(
                    session, user.id, skills_with_proficiency,
                )
            return AcceptInvitationResult(user=user, invitation=invitation, skills=skills)

        result = await self._coordinator.run(work)
        logger.info(
            f"Invitation {result.invitation.id} accepted by user {result.user.id}",
            extra={"invitation_id": result.invitation.id, "user_id": result.user.id},
        )
        if self._notifier is not None:
            self._notifier.schedule_refresh()
        return result

    async def accept_with_resume(
        self, token: str, name: str | None, password_hash: str, resume_text: str,
    ) -> AcceptInvitationResult:
        """Extract skills from resume text, then accept with them."""
        if self._extractor is None:
            raise SkillExtractorUnavailableError("accept an invitation from resume text")
        raw_names = await self._extractor.extract_skills(resume_text)
        alias_map = await self._coordinator.read(load_alias_map)
        names = normalize_skill_names(raw_names, alias_map)
        levels: dict[str, str] = {}
        if names:
            extracted = await self._extractor.extract_proficiencies(resume_text, names)
            levels = {k.lower(): v for k, v in extracted.items()}
        skills = {skill: levels.get(skill.lower()) for skill in names}
        return await self.accept_invitation(token, name, password_hash, skills)
