"""User Lifecycle — role-change validation/application, onboarding and safe deletion.

Invariants:
    - validate_role_change and get_deletion_impact never mutate (coordinator.read)
    - Admin role is immutable; nobody is promoted to admin
    - Promotion to manager needs an existing team without a manager
    - Admins are never deleted, whatever the impact report says
    - safe_delete_user mutates exactly what get_deletion_impact reports: both use
      the same _compute_deletion_impact
    - Every cascade (task release, team manager clear, skill links, sent
      invitations) runs inside the deleting unit, never as a separate commit

Design Decisions:
    - Cascades performed explicitly even though PostgreSQL declares them too:
      the engine's guarantees do not depend on FK enforcement being on (SQLite)
    - Static role rules are pure (core/enforce_role_change.py); this module only
      loads the rows those rules need
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from synapse.core.domain_types import TaskStatus, TeamId, UserId, UserRole
from synapse.core.enforce_role_change import (
    check_static_rules,
    check_target_team,
    is_manager_demotion,
    needs_target_team,
)
from synapse.core.errors import (
    AdminDeletionForbiddenError,
    InvalidRoleChangeError,
    ResourceNotFoundError,
)
from synapse.infrastructure.unit_of_work import TransactionCoordinator
from synapse.models.invitation import Invitation
from synapse.models.task import Task
from synapse.models.team import Team
from synapse.models.user import User
from synapse.models.user_skill import UserSkill
from synapse.schemas.user import CreateUserParams
from synapse.services.skill_resolver import SkillResolver

logger = logging.getLogger(__name__)

ADMIN_NOT_DELETABLE = "admin users cannot be deleted"


# ─── Result Types ────────────────────────────────────────────────

@dataclass
class RoleChangeValidation:
    is_valid: bool
    current_role: str
    new_role: str
    reason: str | None = None
    target_team: Team | None = None
    managed_team: Team | None = None


@dataclass
class RoleChangeResult:
    user: User
    previous_role: str
    cleared_team_id: TeamId | None = None


@dataclass
class OnboardResult:
    user: User
    skills: list[UserSkill] = field(default_factory=list)


@dataclass
class DeletionImpact:
    """What safe_delete_user would do to the dataset."""
    user: User
    tasks_to_unassign: list[Task]
    team_losing_manager: Team | None
    skill_associations_count: int
    sent_invitations_count: int
    can_delete: bool
    reason: str | None = None


@dataclass
class DeletionResult:
    deleted_user_id: UserId
    unassigned_tasks_count: int
    cleared_team_id: TeamId | None
    removed_skill_associations: int
    removed_invitations: int


# ─── Shared Reads ────────────────────────────────────────────────

async def _load_user(session: AsyncSession, user_id: UserId) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise ResourceNotFoundError("User", user_id)
    return user


async def _managed_team(session: AsyncSession, user_id: UserId) -> Team | None:
    return (await session.execute(
        select(Team).where(Team.manager_id == user_id)
    )).scalar_one_or_none()


async def _count(session: AsyncSession, stmt) -> int:
    return (await session.execute(stmt)).scalar_one()


async def _validate(
    session: AsyncSession, user_id: UserId, new_role: str, team_id: TeamId | None,
) -> RoleChangeValidation:
    user = await _load_user(session, user_id)
    new_role = getattr(new_role, "value", new_role)
    verdict = RoleChangeValidation(
        is_valid=False, current_role=user.role, new_role=new_role,
    )

    verdict.reason = check_static_rules(user.role, new_role)
    if verdict.reason is not None:
        return verdict

    if needs_target_team(new_role):
        team = await session.get(Team, team_id) if team_id is not None else None
        verdict.reason = check_target_team(
            team_id,
            team_exists=team is not None,
            team_has_manager=team is not None and team.manager_id is not None,
        )
        if verdict.reason is not None:
            return verdict
        verdict.target_team = team

    if is_manager_demotion(user.role, new_role):
        verdict.managed_team = await _managed_team(session, user.id)

    verdict.is_valid = True
    return verdict


async def _compute_deletion_impact(
    session: AsyncSession, user_id: UserId,
) -> DeletionImpact:
    user = await _load_user(session, user_id)
    tasks = list((await session.execute(
        select(Task).where(Task.assignee_id == user_id).order_by(Task.id)
    )).scalars())
    skills = await _count(
        session,
        select(func.count()).select_from(UserSkill).where(UserSkill.user_id == user_id),
    )
    invitations = await _count(
        session,
        select(func.count()).select_from(Invitation).where(Invitation.inviter_id == user_id),
    )
    can_delete = user.role != UserRole.ADMIN
    return DeletionImpact(
        user=user,
        tasks_to_unassign=tasks,
        team_losing_manager=await _managed_team(session, user_id),
        skill_associations_count=skills,
        sent_invitations_count=invitations,
        can_delete=can_delete,
        reason=None if can_delete else ADMIN_NOT_DELETABLE,
    )


# ─── Service ─────────────────────────────────────────────────────

class UserLifecycleManager:
    """Role changes, onboarding and deletion with their cross-entity effects."""

    def __init__(self, coordinator: TransactionCoordinator, resolver: SkillResolver):
        self._coordinator = coordinator
        self._resolver = resolver

    async def validate_role_change(
        self, user_id: UserId, new_role: UserRole | str, team_id: TeamId | None = None,
    ) -> RoleChangeValidation:
        return await self._coordinator.read(
            lambda session: _validate(session, user_id, new_role, team_id)
        )

    async def change_role(
        self, user_id: UserId, new_role: UserRole | str, team_id: TeamId | None = None,
    ) -> RoleChangeResult:
        """Validate and apply in one unit; raises InvalidRoleChangeError."""
        async def work(session: AsyncSession) -> RoleChangeResult:
            verdict = await _validate(session, user_id, new_role, team_id)
            if not verdict.is_valid:
                raise InvalidRoleChangeError(verdict.reason)

            user = await _load_user(session, user_id)
            result = RoleChangeResult(user=user, previous_role=user.role)
            if verdict.managed_team is not None:
                verdict.managed_team.manager_id = None
                result.cleared_team_id = verdict.managed_team.id
                await session.flush()

            user.role = verdict.new_role
            if verdict.target_team is not None:
                user.team_id = verdict.target_team.id
                verdict.target_team.manager_id = user.id
            await session.flush()
            return result

        result = await self._coordinator.run(work)
        logger.info(
            f"User {user_id} role changed {result.previous_role} -> {result.user.role}",
            extra={"user_id": user_id, "team_id": result.user.team_id},
        )
        return result

    async def onboard_new_user(
        self,
        params: CreateUserParams,
        skills_with_proficiency: dict[str, str | None] | None = None,
    ) -> OnboardResult:
        async def work(session: AsyncSession) -> OnboardResult:
            user = User(
                name=params.name,
                email=params.email,
                password_hash=params.password_hash,
                role=params.role.value,
                team_id=params.team_id,
                availability=params.availability.value,
            )
            session.add(user)
            await session.flush()
            if not skills_with_proficiency:
                return OnboardResult(user=user)
            skills = await self._resolver.link_user_skills(
                session, user.id, skills_with_proficiency,
            )
            return OnboardResult(user=user, skills=skills)

        result = await self._coordinator.run(work)
        logger.info(f"User {result.user.id} onboarded", extra={"user_id": result.user.id})
        return result

    async def get_deletion_impact(self, user_id: UserId) -> DeletionImpact:
        return await self._coordinator.read(
            lambda session: _compute_deletion_impact(session, user_id)
        )

    async def safe_delete_user(self, user_id: UserId) -> DeletionResult:
        async def work(session: AsyncSession) -> DeletionResult:
            impact = await _compute_deletion_impact(session, user_id)
            if not impact.can_delete:
                raise AdminDeletionForbiddenError(user_id)

            for task in impact.tasks_to_unassign:
                task.assignee_id = None
                if not task.archived:
                    task.status = TaskStatus.OPEN.value
            team = impact.team_losing_manager
            if team is not None:
                team.manager_id = None
            await session.flush()

            await session.execute(
                delete(UserSkill)
                .where(UserSkill.user_id == user_id)
                .execution_options(synchronize_session=False)
            )
            await session.execute(
                delete(Invitation)
                .where(Invitation.inviter_id == user_id)
                .execution_options(synchronize_session=False)
            )
            await session.delete(impact.user)
            await session.flush()

            return DeletionResult(
                deleted_user_id=user_id,
                unassigned_tasks_count=len(impact.tasks_to_unassign),
                cleared_team_id=team.id if team is not None else None,
                removed_skill_associations=impact.skill_associations_count,
                removed_invitations=impact.sent_invitations_count,
            )

        result = await self._coordinator.run(work)
        logger.info(
            f"User {user_id} deleted, {result.unassigned_tasks_count} task(s) released",
            extra={"user_id": user_id, "team_id": result.cleared_team_id},
        )
        return result
