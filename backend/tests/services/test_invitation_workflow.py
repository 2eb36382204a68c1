"""Invitation Workflow — role-checked issuance and atomic acceptance.

Invariants:
    - admin -> manager into an existing vacant team; manager -> engineer into own team
    - One pending invitation per email; lapsed invitations are expired first
    - Acceptance takes email/role/team from the invitation, all steps in one unit
    - Unknown, expired and consumed tokens all raise InvitationNotPendingError
    - Recommender refresh scheduled only after a committed acceptance
"""

from datetime import datetime, timedelta, timezone

import pytest

from synapse.core.domain_types import InvitationStatus, UserRole
from synapse.core.errors import (
    DuplicateInvitationError,
    InvalidRoleSequenceError,
    InvitationNotPendingError,
    ManagerHasNoTeamError,
    PermissionDeniedError,
    SkillExtractorUnavailableError,
    TeamAlreadyHasManagerError,
    TeamIdRequiredError,
    TeamNotFoundError,
)
from synapse.core.session_context import SessionContext
from synapse.models import Invitation, Skill, SkillAlias, Team, User, UserSkill
from synapse.services.invitation_workflow import InvitationWorkflow
from synapse.services.skill_resolver import SkillResolver
from tests.services.actors import as_actor


async def _seed_invitation(data, inviter, email, role=UserRole.ENGINEER, team_id=None,
                           expires_in=timedelta(hours=72), token="tok"):
    now = datetime.now(timezone.utc)
    return await data.add(Invitation(
        email=email,
        invitation_token=token,
        role_to_invite=role.value,
        inviter_id=inviter.id,
        team_id=team_id,
        status=InvitationStatus.PENDING.value,
        created_at=now,
        expires_at=now + expires_in,
    ))


@pytest.fixture
async def admin(data):
    return await data.user(UserRole.ADMIN)


# ─── create_invitation ──────────────────────────────────────────

async def test_admin_invites_manager_to_vacant_team(services, data, admin):
    team = await data.team()
    before = datetime.now(timezone.utc)

    invitation = await services.invitations.create_invitation(
        as_actor(admin), "Lead@Example.com", UserRole.MANAGER, team.id,
    )

    assert invitation.status == InvitationStatus.PENDING
    assert invitation.email == "lead@example.com"
    assert invitation.team_id == team.id
    assert invitation.role_to_invite == "manager"
    assert invitation.expires_at - invitation.created_at == timedelta(hours=72)
    assert abs(invitation.expires_at - (before + timedelta(hours=72))) < timedelta(seconds=5)
    assert len(invitation.invitation_token) >= 32


async def test_repeat_invitation_is_duplicate(services, data, admin):
    team = await data.team()
    actor = as_actor(admin)
    await services.invitations.create_invitation(actor, "lead@example.com", "manager", team.id)

    with pytest.raises(DuplicateInvitationError):
        await services.invitations.create_invitation(actor, "lead@example.com", "manager", team.id)

    assert len(await data.invitations_for("lead@example.com")) == 1
    assert (await data.get(Team, team.id)).manager_id is None


async def test_manager_invites_engineer_into_own_team(services, data):
    team = await data.team()
    other = await data.team()
    manager = await data.manager_of(team)

    invitation = await services.invitations.create_invitation(
        as_actor(manager), "dev@example.com", UserRole.ENGINEER, team_id=other.id,
    )

    assert invitation.team_id == team.id
    assert invitation.inviter_id == manager.id


async def test_manager_without_team_cannot_invite(services, data):
    manager = await data.user(UserRole.MANAGER)
    with pytest.raises(ManagerHasNoTeamError):
        await services.invitations.create_invitation(
            as_actor(manager), "dev@example.com", UserRole.ENGINEER,
        )
    assert await data.invitations_for("dev@example.com") == []


async def test_admin_must_supply_team(services, admin):
    with pytest.raises(TeamIdRequiredError):
        await services.invitations.create_invitation(
            as_actor(admin), "lead@example.com", UserRole.MANAGER,
        )


async def test_admin_team_must_exist(services, admin):
    with pytest.raises(TeamNotFoundError):
        await services.invitations.create_invitation(
            as_actor(admin), "lead@example.com", UserRole.MANAGER, 404,
        )


async def test_admin_team_must_be_vacant(services, data, admin):
    team = await data.team()
    await data.manager_of(team)
    with pytest.raises(TeamAlreadyHasManagerError):
        await services.invitations.create_invitation(
            as_actor(admin), "lead@example.com", UserRole.MANAGER, team.id,
        )


async def test_admin_cannot_invite_engineer(services, data, admin):
    team = await data.team()
    with pytest.raises(InvalidRoleSequenceError):
        await services.invitations.create_invitation(
            as_actor(admin), "dev@example.com", UserRole.ENGINEER, team.id,
        )


async def test_engineer_cannot_invite(services, data):
    team = await data.team()
    engineer = await data.user(team_id=team.id)
    with pytest.raises(PermissionDeniedError):
        await services.invitations.create_invitation(
            as_actor(engineer), "dev@example.com", UserRole.ENGINEER,
        )


async def test_stored_role_wins_over_session_role(services, data):
    engineer = await data.user()
    forged = SessionContext(user_id=engineer.id, role=UserRole.ADMIN)
    team = await data.team()
    with pytest.raises(PermissionDeniedError):
        await services.invitations.create_invitation(
            forged, "lead@example.com", UserRole.MANAGER, team.id,
        )


async def test_lapsed_invitation_does_not_block_new_one(services, data):
    team = await data.team()
    manager = await data.manager_of(team)
    await _seed_invitation(
        data, manager, "dev@example.com", team_id=team.id,
        expires_in=timedelta(hours=-1), token="old",
    )

    fresh = await services.invitations.create_invitation(
        as_actor(manager), "dev@example.com", UserRole.ENGINEER,
    )

    statuses = {i.invitation_token: i.status for i in await data.invitations_for("dev@example.com")}
    assert statuses["old"] == InvitationStatus.EXPIRED
    assert statuses[fresh.invitation_token] == InvitationStatus.PENDING


async def test_expire_stale_invitations_bulk(services, data, admin):
    await _seed_invitation(data, admin, "a@example.com", expires_in=timedelta(hours=-2), token="a")
    await _seed_invitation(data, admin, "b@example.com", expires_in=timedelta(hours=-1), token="b")
    await _seed_invitation(data, admin, "c@example.com", token="c")

    assert await services.invitations.expire_stale_invitations() == 2
    assert (await data.invitations_for("c@example.com"))[0].status == InvitationStatus.PENDING


# ─── accept_invitation ──────────────────────────────────────────

async def test_accept_manager_invitation(services, data, admin, notifier):
    team = await data.team()
    invitation = await services.invitations.create_invitation(
        as_actor(admin), "lead@example.com", UserRole.MANAGER, team.id,
    )

    result = await services.invitations.accept_invitation(
        invitation.invitation_token, "Lea", "hashed-pw",
    )

    user = await data.get(User, result.user.id)
    assert (user.email, user.role, user.team_id) == ("lead@example.com", "manager", team.id)
    assert user.availability == "available"
    assert (await data.get(Team, team.id)).manager_id == user.id
    assert (await data.get(Invitation, invitation.id)).status == InvitationStatus.ACCEPTED
    notifier.schedule_refresh.assert_called_once()


async def test_accept_links_skills_with_coerced_proficiency(services, data):
    team = await data.team()
    manager = await data.manager_of(team)
    invitation = await _seed_invitation(data, manager, "dev@example.com", team_id=team.id)

    result = await services.invitations.accept_invitation(
        invitation.invitation_token, "Dev", "pw",
        {"Go": "expert", "Rust": "wizard", "SQL": None},
    )

    links = await data.all(UserSkill, UserSkill.user_id == result.user.id)
    by_skill = {
        (await data.get(Skill, link.skill_id)).skill_name: link.proficiency
        for link in links
    }
    assert by_skill == {"Go": "expert", "Rust": "beginner", "SQL": "beginner"}


async def test_unknown_token_not_pending(services, notifier):
    with pytest.raises(InvitationNotPendingError):
        await services.invitations.accept_invitation("nope", "X", "pw")
    notifier.schedule_refresh.assert_not_called()


async def test_expired_token_not_pending(services, data, admin):
    await _seed_invitation(data, admin, "late@example.com", expires_in=timedelta(minutes=-1))
    with pytest.raises(InvitationNotPendingError):
        await services.invitations.accept_invitation("tok", "Late", "pw")
    assert await data.all(User, User.email == "late@example.com") == []


async def test_consumed_token_not_pending(services, data):
    team = await data.team()
    manager = await data.manager_of(team)
    await _seed_invitation(data, manager, "dev@example.com", team_id=team.id)
    await services.invitations.accept_invitation("tok", "Dev", "pw")
    with pytest.raises(InvitationNotPendingError):
        await services.invitations.accept_invitation("tok", "Dev again", "pw")


async def test_accept_revalidates_team_vacancy(services, data, admin, notifier):
    team = await data.team()
    invitation = await services.invitations.create_invitation(
        as_actor(admin), "lead@example.com", UserRole.MANAGER, team.id,
    )
    await data.manager_of(team)

    with pytest.raises(TeamAlreadyHasManagerError):
        await services.invitations.accept_invitation(invitation.invitation_token, "Lea", "pw")

    assert await data.all(User, User.email == "lead@example.com") == []
    assert (await data.get(Invitation, invitation.id)).status == InvitationStatus.PENDING
    notifier.schedule_refresh.assert_not_called()


async def test_skill_failure_aborts_whole_acceptance(services, data, monkeypatch, notifier):
    team = await data.team()
    manager = await data.manager_of(team)
    invitation = await _seed_invitation(data, manager, "dev@example.com", team_id=team.id)

    async def broken_link(*args, **kwargs):
        raise RuntimeError("skill store down")

    monkeypatch.setattr(services.skills, "link_user_skills", broken_link)
    with pytest.raises(RuntimeError):
        await services.invitations.accept_invitation(
            invitation.invitation_token, "Dev", "pw", {"Go": "expert"},
        )

    assert await data.all(User, User.email == "dev@example.com") == []
    assert (await data.get(Invitation, invitation.id)).status == InvitationStatus.PENDING
    notifier.schedule_refresh.assert_not_called()


async def test_accept_with_resume_uses_extractor_and_aliases(services, data, extractor):
    team = await data.team()
    manager = await data.manager_of(team)
    k8s = await data.skill("Kubernetes")
    await data.add(SkillAlias(alias_name="k8s", skill_id=k8s.id))
    await _seed_invitation(data, manager, "ops@example.com", team_id=team.id)
    extractor.extract_skills.return_value = ["K8s", "terraform"]
    extractor.extract_proficiencies.return_value = {"kubernetes": "expert"}

    result = await services.invitations.accept_with_resume(
        "tok", "Ops", "pw", "5 years of k8s and terraform",
    )

    extractor.extract_proficiencies.assert_awaited_once_with(
        "5 years of k8s and terraform", ["Kubernetes", "Terraform"],
    )
    levels = {link.skill_id: link.proficiency for link in result.skills}
    assert levels[k8s.id] == "expert"
    assert sorted(levels.values()) == ["beginner", "expert"]


async def test_accept_with_resume_requires_extractor(coordinator, data):
    team = await data.team()
    manager = await data.manager_of(team)
    invitation = await _seed_invitation(data, manager, "ops@example.com", team_id=team.id)
    workflow = InvitationWorkflow(coordinator, SkillResolver())

    with pytest.raises(SkillExtractorUnavailableError) as exc:
        await workflow.accept_with_resume("tok", "Ops", "pw", "k8s")

    assert exc.value.http_status == 503
    assert (await data.get(Invitation, invitation.id)).status == InvitationStatus.PENDING
