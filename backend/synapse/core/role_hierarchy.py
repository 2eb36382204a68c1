"""Role Hierarchy — data-driven invitation policy for admin > manager > engineer.

Invariants:
    - An inviter may only invite the role directly below their own
    - Roles absent from INVITE_POLICIES cannot invite at all
    - Team resolution is decided by the policy, never by the caller's input alone

Design Decisions:
    - Table of InvitePolicy over if/else on role strings: the hierarchy is data,
      exhaustively testable by iterating every (inviter, invitee) pair
    - Raises typed errors directly: callers run these checks inside a unit of work
      and any raise aborts it
"""

from dataclasses import dataclass
from enum import Enum

from synapse.core.domain_types import UserRole
from synapse.core.errors import InvalidRoleSequenceError, PermissionDeniedError


class TeamRule(str, Enum):
    """How the invitation's team is determined."""
    EXPLICIT_VACANT = "explicit_vacant"  # caller supplies a team that has no manager
    INVITER_TEAM = "inviter_team"        # inherit the inviter's own team, input ignored


@dataclass(frozen=True)
class InvitePolicy:
    invitable_role: UserRole
    team_rule: TeamRule


INVITE_POLICIES: dict[UserRole, InvitePolicy] = {
    UserRole.ADMIN: InvitePolicy(UserRole.MANAGER, TeamRule.EXPLICIT_VACANT),
    UserRole.MANAGER: InvitePolicy(UserRole.ENGINEER, TeamRule.INVITER_TEAM),
}


def _label(value) -> str:
    return str(getattr(value, "value", value))


def _as_role(value: str) -> UserRole | None:
    try:
        return UserRole(value)
    except ValueError:
        return None


def policy_for(inviter_role: str) -> InvitePolicy:
    """Return the inviter's policy or raise PermissionDeniedError."""
    role = _as_role(inviter_role)
    policy = INVITE_POLICIES.get(role) if role is not None else None
    if policy is None:
        raise PermissionDeniedError(_label(inviter_role), "send invitations")
    return policy


def check_invitable(inviter_role: str, role_to_invite: str) -> InvitePolicy:
    """Validate the (inviter, invitee) pair and return the applicable policy."""
    policy = policy_for(inviter_role)
    if _as_role(role_to_invite) != policy.invitable_role:
        raise InvalidRoleSequenceError(_label(inviter_role), _label(role_to_invite))
    return policy
