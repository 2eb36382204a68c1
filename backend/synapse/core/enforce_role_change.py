"""Role Change Rules — pure ordered checks behind ValidateRoleChange.

Invariants:
    - Rules evaluated in order: same role, admin immutable, no promotion to admin,
      manager promotion needs a vacant team
    - Never mutates; returns a reason string or None
    - Demotion away from manager is always allowed (the managed team is surfaced by the caller)

Design Decisions:
    - Split into static (role-only) and team checks so the shell only loads the
      target team when the static rules pass (ADR: impureim sandwich)
    - Messages are stable strings: they are the user-facing reason in RoleChangeValidation
"""

from synapse.core.domain_types import TeamId, UserRole

INVALID_ROLE = "invalid role"
SAME_ROLE = "user already has this role"
ADMIN_IMMUTABLE = "admin role cannot be changed"
NO_ADMIN_PROMOTION = "cannot promote users to admin role"
TEAM_REQUIRED = "team assignment required when promoting to manager"
TEAM_NOT_FOUND = "target team not found"
TEAM_HAS_MANAGER = "target team already has a manager"


def check_static_rules(current_role: str, new_role: str) -> str | None:
    """Role-only rules. Returns rejection reason or None."""
    if new_role not in [r.value for r in UserRole]:
        return INVALID_ROLE
    if current_role == new_role:
        return SAME_ROLE
    if current_role == UserRole.ADMIN:
        return ADMIN_IMMUTABLE
    if new_role == UserRole.ADMIN:
        return NO_ADMIN_PROMOTION
    return None


def needs_target_team(new_role: str) -> bool:
    return new_role == UserRole.MANAGER


def check_target_team(
    team_id: TeamId | None, team_exists: bool, team_has_manager: bool,
) -> str | None:
    """Manager-promotion rules for the supplied team."""
    if team_id is None:
        return TEAM_REQUIRED
    if not team_exists:
        return TEAM_NOT_FOUND
    if team_has_manager:
        return TEAM_HAS_MANAGER
    return None


def is_manager_demotion(current_role: str, new_role: str) -> bool:
    return current_role == UserRole.MANAGER and new_role != UserRole.MANAGER
