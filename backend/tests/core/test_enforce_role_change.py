"""Role Change Rules — ordered pure checks behind ValidateRoleChange.

Tests cover:
    - Rule order: invalid role, same role, admin immutable, no admin promotion
    - Manager promotion team checks (missing, not found, occupied)
    - Demotion detection
"""

from synapse.core.enforce_role_change import (
    ADMIN_IMMUTABLE,
    INVALID_ROLE,
    NO_ADMIN_PROMOTION,
    SAME_ROLE,
    TEAM_HAS_MANAGER,
    TEAM_NOT_FOUND,
    TEAM_REQUIRED,
    check_static_rules,
    check_target_team,
    is_manager_demotion,
    needs_target_team,
)
from synapse.core.domain_types import UserRole


# ─── check_static_rules ─────────────────────────────────────────

def test_unknown_role_rejected_first():
    assert check_static_rules("admin", "owner") == INVALID_ROLE


def test_same_role_is_rejected():
    assert check_static_rules("engineer", "engineer") == SAME_ROLE


def test_same_role_checked_before_admin_immutability():
    assert check_static_rules("admin", "admin") == SAME_ROLE


def test_admin_cannot_be_changed():
    assert check_static_rules("admin", "manager") == ADMIN_IMMUTABLE
    assert check_static_rules("admin", "engineer") == ADMIN_IMMUTABLE


def test_nobody_promoted_to_admin():
    assert check_static_rules("manager", "admin") == NO_ADMIN_PROMOTION
    assert check_static_rules("engineer", "admin") == NO_ADMIN_PROMOTION


def test_engineer_manager_moves_pass_static_rules():
    assert check_static_rules("engineer", "manager") is None
    assert check_static_rules("manager", "engineer") is None


def test_enum_new_role_accepted():
    assert check_static_rules("engineer", UserRole.MANAGER) is None


# ─── team checks ─────────────────────────────────────────────────

def test_only_manager_needs_target_team():
    assert needs_target_team("manager")
    assert not needs_target_team("engineer")


def test_target_team_required():
    assert check_target_team(None, False, False) == TEAM_REQUIRED


def test_target_team_must_exist():
    assert check_target_team(9, team_exists=False, team_has_manager=False) == TEAM_NOT_FOUND


def test_target_team_must_be_vacant():
    assert check_target_team(9, team_exists=True, team_has_manager=True) == TEAM_HAS_MANAGER


def test_vacant_team_passes():
    assert check_target_team(9, team_exists=True, team_has_manager=False) is None


def test_manager_demotion_detected():
    assert is_manager_demotion("manager", "engineer")
    assert not is_manager_demotion("engineer", "manager")
