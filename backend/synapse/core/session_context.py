"""Session Context — typed identity of the caller, built once at the boundary.

Invariants:
    - Immutable (frozen dataclass); core operations never see a raw claims map
    - role is always a valid UserRole; user_id is a positive int
    - team_id is None or a positive int (0/absent claims mean "no team")

Design Decisions:
    - from_claims() is the single place a loosely-typed token payload is interpreted;
      token verification itself stays outside this package
    - Malformed claims raise PermissionDeniedError: an unusable identity is an
      authorization failure, not a server error
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from synapse.core.domain_types import TeamId, UserId, UserRole
from synapse.core.errors import PermissionDeniedError


@dataclass(frozen=True)
class SessionContext:
    """Authenticated caller: who they are, what role they hold, which team."""
    user_id: UserId
    role: UserRole
    team_id: TeamId | None = None

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> "SessionContext":
        """Build from a verified token payload (user_id, role, team_id)."""
        role_value = claims.get("role")
        try:
            role = UserRole(role_value)
            user_id = int(claims["user_id"])
        except (KeyError, TypeError, ValueError):
            raise PermissionDeniedError(
                str(role_value), "authenticate with malformed claims",
            ) from None
        if user_id <= 0:
            raise PermissionDeniedError(role.value, "authenticate with malformed claims")

        raw_team = claims.get("team_id")
        try:
            team_id = int(raw_team) if raw_team else None
        except (TypeError, ValueError):
            team_id = None
        if team_id is not None and team_id <= 0:
            team_id = None
        return cls(
            user_id=UserId(user_id), role=role,
            team_id=TeamId(team_id) if team_id is not None else None,
        )

    def require_role(self, *roles: UserRole, action: str = "perform this action") -> None:
        """Raise PermissionDeniedError unless the caller holds one of roles."""
        if self.role not in roles:
            raise PermissionDeniedError(self.role.value, action)
