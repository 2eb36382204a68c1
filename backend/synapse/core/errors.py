"""Error Hierarchy — typed, categorized exceptions for all Synapse failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Business-rule errors (4xx) are recoverable; infrastructure errors (5xx) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with SynapseError base: FastAPI global handler catches all (ADR: uniform error shape)
    - One class per enumerable business failure: callers branch on type, never on message text
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    PERMISSION = "permission"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"
    TIMEOUT = "timeout"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: int | None = None
    entity_type: str | None = None
    entity_id: int | str | None = None
    debug_info: dict[str, Any] | None = None


class SynapseError(Exception):
    """Base exception for all Synapse errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "entity_type": self.context.entity_type,
                    "entity_id": self.context.entity_id,
                },
            }
        }


# ─── Authorization & Role Hierarchy (403/400) ───────────────────

class PermissionDeniedError(SynapseError):
    """Actor's role does not allow the requested action."""
    def __init__(self, role: str, action: str, context: ErrorContext | None = None):
        super().__init__(
            f"User with role '{role}' cannot {action}",
            "PERMISSION_DENIED", ErrorCategory.PERMISSION,
            ErrorSeverity.ERROR, context, 403,
        )
        self.role = role


class InvalidRoleSequenceError(SynapseError):
    """Invited role is not the one directly below the inviter's role."""
    def __init__(
        self, inviter_role: str, invited_role: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Invitations can only be for the role directly below in the hierarchy "
            f"(admin -> manager -> engineer): '{inviter_role}' cannot invite '{invited_role}'",
            "INVALID_ROLE_SEQUENCE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class TeamIdRequiredError(SynapseError):
    """Manager invitation issued without a team."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "A team ID must be provided when inviting a manager",
            "TEAM_ID_REQUIRED", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class ManagerHasNoTeamError(SynapseError):
    """Manager without a team tried to invite an engineer."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "A manager must be assigned to a team to invite engineers",
            "MANAGER_HAS_NO_TEAM", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class TeamAlreadyHasManagerError(SynapseError):
    """Target team already has a manager assigned."""
    def __init__(self, team_id: int, context: ErrorContext | None = None):
        super().__init__(
            f"Team '{team_id}' already has a manager assigned",
            "TEAM_ALREADY_HAS_MANAGER", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.team_id = team_id


# ─── Invitations ─────────────────────────────────────────────────

class DuplicateInvitationError(SynapseError):
    """A pending invitation already exists for this email."""
    def __init__(self, email: str, context: ErrorContext | None = None):
        super().__init__(
            "A pending invitation for this email already exists",
            "DUPLICATE_INVITATION", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.email = email


class InvitationNotPendingError(SynapseError):
    """Token unknown, expired, or already consumed — deliberately indistinguishable."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Invitation is not pending or was not found",
            "INVITATION_NOT_PENDING", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Lifecycle & Archive ─────────────────────────────────────────

class AdminDeletionForbiddenError(SynapseError):
    """Admin accounts are never deletable."""
    def __init__(self, user_id: int, context: ErrorContext | None = None):
        super().__init__(
            "Admin users cannot be deleted for system integrity",
            "ADMIN_DELETION_FORBIDDEN", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 403,
        )
        self.user_id = user_id


class InvalidRoleChangeError(SynapseError):
    """Role change rejected by ValidateRoleChange rules."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            reason, "INVALID_ROLE_CHANGE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class ProjectAlreadyArchivedError(SynapseError):
    """Archive requested for an archived project."""
    def __init__(self, project_id: int, context: ErrorContext | None = None):
        super().__init__(
            f"Project '{project_id}' is already archived",
            "PROJECT_ALREADY_ARCHIVED", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.project_id = project_id


class ProjectArchivedError(SynapseError):
    """Write attempted against an archived (immutable) project."""
    def __init__(self, project_id: int, context: ErrorContext | None = None):
        super().__init__(
            f"Project '{project_id}' is archived and cannot be modified",
            "PROJECT_ARCHIVED", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.project_id = project_id


# ─── Not Found (404) ─────────────────────────────────────────────

class ResourceNotFoundError(SynapseError):
    """Requested resource does not exist."""
    def __init__(
        self,
        resource_type: str,
        resource_id: int | str,
        context: ErrorContext | None = None,
        code: str = "RESOURCE_NOT_FOUND",
    ):
        ctx = context or ErrorContext()
        ctx.entity_type = resource_type
        ctx.entity_id = resource_id
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            code, ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class TeamNotFoundError(ResourceNotFoundError):
    """Referenced team does not exist."""
    def __init__(self, team_id: int, context: ErrorContext | None = None):
        super().__init__("Team", team_id, context, code="TEAM_NOT_FOUND")


class ProjectNotFoundError(ResourceNotFoundError):
    """Project absent, or not owned by the given team (no existence leak)."""
    def __init__(self, project_id: int, context: ErrorContext | None = None):
        super().__init__("Project", project_id, context, code="PROJECT_NOT_FOUND")


# ─── Request Boundary (400) ──────────────────────────────────────

class RequestValidationFailedError(SynapseError):
    """Request payload failed schema validation before reaching a service."""
    def __init__(self, details: list[dict[str, str]], context: ErrorContext | None = None):
        super().__init__(
            "Invalid request data", "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.details = details

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["details"] = self.details
        return response


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(SynapseError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class TransactionTimeoutError(SynapseError):
    """Unit of work exceeded its time budget and was rolled back."""
    def __init__(self, timeout_seconds: float, context: ErrorContext | None = None):
        super().__init__(
            f"Operation exceeded {timeout_seconds}s and was rolled back",
            "TRANSACTION_TIMEOUT", ErrorCategory.TIMEOUT,
            ErrorSeverity.CRITICAL, context, 504,
        )
        self.timeout_seconds = timeout_seconds


class SkillExtractorUnavailableError(SynapseError):
    """An operation needs the text-analysis collaborator but none was injected."""
    def __init__(self, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Skill extraction is not configured; cannot {operation}",
            "SKILL_EXTRACTOR_UNAVAILABLE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 503,
        )
        self.operation = operation


class UnexpectedError(SynapseError):
    """Stand-in for any non-Synapse exception; carries no detail from the original."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "An unexpected error occurred", "INTERNAL_ERROR", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
