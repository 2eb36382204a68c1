"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, TeamId, ProjectId, TaskId wrap ints in service and core signatures
    - All valid states encoded as Enums — no raw string matching
    - Enum values match the strings persisted in the database

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: compare equal to the raw column value and serialize to JSON without encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", int)
TeamId = NewType("TeamId", int)
ProjectId = NewType("ProjectId", int)
TaskId = NewType("TaskId", int)


# ─── Enums ───────────────────────────────────────────────────────

class UserRole(str, Enum):
    """Role hierarchy members — ordering lives in core/role_hierarchy.py."""
    ADMIN = "admin"
    MANAGER = "manager"
    ENGINEER = "engineer"


class Availability(str, Enum):
    """Busy while holding an in-progress task, available otherwise."""
    AVAILABLE = "available"
    BUSY = "busy"


class TaskStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ProficiencyLevel(str, Enum):
    """Three-level competence rating on a user-skill pairing."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"


class InvitationStatus(str, Enum):
    """Invitation lifecycle: pending -> accepted | expired."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
