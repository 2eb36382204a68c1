"""User Schemas — parameters for direct onboarding.

Invariants:
    - email stripped and lowercased, must contain '@'
    - password_hash is already hashed (hashing happens outside this package)
    - team_id, when present, is a positive int

Design Decisions:
    - Plain str + validator over EmailStr: avoids the email-validator extra for one check
"""

from pydantic import BaseModel, Field, field_validator

from synapse.core.domain_types import Availability, UserRole


def _clean_email(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v or v.startswith("@") or v.endswith("@"):
        raise ValueError("email must look like local@domain")
    return v


class CreateUserParams(BaseModel):
    """Fields for a new user row."""
    name: str | None = Field(None, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    password_hash: str = Field(min_length=1)
    role: UserRole = UserRole.ENGINEER
    team_id: int | None = Field(None, gt=0)
    availability: Availability = Availability.AVAILABLE

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _clean_email(v)
