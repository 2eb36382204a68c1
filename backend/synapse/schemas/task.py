"""Task Schemas — parameters for task intake.

Invariants:
    - title: 1-255 chars, stripped, non-empty
    - project_id positive
"""

from pydantic import BaseModel, Field, field_validator

from synapse.core.domain_types import TaskPriority


class CreateTaskParams(BaseModel):
    project_id: int = Field(gt=0)
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty or whitespace")
        return v
