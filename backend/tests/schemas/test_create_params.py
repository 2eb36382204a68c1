"""Parameter schemas — field-level validation for onboarding and task intake."""

import pytest
from pydantic import ValidationError

from synapse.core.domain_types import Availability, TaskPriority, UserRole
from synapse.schemas.task import CreateTaskParams
from synapse.schemas.user import CreateUserParams


def test_user_defaults():
    params = CreateUserParams(email="A@B.io", password_hash="h")
    assert params.email == "a@b.io"
    assert params.role is UserRole.ENGINEER
    assert params.availability is Availability.AVAILABLE
    assert params.team_id is None


@pytest.mark.parametrize("email", ["no-at-sign", "@domain.io", "local@"])
def test_user_email_rejected(email):
    with pytest.raises(ValidationError):
        CreateUserParams(email=email, password_hash="h")


def test_user_role_must_be_known():
    with pytest.raises(ValidationError):
        CreateUserParams(email="a@b.io", password_hash="h", role="owner")


def test_user_team_id_positive():
    with pytest.raises(ValidationError):
        CreateUserParams(email="a@b.io", password_hash="h", team_id=0)


def test_task_title_stripped():
    params = CreateTaskParams(project_id=1, title="  Ship it  ")
    assert params.title == "Ship it"
    assert params.priority is TaskPriority.MEDIUM


def test_task_title_whitespace_rejected():
    with pytest.raises(ValidationError):
        CreateTaskParams(project_id=1, title="   ")


def test_task_project_required_positive():
    with pytest.raises(ValidationError):
        CreateTaskParams(project_id=0, title="x")
