"""Error Hierarchy — codes, statuses and the REST envelope."""

import pytest

from synapse.core.errors import (
    AdminDeletionForbiddenError,
    DatabaseError,
    DuplicateInvitationError,
    ErrorCategory,
    InvitationNotPendingError,
    ProjectNotFoundError,
    ResourceNotFoundError,
    SkillExtractorUnavailableError,
    SynapseError,
    TeamAlreadyHasManagerError,
    TeamNotFoundError,
    TransactionTimeoutError,
)


@pytest.mark.parametrize("error,code,status", [
    (DuplicateInvitationError("a@b.c"), "DUPLICATE_INVITATION", 409),
    (InvitationNotPendingError(), "INVITATION_NOT_PENDING", 404),
    (TeamAlreadyHasManagerError(4), "TEAM_ALREADY_HAS_MANAGER", 409),
    (AdminDeletionForbiddenError(1), "ADMIN_DELETION_FORBIDDEN", 403),
    (DatabaseError("boom", "commit"), "DATABASE_ERROR", 503),
    (TransactionTimeoutError(2.0), "TRANSACTION_TIMEOUT", 504),
    (SkillExtractorUnavailableError("parse resumes"), "SKILL_EXTRACTOR_UNAVAILABLE", 503),
])
def test_codes_and_statuses(error, code, status):
    assert isinstance(error, SynapseError)
    assert error.code == code
    assert error.http_status == status


def test_not_found_subclasses_carry_entity_context():
    err = TeamNotFoundError(5)
    assert isinstance(err, ResourceNotFoundError)
    assert err.code == "TEAM_NOT_FOUND"
    assert err.context.entity_type == "Team"
    assert err.context.entity_id == 5
    assert ProjectNotFoundError(8).category is ErrorCategory.RESOURCE_NOT_FOUND


def test_to_response_envelope():
    body = DuplicateInvitationError("a@b.c").to_response()["error"]
    assert body["code"] == "DUPLICATE_INVITATION"
    assert body["category"] == "conflict"
    assert body["severity"] == "error"
    assert "timestamp" in body


def test_database_error_hides_driver_details():
    err = DatabaseError("Integrity constraint violated", "commit")
    assert "Integrity constraint violated" in err.message
    assert err.operation == "commit"
