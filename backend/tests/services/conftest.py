"""Service test fixtures — engine services wired onto the test coordinator.

Invariants:
    - Collaborators (notifier, extractor) are mocks: no network in service tests
    - Services share the per-test in-memory database from the root conftest

Design Decisions:
    - Mock/AsyncMock over hand-written fakes: call assertions come for free
"""

from unittest.mock import AsyncMock, Mock

import pytest

from synapse.services.service_registry import build_services


@pytest.fixture
def notifier():
    fake = Mock()
    fake.schedule_refresh.return_value = None
    return fake


@pytest.fixture
def extractor():
    fake = AsyncMock()
    fake.extract_skills.return_value = []
    fake.extract_proficiencies.return_value = {}
    return fake


@pytest.fixture
def services(coordinator, notifier, extractor):
    return build_services(coordinator, notifier=notifier, extractor=extractor)

