"""Service Registry — wires every business service onto one coordinator.

Invariants:
    - All services share the same TransactionCoordinator and SkillResolver
    - Built once per process in the FastAPI lifespan (app.state.services)
    - The SkillExtractor is optional and must be injected by the embedding
      application: without it TaskIntake skips extraction and
      accept_with_resume raises SkillExtractorUnavailableError

Design Decisions:
    - Explicit constructor wiring over a DI container (ADR: no convention-over-config)
"""

from dataclasses import dataclass

from synapse.core.repository_protocols import RefreshNotifier, SkillExtractor
from synapse.infrastructure.unit_of_work import TransactionCoordinator
from synapse.services.invitation_workflow import InvitationWorkflow
from synapse.services.project_archiver import ProjectArchiver
from synapse.services.skill_resolver import SkillResolver
from synapse.services.task_assignment import TaskAssignmentTransactions
from synapse.services.task_intake import TaskIntake
from synapse.services.user_lifecycle import UserLifecycleManager


@dataclass
class Services:
    coordinator: TransactionCoordinator
    skills: SkillResolver
    tasks: TaskAssignmentTransactions
    intake: TaskIntake
    archiver: ProjectArchiver
    invitations: InvitationWorkflow
    users: UserLifecycleManager


def build_services(
    coordinator: TransactionCoordinator,
    notifier: RefreshNotifier | None = None,
    extractor: SkillExtractor | None = None,
    invitation_ttl_hours: int = 72,
) -> Services:
    resolver = SkillResolver()
    return Services(
        coordinator=coordinator,
        skills=resolver,
        tasks=TaskAssignmentTransactions(coordinator),
        intake=TaskIntake(coordinator, resolver, extractor),
        archiver=ProjectArchiver(coordinator),
        invitations=InvitationWorkflow(
            coordinator, resolver, notifier, extractor, invitation_ttl_hours,
        ),
        users=UserLifecycleManager(coordinator, resolver),
    )
