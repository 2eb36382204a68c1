"""Task Intake — create a task and link its required skills as one unit of work.

Invariants:
    - Task row and its required-skill links commit together or not at all
    - Missing project -> ProjectNotFoundError; archived project -> ProjectArchivedError
    - Extracted names pass through the alias table before resolution

Design Decisions:
    - Text analysis runs BEFORE the unit opens: no transaction is held across a
      remote call (ADR: short transactions)
    - Explicit required_skill_names bypass the extractor entirely
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from synapse.core.domain_types import TaskStatus
from synapse.core.errors import ProjectArchivedError, ProjectNotFoundError
from synapse.core.repository_protocols import SkillExtractor
from synapse.core.skill_normalization import normalize_skill_names
from synapse.infrastructure.unit_of_work import TransactionCoordinator
from synapse.models.project import Project
from synapse.models.task import Task
from synapse.models.task_required_skill import TaskRequiredSkill
from synapse.schemas.task import CreateTaskParams
from synapse.services.skill_resolver import SkillResolver, load_alias_map

logger = logging.getLogger(__name__)


@dataclass
class CreateTaskResult:
    task: Task
    required_skills: list[TaskRequiredSkill] = field(default_factory=list)


class TaskIntake:
    """ProcessNewTask: task creation plus skill linking."""

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        resolver: SkillResolver,
        extractor: SkillExtractor | None = None,
    ):
        self._coordinator = coordinator
        self._resolver = resolver
        self._extractor = extractor

    async def create_task(
        self,
        params: CreateTaskParams,
        required_skill_names: list[str] | None = None,
    ) -> CreateTaskResult:
        raw_names = required_skill_names
        if raw_names is None:
            raw_names = await self._extract(params)

        async def work(session: AsyncSession) -> CreateTaskResult:
            project = await session.get(Project, params.project_id)
            if project is None:
                raise ProjectNotFoundError(params.project_id)
            if project.archived:
                raise ProjectArchivedError(params.project_id)

            task = Task(
                project_id=project.id,
                title=params.title,
                description=params.description,
                priority=params.priority.value,
                status=TaskStatus.OPEN.value,
            )
            session.add(task)
            await session.flush()

            names = normalize_skill_names(raw_names, await load_alias_map(session))
            if not names:
                return CreateTaskResult(task=task)
            links = await self._resolver.link_task_skills(session, task.id, names)
            return CreateTaskResult(task=task, required_skills=links)

        result = await self._coordinator.run(work)
        logger.info(
            f"Task {result.task.id} created with {len(result.required_skills)} required skill(s)",
            extra={"task_id": result.task.id, "project_id": params.project_id},
        )
        return result

    async def _extract(self, params: CreateTaskParams) -> list[str]:
        if self._extractor is None or not params.description:
            return []
        return await self._extractor.extract_skills(
            f"{params.title}\n\n{params.description}",
        )
