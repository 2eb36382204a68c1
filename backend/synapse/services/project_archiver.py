"""Project Archiver — cascading archive of a project, its active tasks and their assignees.

Invariants:
    - Project must exist AND belong to the given team, else ProjectNotFoundError
      (no existence leak across teams)
    - Archiving is terminal: a second call raises ProjectAlreadyArchivedError
    - Assignees of active unfinished tasks become available; active tasks and the
      project are archived with the same timestamp
    - All of it is one unit of work: a failure leaves project and tasks untouched

Design Decisions:
    - Set-based UPDATEs instead of per-task loops: constant statement count
    - archived_tasks_count computed with COUNT before the update: rowcount is not
      reliable across drivers once RETURNING is involved
    - synchronize_session=False: the unit never holds Task/User objects it updates
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from synapse.core.domain_types import Availability, ProjectId, TaskStatus, TeamId
from synapse.core.errors import ProjectAlreadyArchivedError, ProjectNotFoundError
from synapse.infrastructure.unit_of_work import TransactionCoordinator
from synapse.models.project import Project
from synapse.models.task import Task
from synapse.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class ArchiveProjectResult:
    project: Project
    archived_tasks_count: int


class ProjectArchiver:

    def __init__(self, coordinator: TransactionCoordinator):
        self._coordinator = coordinator

    async def archive_project(
        self, project_id: ProjectId, team_id: TeamId,
    ) -> ArchiveProjectResult:
        result = await self._coordinator.run(
            lambda session: self._archive(session, project_id, team_id)
        )
        logger.info(
            f"Project {project_id} archived with {result.archived_tasks_count} task(s)",
            extra={"project_id": project_id, "team_id": team_id},
        )
        return result

    async def _archive(
        self, session: AsyncSession, project_id: ProjectId, team_id: TeamId,
    ) -> ArchiveProjectResult:
        project = (await session.execute(
            select(Project).where(
                Project.id == project_id, Project.team_id == team_id,
            )
        )).scalar_one_or_none()
        if project is None:
            raise ProjectNotFoundError(project_id)
        if project.archived:
            raise ProjectAlreadyArchivedError(project_id)

        now = datetime.now(timezone.utc)
        active = (Task.project_id == project_id, Task.archived.is_(False))

        busy_assignees = select(Task.assignee_id).where(
            *active,
            Task.assignee_id.is_not(None),
            Task.status != TaskStatus.DONE.value,
        )
        await session.execute(
            update(User)
            .where(User.id.in_(busy_assignees))
            .values(availability=Availability.AVAILABLE.value)
            .execution_options(synchronize_session=False)
        )

        count = (await session.execute(
            select(func.count()).select_from(Task).where(*active)
        )).scalar_one()
        await session.execute(
            update(Task)
            .where(*active)
            .values(archived=True, archived_at=now)
            .execution_options(synchronize_session=False)
        )

        project.archived = True
        project.archived_at = now
        await session.flush()
        return ArchiveProjectResult(project=project, archived_tasks_count=count)
