"""Task Assignment — atomic assign/complete coupling task state and user availability.

Invariants:
    - After assign: task.status = in_progress, task.assignee_id = user, user busy
    - After complete: task.status = done, completed_at set, former assignee available
    - Archived tasks are outside the active dataset: reported as not found
    - Each public call is one unit of work (task and user change together or not at all)

Design Decisions:
    - No precondition on prior status or assignee. A second assignment overwrites
      the first; the displaced assignee's availability is NOT reconciled. Logged at
      WARNING so operators can see overwrites. Concurrent assignments are ordered
      by commit order in the database
    - assign_in/complete_in take an open session so larger workflows can compose them
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from synapse.core.domain_types import Availability, TaskId, TaskStatus, UserId
from synapse.core.errors import ResourceNotFoundError
from synapse.infrastructure.unit_of_work import TransactionCoordinator
from synapse.models.task import Task
from synapse.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class AssignTaskResult:
    task: Task
    assignee: User
    previous_assignee_id: UserId | None = None


@dataclass
class CompleteTaskResult:
    task: Task
    released_user: User | None = None


async def load_active_task(session: AsyncSession, task_id: TaskId) -> Task:
    """Fetch a non-archived task or raise ResourceNotFoundError."""
    result = await session.execute(
        select(Task).where(Task.id == task_id, Task.archived.is_(False))
    )
    task = result.scalar_one_or_none()
    if task is None:
        raise ResourceNotFoundError("Task", task_id)
    return task


async def assign_in(
    session: AsyncSession, task_id: TaskId, user_id: UserId,
) -> AssignTaskResult:
    task = await load_active_task(session, task_id)
    user = await session.get(User, user_id)
    if user is None:
        raise ResourceNotFoundError("User", user_id)

    previous = task.assignee_id
    if previous is not None and previous != user_id:
        logger.warning(
            f"Task {task_id} reassigned from user {previous} to {user_id}",
            extra={"task_id": task_id, "user_id": user_id},
        )
    task.assignee_id = user.id
    task.status = TaskStatus.IN_PROGRESS.value
    user.availability = Availability.BUSY.value
    await session.flush()
    return AssignTaskResult(task=task, assignee=user, previous_assignee_id=previous)


async def complete_in(session: AsyncSession, task_id: TaskId) -> CompleteTaskResult:
    task = await load_active_task(session, task_id)
    task.status = TaskStatus.DONE.value
    task.completed_at = datetime.now(timezone.utc)

    released = None
    if task.assignee_id is not None:
        released = await session.get(User, task.assignee_id)
        if released is not None:
            released.availability = Availability.AVAILABLE.value
    await session.flush()
    return CompleteTaskResult(task=task, released_user=released)


class TaskAssignmentTransactions:
    """Public assign/complete operations, one unit of work each."""

    def __init__(self, coordinator: TransactionCoordinator):
        self._coordinator = coordinator

    async def assign_task(self, task_id: TaskId, user_id: UserId) -> AssignTaskResult:
        result = await self._coordinator.run(
            lambda session: assign_in(session, task_id, user_id)
        )
        logger.info(
            f"Task {task_id} assigned to user {user_id}",
            extra={"task_id": task_id, "user_id": user_id},
        )
        return result

    async def complete_task(self, task_id: TaskId) -> CompleteTaskResult:
        result = await self._coordinator.run(
            lambda session: complete_in(session, task_id)
        )
        logger.info(f"Task {task_id} completed", extra={"task_id": task_id})
        return result
