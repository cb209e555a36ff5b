"""Task service for CRUD operations, assignment and comments."""

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from src.core import db_client
from src.core.config import constants
from src.core.errors import NotFoundError
from src.core.logging import span
from src.domain.family import Family
from src.domain.task import Comment, Task, TaskPriority
from src.domain.update_models import TaskUpdate


logger = logging.getLogger(__name__)

_TASKS = constants.TASKS_COLLECTION


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def family_filter(family_id: str, *, completed: bool | None = None) -> str:
    """Build the filter query scoping tasks to one family."""
    filters = [f'family_id = "{db_client.sanitize_param(family_id)}"']
    if completed is not None:
        filters.append(f"completed = {str(completed).lower()}")
    return " && ".join(filters)


async def get_family_task(*, task_id: str, family_id: str) -> Task:
    """Get a task that belongs to the given family.

    A task owned by another family is reported exactly like a missing one.

    Raises:
        NotFoundError: If the task does not exist or belongs to another family
        db_client.DatabaseError: If database operation fails
    """
    try:
        record = await db_client.get_record(collection=_TASKS, record_id=task_id)
    except db_client.RecordNotFoundError as e:
        raise NotFoundError("Task not found") from e

    if str(record.get("family_id")) != str(family_id):
        logger.warning("Task %s requested outside its family", task_id)
        raise NotFoundError("Task not found")

    return Task.model_validate(record)


async def save_task(*, task_id: str, data: dict[str, Any]) -> Task:
    """Write changed task fields and bump the update timestamp."""
    record = await db_client.update_record(
        collection=_TASKS,
        record_id=task_id,
        data={**data, "updated": datetime.now(UTC).isoformat()},
    )
    return Task.model_validate(record)


async def create_task(
    *,
    family: Family,
    title: str,
    description: str | None = None,
    priority: TaskPriority = TaskPriority.MEDIUM,
    due_date: datetime | None = None,
    assigned_to: str | None = None,
) -> Task:
    """Create a new open task for the family.

    Args:
        family: Owning family
        title: Task title
        description: Optional description
        priority: low, medium or high
        due_date: Optional due date
        assigned_to: Optional member name (not checked against the registry)

    Returns:
        Created task
    """
    with span("task_service.create_task"):
        now = datetime.now(UTC)
        record = await db_client.create_record(
            collection=_TASKS,
            data={
                "family_id": family.id,
                "title": title,
                "description": description,
                "priority": TaskPriority(priority).value,
                "assigned_to": assigned_to,
                "due_date": _iso(due_date),
                "completed": False,
                "completed_at": None,
                "comments": [],
                "created": now.isoformat(),
                "updated": now.isoformat(),
            },
        )
        logger.info("Created task: %s (assigned to: %s)", title, assigned_to or "unassigned")

        return Task.model_validate(record)


async def list_tasks(*, family_id: str, completed: bool | None = None) -> list[Task]:
    """List the family's tasks in creation order, optionally filtered by completion."""
    with span("task_service.list_tasks"):
        records = await db_client.list_all_records(
            collection=_TASKS,
            filter_query=family_filter(family_id, completed=completed),
            sort="created",
        )
        logger.debug("Retrieved %d tasks for family %s", len(records), family_id)

        return [Task.model_validate(record) for record in records]


async def update_task(*, family: Family, task_id: str, changes: TaskUpdate) -> Task:
    """Apply a partial update to a task.

    ``completed=True`` on an open task goes through the completion service so
    the assignee is credited. ``completed=False`` reopens a completed task and
    clears ``completed_at``; scores are left untouched.

    Raises:
        NotFoundError: If the task is not in the family
    """
    from src.services import completion_service

    with span("task_service.update_task"):
        task = await get_family_task(task_id=task_id, family_id=family.id)

        data = changes.model_dump(mode="json", exclude_unset=True, exclude={"completed"})
        if changes.completed is False and task.completed:
            data["completed"] = False
            data["completed_at"] = None
            logger.info("Reopening task %s", task_id)

        if data:
            task = await save_task(task_id=task_id, data=data)

        if changes.completed and not task.completed:
            await completion_service.complete_task(family=family, task_id=task_id)
            task = await get_family_task(task_id=task_id, family_id=family.id)

        logger.info("Updated task %s fields: %s", task_id, sorted(changes.model_fields_set))
        return task


async def delete_task(*, family: Family, task_id: str) -> None:
    """Delete a task; credited scores are not reversed.

    Raises:
        NotFoundError: If the task is not in the family
    """
    with span("task_service.delete_task"):
        await get_family_task(task_id=task_id, family_id=family.id)
        try:
            await db_client.delete_record(collection=_TASKS, record_id=task_id)
        except db_client.RecordNotFoundError as e:
            raise NotFoundError("Task not found") from e

        logger.info("Deleted task %s", task_id)


async def assign_task(*, family: Family, task_id: str, member: str) -> Task:
    """Assign a task to an existing member by name.

    Raises:
        NotFoundError: If the task is not in the family or the member does not exist
    """
    with span("task_service.assign_task"):
        await get_family_task(task_id=task_id, family_id=family.id)

        if family.find_member(member) is None:
            logger.warning("Cannot assign task %s to unknown member %s", task_id, member)
            raise NotFoundError("Member not found")

        task = await save_task(task_id=task_id, data={"assigned_to": member})
        logger.info("Assigned task %s to %s", task_id, member)

        return task


async def add_comment(*, family: Family, task_id: str, member: str, text: str) -> Task:
    """Append a comment to a task and return the updated task.

    Raises:
        NotFoundError: If the task is not in the family
    """
    with span("task_service.add_comment"):
        task = await get_family_task(task_id=task_id, family_id=family.id)

        comment = Comment(id=uuid.uuid4().hex, member=member, text=text, created=datetime.now(UTC))
        comments = [*task.comments, comment]
        task = await save_task(
            task_id=task_id,
            data={"comments": [c.model_dump(mode="json") for c in comments]},
        )
        logger.info("Added comment to task %s by %s", task_id, member)

        return task
