"""Task completion and member scoring.

Completing an open task writes the task first and then, when the assignee
names an existing member, credits that member with one point and writes the
family. The two writes are independent: if the family write fails, the task
stays completed and the score is not credited. That state is logged and the
error propagates; nothing is retried or rolled back.

No lock is taken between reading and writing the task, so two concurrent
completions of the same open task can both credit the assignee.
"""

import logging
from datetime import UTC, datetime

from src.core import db_client
from src.core.logging import log_with_family_context, span
from src.domain.family import Family, Member
from src.models.service_models import CompletionResult
from src.services import family_service, task_service


logger = logging.getLogger(__name__)


def credit_member(*, family: Family, name: str) -> Member | None:
    """Add one point to the member with exactly this name.

    This is the only place a score changes. Returns the credited member, or
    None when no member has that name.
    """
    for index, member in enumerate(family.members):
        if member.name == name:
            credited = member.model_copy(update={"score": member.score + 1})
            family.members = [*family.members[:index], credited, *family.members[index + 1 :]]
            return credited
    return None


async def complete_task(
    *,
    family: Family,
    task_id: str,
    occurred_at: datetime | None = None,
) -> CompletionResult:
    """Mark a task completed and credit its assignee.

    Args:
        family: Caller's family (its member registry is updated in place)
        task_id: Task ID
        occurred_at: Completion instant (defaults to now)

    Returns:
        CompletionResult; ``member_score`` is set only when a member was credited

    Raises:
        NotFoundError: If the task does not exist or belongs to another family
        db_client.DatabaseError: If either write fails
    """
    with span("completion_service.complete_task"):
        task = await task_service.get_family_task(task_id=task_id, family_id=family.id)

        if task.completed:
            logger.info("Task %s already completed, nothing to do", task_id)
            return CompletionResult(id=task.id, completed=True, completed_at=task.completed_at)

        completed_at = occurred_at or datetime.now(UTC)
        task = await task_service.save_task(
            task_id=task_id,
            data={"completed": True, "completed_at": completed_at.isoformat()},
        )
        log_with_family_context(logger, "info", "Task completed", family_id=family.id, task_id=task_id)

        if not task.assigned_to:
            return CompletionResult(id=task.id, completed=True, completed_at=task.completed_at)

        credited = credit_member(family=family, name=task.assigned_to)
        if credited is None:
            log_with_family_context(
                logger,
                "warning",
                "Assignee is not a family member, no score credited",
                family_id=family.id,
                task_id=task_id,
                member=task.assigned_to,
            )
            return CompletionResult(id=task.id, completed=True, completed_at=task.completed_at)

        try:
            await family_service.save_family_members(family=family)
        except db_client.DatabaseError:
            log_with_family_context(
                logger,
                "error",
                "Task completed but member score was not saved",
                family_id=family.id,
                task_id=task_id,
                member=credited.name,
            )
            raise

        log_with_family_context(
            logger,
            "info",
            "Member credited",
            family_id=family.id,
            task_id=task_id,
            member=credited.name,
            score=credited.score,
        )
        return CompletionResult(
            id=task.id,
            completed=True,
            completed_at=task.completed_at,
            member_score=credited.score,
        )
