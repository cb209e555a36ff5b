"""Analytics service for member statistics, completion history and overdue alerts.

Key Concepts:
- Member statistics: per member (registry order) the number of tasks assigned
  by name, how many of those are completed, and the stored score. The score is
  the engine-maintained counter, not a recount, so it can differ from the
  completed count after reassignments or deletions.
- History: tasks grouped by the week or month of their creation date, with the
  number of tasks created in the bucket and how many of them are completed now.
- Overdue: open tasks whose due date lies before the query time.
"""

import logging
import math
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from src.core.config import settings
from src.core.logging import span
from src.domain.family import Family
from src.domain.task import HistoryPeriod
from src.models.service_models import HistoryBucket, MemberStatistics, OverdueTask
from src.services import task_service


logger = logging.getLogger(__name__)


def _as_aware(moment: datetime) -> datetime:
    """Treat naive timestamps as UTC, which is how they are written."""
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)


def _stats_zone() -> ZoneInfo | None:
    """Configured statistics zone; None means server local time."""
    return ZoneInfo(settings.stats_timezone) if settings.stats_timezone else None


def local_date(moment: datetime) -> date:
    """Calendar date of a timestamp in the statistics time zone."""
    return _as_aware(moment).astimezone(_stats_zone()).date()


def month_key(day: date) -> str:
    """Bucket key ``YYYY-MM``."""
    return f"{day.year}-{day.month:02d}"


def week_key(moment: datetime) -> str:
    """Bucket key ``YYYY-Www`` with Sunday-started weeks.

    week = ceil((days elapsed since local midnight of Jan 1 + weekday of Jan 1 (Sunday=0) + 1) / 7)

    Elapsed days are fractional, so the time of day counts: with Jan 1 on a
    Monday, Jan 6 00:00 is still week 1 but Jan 6 10:00 is week 2.
    """
    tz = _stats_zone()
    local = _as_aware(moment).astimezone(tz)
    jan1 = datetime(local.year, 1, 1, tzinfo=tz) if tz else datetime(local.year, 1, 1).astimezone()

    # Absolute elapsed time, including any DST shift since Jan 1
    elapsed_days = (local.astimezone(UTC) - jan1.astimezone(UTC)).total_seconds() / 86400
    jan1_weekday = (jan1.weekday() + 1) % 7
    week = math.ceil((elapsed_days + jan1_weekday + 1) / 7)
    return f"{local.year}-W{week:02d}"


def bucket_key(moment: datetime, period: HistoryPeriod) -> str:
    """Bucket key for a creation timestamp."""
    if period == HistoryPeriod.MONTH:
        return month_key(local_date(moment))
    return week_key(moment)


async def get_member_statistics(*, family: Family) -> list[MemberStatistics]:
    """Get task counts and score for every member, in registry order.

    Members without assigned tasks are reported with zero counts.
    """
    with span("analytics_service.get_member_statistics"):
        tasks = await task_service.list_tasks(family_id=family.id)

        statistics = []
        for member in family.members:
            member_tasks = [task for task in tasks if task.assigned_to == member.name]
            statistics.append(
                MemberStatistics(
                    member=member.name,
                    total_tasks=len(member_tasks),
                    completed_tasks=sum(1 for task in member_tasks if task.completed),
                    score=member.score,
                )
            )

        logger.info("Computed statistics for %d members of family %s", len(statistics), family.id)
        return statistics


async def get_history(*, family: Family, period: HistoryPeriod = HistoryPeriod.WEEK) -> list[HistoryBucket]:
    """Get task totals grouped by creation week or month, ascending by key.

    Args:
        family: Family whose tasks are grouped
        period: "week" (default) or "month"

    Returns:
        One HistoryBucket per non-empty bucket, sorted by period key
    """
    with span("analytics_service.get_history"):
        period = HistoryPeriod(period)
        tasks = await task_service.list_tasks(family_id=family.id)

        buckets: dict[str, HistoryBucket] = {}
        for task in tasks:
            key = bucket_key(task.created, period)
            bucket = buckets.setdefault(key, HistoryBucket(period=key, total=0, completed=0))
            bucket.total += 1
            if task.completed:
                bucket.completed += 1

        history = [buckets[key] for key in sorted(buckets)]
        logger.info("Computed %s history for family %s: %d buckets", period, family.id, len(history))
        return history


async def get_overdue_tasks(*, family: Family, now: datetime | None = None) -> list[OverdueTask]:
    """Get open tasks whose due date is strictly before ``now``.

    Tasks without a due date never qualify.
    """
    with span("analytics_service.get_overdue_tasks"):
        cutoff = _as_aware(now or datetime.now(UTC))
        open_tasks = await task_service.list_tasks(family_id=family.id, completed=False)

        overdue = [
            OverdueTask(id=task.id, title=task.title, assigned_to=task.assigned_to, due_date=task.due_date)
            for task in open_tasks
            if not task.completed and task.due_date is not None and _as_aware(task.due_date) < cutoff
        ]

        logger.info("Found %d overdue tasks for family %s", len(overdue), family.id)
        return overdue
