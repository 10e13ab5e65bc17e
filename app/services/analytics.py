# app/services/analytics.py
"""
Completion-rate and overdue reporting over the task table.
"""

import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from app.models import TaskStatus
from app.schemas.analytics import CompletionRateOut, OverdueTasksOut
from app.schemas.task import TaskOut
from app.services.data_source import Filter, TaskDataSource
from app.services.exceptions import DataSourceError, ServiceError, bad_request, server_error

logger = logging.getLogger(__name__)

TIMEFRAMES = ("day", "week", "month", "all")


def _one_month_before(moment: datetime) -> datetime:
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def resolve_timeframe_start(timeframe: str, now: datetime) -> Optional[datetime]:
    """Lower bound on created_at for a timeframe; None means unbounded"""
    if timeframe == "day":
        return now - timedelta(days=1)
    if timeframe == "week":
        return now - timedelta(days=7)
    if timeframe == "month":
        return _one_month_before(now)
    if timeframe == "all":
        return None
    raise ValueError(f"Unknown timeframe: {timeframe}")


def _rate(count: int, total: int) -> float:
    if total == 0:
        return 0
    return round(count / total * 100, 2)


def summarize_statuses(statuses: Iterable[str], timeframe: str = "all") -> CompletionRateOut:
    """Bucket a snapshot of statuses into counts and percentages.

    Statuses outside the known three still count toward the total.
    """
    statuses = list(statuses)
    total = len(statuses)
    completed = sum(s == TaskStatus.COMPLETED.value for s in statuses)
    in_progress = sum(s == TaskStatus.IN_PROGRESS.value for s in statuses)
    pending = sum(s == TaskStatus.PENDING.value for s in statuses)

    return CompletionRateOut(
        total=total,
        completed=completed,
        inProgress=in_progress,
        pending=pending,
        completionRate=_rate(completed, total),
        inProgressRate=_rate(in_progress, total),
        pendingRate=_rate(pending, total),
        timeframe=timeframe,
    )


def get_completion_rate(
    source: TaskDataSource,
    timeframe: Optional[str] = None,
    now: Optional[datetime] = None,
) -> CompletionRateOut:
    """Completion statistics for tasks created within the timeframe"""
    timeframe = timeframe or "all"
    try:
        now = now or datetime.utcnow()
        try:
            start = resolve_timeframe_start(timeframe, now)
        except ValueError:
            raise bad_request(f"timeframe must be one of: {', '.join(TIMEFRAMES)}")

        query = Filter()
        if start is not None:
            query.gte("created_at", start)

        tasks = source.query_tasks(query)
        result = summarize_statuses((task.status for task in tasks), timeframe)

        logger.info(
            f"Completion rate for '{timeframe}': {result.completed}/{result.total} completed"
        )
        return result

    except ServiceError:
        raise
    except DataSourceError as e:
        logger.error(f"Error fetching completion rates: {e.message}")
        raise server_error(e.message)
    except Exception:
        logger.exception("Unexpected error computing completion rates")
        raise server_error("Failed to fetch completion rates")


def get_overdue_tasks(
    source: TaskDataSource,
    today: Optional[date] = None,
) -> OverdueTasksOut:
    """Tasks due before today that are not completed, with their category"""
    try:
        today = today or datetime.utcnow().date()

        query = Filter().lt("due_date", today).neq("status", TaskStatus.COMPLETED.value)
        tasks = source.query_tasks(query, include_category=True)
        overdue = [TaskOut.model_validate(task) for task in tasks]

        logger.info(f"Found {len(overdue)} overdue tasks before {today.isoformat()}")
        return OverdueTasksOut(overdueTasks=overdue, count=len(overdue))

    except ServiceError:
        raise
    except DataSourceError as e:
        logger.error(f"Error fetching overdue tasks: {e.message}")
        raise server_error(e.message)
    except Exception:
        logger.exception("Unexpected error fetching overdue tasks")
        raise server_error("Failed to fetch overdue tasks")
