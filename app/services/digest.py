# app/services/digest.py
"""
Daily digest of due, overdue and recently completed tasks per user.

A run fetches, strictly one after another:
1. tasks due today that are not completed
2. tasks due before today that are not completed
3. 'completed' status changes from the last 24 hours, with their task
4. the user roster

and then partitions the three task collections by owner. There is no caller
waiting on a run, so failures end the run and are only logged; the next
scheduled tick starts from scratch.
"""

import logging
from datetime import date, datetime, timedelta, timezone as dt_timezone
from typing import Callable, List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from app.models import TaskStatus
from app.schemas.digest import DigestSummary, UserDigest
from app.schemas.task import TaskOut
from app.services.data_source import Filter, SQLAlchemyDataSource, TaskDataSource
from app.services.exceptions import DataSourceError

logger = logging.getLogger(__name__)

RECENTLY_COMPLETED_WINDOW = timedelta(hours=24)


def local_today(now: datetime, tz_name: str) -> date:
    """Calendar day of a naive UTC instant, as seen in tz_name"""
    return now.replace(tzinfo=dt_timezone.utc).astimezone(ZoneInfo(tz_name)).date()


class DigestAborted(Exception):
    """A fetch failed; the rest of the run is skipped"""


def _fetch(what: str, fetch: Callable[[], list]) -> list:
    try:
        return fetch()
    except DataSourceError as e:
        logger.error(f"Error fetching {what}: {e.message}")
        raise DigestAborted(what) from e


def build_digest(
    users,
    upcoming_tasks,
    overdue_tasks,
    completed_logs,
    generated_at: datetime,
) -> DigestSummary:
    """Partition the fetched collections by task owner"""
    upcoming = [TaskOut.model_validate(task) for task in upcoming_tasks]
    overdue = [TaskOut.model_validate(task) for task in overdue_tasks]
    # entries whose task has gone away carry no owner
    completed = [TaskOut.model_validate(log.task) for log in completed_logs if log.task is not None]

    digests: List[UserDigest] = []
    for user in users:
        digests.append(UserDigest(
            user_id=user.id,
            email=user.email,
            due_today=[task for task in upcoming if task.user_id == user.id],
            overdue=[task for task in overdue if task.user_id == user.id],
            recently_completed=[task for task in completed if task.user_id == user.id],
        ))

    return DigestSummary(
        generated_at=generated_at,
        total_users=len(users),
        total_upcoming=len(upcoming_tasks),
        total_overdue=len(overdue_tasks),
        total_recently_completed=len(completed_logs),
        users=digests,
    )


def log_digest(summary: DigestSummary) -> None:
    logger.info("Daily Digest Summary:")
    logger.info(f"Total Users: {summary.total_users}")
    logger.info(f"Upcoming Tasks Due Today: {summary.total_upcoming}")
    logger.info(f"Overdue Tasks: {summary.total_overdue}")
    logger.info(f"Recently Completed Tasks: {summary.total_recently_completed}")

    for user in summary.users:
        logger.info(
            f"Digest for {user.email}: "
            f"due today {user.due_today_count}, "
            f"overdue {user.overdue_count}, "
            f"recently completed {user.recently_completed_count}"
        )


def generate_daily_digest(
    source: TaskDataSource,
    now: Optional[datetime] = None,
    tz_name: str = "UTC",
) -> Optional[DigestSummary]:
    """Run one digest. Returns None when the run was aborted.

    `now` is naive UTC; "today" is the calendar day in tz_name.
    """
    logger.info("Generating daily digest...")

    try:
        now = now or datetime.utcnow()
        today = local_today(now, tz_name)
        completed = TaskStatus.COMPLETED.value

        upcoming_tasks = _fetch(
            "upcoming tasks",
            lambda: source.query_tasks(
                Filter().eq("due_date", today).neq("status", completed),
                include_category=True,
            ),
        )
        overdue_tasks = _fetch(
            "overdue tasks",
            lambda: source.query_tasks(
                Filter().lt("due_date", today).neq("status", completed),
                include_category=True,
            ),
        )
        completed_logs = _fetch(
            "completed tasks",
            lambda: source.query_status_logs(
                Filter().eq("status", completed).gt("changed_at", now - RECENTLY_COMPLETED_WINDOW),
                include_task=True,
            ),
        )
        users = _fetch("users", source.list_users)

        summary = build_digest(users, upcoming_tasks, overdue_tasks, completed_logs, generated_at=now)
        log_digest(summary)
        logger.info("Daily digest completed!")
        return summary

    except DigestAborted as e:
        logger.warning(f"Daily digest aborted while fetching {e}")
        return None
    except Exception:
        logger.exception("Error generating daily digest")
        return None


def run_daily_digest(
    session_factory: Callable[[], Session],
    tz_name: str = "UTC",
) -> Optional[DigestSummary]:
    """Scheduled job body: one session per run"""
    db = session_factory()
    try:
        return generate_daily_digest(SQLAlchemyDataSource(db), tz_name=tz_name)
    finally:
        db.close()
