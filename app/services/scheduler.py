# app/services/scheduler.py
"""
Recurring trigger for the daily digest.

The scheduler itself is created once by the process (see main.py) and handed
in here; this module only registers jobs on it.
"""

import logging
from typing import Any, Callable, Dict

from apscheduler.job import Job
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from app.services.digest import run_daily_digest

logger = logging.getLogger(__name__)

DIGEST_JOB_ID = "daily_digest"


def digest_max_instances(settings) -> int:
    """1 skips a tick while the previous run is still active"""
    if not settings.DIGEST_ALLOW_OVERLAP:
        return 1
    return max(1, int(settings.DIGEST_MAX_INSTANCES))


def schedule_daily_digest(
    scheduler: BaseScheduler,
    settings,
    session_factory: Callable[[], Session],
) -> Job:
    """Register the daily digest on the scheduler"""
    trigger = CronTrigger.from_crontab(settings.DIGEST_CRON, timezone=settings.DIGEST_TIMEZONE)

    job = scheduler.add_job(
        run_daily_digest,
        trigger=trigger,
        args=[session_factory, settings.DIGEST_TIMEZONE],
        id=DIGEST_JOB_ID,
        name="Daily Task Digest",
        max_instances=digest_max_instances(settings),
        coalesce=True,
        replace_existing=True,
    )
    logger.info(
        f"Daily digest scheduled with cron '{settings.DIGEST_CRON}' ({settings.DIGEST_TIMEZONE}), "
        f"overlap {'allowed' if settings.DIGEST_ALLOW_OVERLAP else 'skipped'}"
    )

    if settings.RUN_DIGEST_ON_STARTUP:
        logger.info("Running initial digest...")
        scheduler.add_job(
            run_daily_digest,
            args=[session_factory, settings.DIGEST_TIMEZONE],
            id=f"{DIGEST_JOB_ID}_startup",
            name="Initial Task Digest",
            replace_existing=True,
        )

    return job


def _job_info(job: Job) -> Dict[str, Any]:
    # jobs added before start() have no next run yet
    next_run = getattr(job, "next_run_time", None)
    return {
        "id": job.id,
        "trigger": str(job.trigger),
        "next_run": next_run.isoformat() if next_run else None,
        "max_instances": job.max_instances,
    }


def scheduler_health(scheduler: BaseScheduler) -> Dict[str, Any]:
    """Scheduler state and registered jobs, for the health probe"""
    return {
        "status": "running" if scheduler.running else "stopped",
        "jobs": [_job_info(job) for job in scheduler.get_jobs()],
    }
