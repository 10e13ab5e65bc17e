# app/services/status_log.py
"""
Status history for tasks.

Entries are appended after the task write has already been committed and are
never updated. A failed append is logged and dropped so the task mutation
still succeeds; the history is allowed to lag behind the task table.
"""

import logging
from typing import Optional

from app.models import TaskStatusLog
from app.services.data_source import TaskDataSource

logger = logging.getLogger(__name__)


def record_status_change(
    source: TaskDataSource,
    task_id: int,
    status: str,
    changed_by: int,
) -> Optional[TaskStatusLog]:
    """Append a status log entry for a task, best-effort"""
    try:
        entry = source.append_status_log(task_id=task_id, status=status, changed_by=changed_by)
        logger.info(f"Recorded status '{status}' for task {task_id} (changed by user {changed_by})")
        return entry
    except Exception as e:
        logger.error(f"Could not record status '{status}' for task {task_id}: {e}")
        return None


def status_changed(previous: Optional[str], requested: Optional[str]) -> bool:
    """Whether an update carrying `requested` moves the task to a new status.

    Any status may follow any other; only a missing or unchanged value is a no-op.
    """
    return bool(requested) and requested != previous
