# app/services/task_service.py
"""
Task create / read / update / delete.

Every status a task takes is written to its status history: once on creation
and once per update that actually changes the status.
"""

import logging
from typing import List, Optional

from app.models import TaskStatus
from app.schemas.task import TaskCreate, TaskDetailOut, TaskOut, TaskUpdate
from app.services.data_source import Filter, TaskDataSource
from app.services.exceptions import (
    DataSourceError,
    ServiceError,
    bad_request,
    not_found,
    server_error,
)
from app.services.status_log import record_status_change, status_changed

logger = logging.getLogger(__name__)


def create_task(source: TaskDataSource, payload: TaskCreate, actor_id: int) -> TaskOut:
    try:
        try:
            category = source.get_category(payload.category_id)
        except DataSourceError:
            category = None
        if category is None:
            raise bad_request("Invalid category ID")

        values = {
            "title": payload.title,
            "description": payload.description,
            "category_id": payload.category_id,
            "user_id": actor_id,
            "due_date": payload.due_date,
            "status": payload.status or TaskStatus.PENDING.value,
        }

        try:
            task = source.insert_task(values)
        except DataSourceError as e:
            raise bad_request(e.message)

        logger.info(f"Task {task.id} created by user {actor_id}")
        record_status_change(source, task.id, task.status, actor_id)
        return TaskOut.model_validate(task)

    except ServiceError:
        raise
    except Exception:
        logger.exception("Error in create_task")
        raise server_error("Failed to create task")


def list_tasks(
    source: TaskDataSource,
    user_id: int,
    status: Optional[str] = None,
    category_id: Optional[int] = None,
) -> List[TaskOut]:
    """The user's own tasks, optionally narrowed by status and category"""
    try:
        query = Filter()
        if status:
            query.eq("status", status)
        if category_id:
            query.eq("category_id", category_id)
        query.eq("user_id", user_id)

        try:
            tasks = source.query_tasks(query, include_category=True)
        except DataSourceError as e:
            raise bad_request(e.message)

        return [TaskOut.model_validate(task) for task in tasks]

    except ServiceError:
        raise
    except Exception:
        logger.exception("Error in list_tasks")
        raise server_error("Failed to fetch tasks")


def get_task(source: TaskDataSource, task_id: int) -> TaskDetailOut:
    """A task with its category and full status history"""
    try:
        try:
            task = source.get_task(task_id, include_category=True, include_status_logs=True)
        except DataSourceError:
            task = None
        if task is None:
            raise not_found("Task not found")

        return TaskDetailOut.model_validate(task)

    except ServiceError:
        raise
    except Exception:
        logger.exception("Error in get_task")
        raise server_error("Failed to fetch task")


def update_task(
    source: TaskDataSource,
    task_id: int,
    payload: TaskUpdate,
    actor_id: int,
) -> TaskOut:
    try:
        try:
            existing = source.get_task(task_id)
        except DataSourceError:
            existing = None
        if existing is None:
            raise not_found("Task not found")
        previous_status = existing.status

        if payload.category_id:
            try:
                category = source.get_category(payload.category_id)
            except DataSourceError:
                category = None
            if category is None:
                raise bad_request("Invalid category ID")

        if payload.user_id:
            try:
                owner = source.get_user(payload.user_id)
            except DataSourceError:
                owner = None
            if owner is None:
                raise bad_request("Invalid user ID")

        supplied = payload.model_dump(exclude_unset=True)
        values = {}
        if payload.title:
            values["title"] = payload.title
        if "description" in supplied:
            values["description"] = payload.description
        if payload.category_id:
            values["category_id"] = payload.category_id
        if payload.user_id:
            values["user_id"] = payload.user_id
        if payload.status:
            values["status"] = payload.status
        if "due_date" in supplied:
            values["due_date"] = payload.due_date

        try:
            task = source.update_task(task_id, values)
        except DataSourceError as e:
            raise bad_request(e.message)
        if task is None:
            raise not_found("Task not found")

        logger.info(f"Task {task_id} updated by user {actor_id}: {sorted(values)}")

        if status_changed(previous_status, payload.status):
            record_status_change(source, task_id, payload.status, actor_id)

        return TaskOut.model_validate(task)

    except ServiceError:
        raise
    except Exception:
        logger.exception("Error in update_task")
        raise server_error("Failed to update task")


def delete_task(source: TaskDataSource, task_id: int) -> None:
    """Delete a task together with its status history"""
    try:
        try:
            deleted = source.delete_task(task_id)
        except DataSourceError as e:
            raise bad_request(e.message)

        if deleted:
            logger.info(f"Task {task_id} deleted")
        else:
            logger.info(f"Task {task_id} not found, nothing to delete")

    except ServiceError:
        raise
    except Exception:
        logger.exception("Error in delete_task")
        raise server_error("Failed to delete task")
