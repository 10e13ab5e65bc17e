# app/services/data_source.py
"""
Query interface used by the task lifecycle, analytics and digest services.

The services never touch the ORM session directly. They build a Filter
(equality / inequality / range predicates on named fields) and hand it to a
TaskDataSource. SQLAlchemyDataSource is the implementation backed by the
application database; tests may substitute their own.

Every failure reported by the store surfaces as DataSourceError.
"""

import logging
import operator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from app.models import Category, Task, TaskStatusLog, User
from app.services.exceptions import DataSourceError

logger = logging.getLogger(__name__)


class Op(str, Enum):
    EQ = "eq"
    NEQ = "neq"
    LT = "lt"
    GT = "gt"
    GTE = "gte"
    LTE = "lte"


_OPERATORS = {
    Op.EQ: operator.eq,
    Op.NEQ: operator.ne,
    Op.LT: operator.lt,
    Op.GT: operator.gt,
    Op.GTE: operator.ge,
    Op.LTE: operator.le,
}

TASK_FIELDS = ("id", "status", "due_date", "created_at", "category_id", "user_id")
STATUS_LOG_FIELDS = ("id", "task_id", "status", "changed_by", "changed_at")


@dataclass(frozen=True)
class Predicate:
    field: str
    op: Op
    value: Any


class Filter:
    """Chainable set of predicates, all of which must hold"""

    def __init__(self):
        self.predicates: List[Predicate] = []

    def _add(self, field: str, op: Op, value: Any) -> "Filter":
        self.predicates.append(Predicate(field, op, value))
        return self

    def eq(self, field: str, value: Any) -> "Filter":
        return self._add(field, Op.EQ, value)

    def neq(self, field: str, value: Any) -> "Filter":
        return self._add(field, Op.NEQ, value)

    def lt(self, field: str, value: Any) -> "Filter":
        return self._add(field, Op.LT, value)

    def gt(self, field: str, value: Any) -> "Filter":
        return self._add(field, Op.GT, value)

    def gte(self, field: str, value: Any) -> "Filter":
        return self._add(field, Op.GTE, value)

    def lte(self, field: str, value: Any) -> "Filter":
        return self._add(field, Op.LTE, value)

    def __iter__(self) -> Iterator[Predicate]:
        return iter(self.predicates)

    def __len__(self) -> int:
        return len(self.predicates)

    def __repr__(self) -> str:
        parts = ", ".join(f"{p.field}.{p.op.value}.{p.value}" for p in self.predicates)
        return f"Filter({parts})"


class TaskDataSource(Protocol):
    def query_tasks(
        self,
        filter: Filter,
        include_category: bool = False,
        include_status_logs: bool = False,
    ) -> List[Task]: ...

    def get_task(
        self,
        task_id: int,
        include_category: bool = False,
        include_status_logs: bool = False,
    ) -> Optional[Task]: ...

    def insert_task(self, values: Dict[str, Any]) -> Task: ...

    def update_task(self, task_id: int, values: Dict[str, Any]) -> Optional[Task]: ...

    def delete_task(self, task_id: int) -> bool: ...

    def query_status_logs(self, filter: Filter, include_task: bool = False) -> List[TaskStatusLog]: ...

    def append_status_log(self, task_id: int, status: str, changed_by: int) -> TaskStatusLog: ...

    def list_users(self) -> List[User]: ...

    def get_user(self, user_id: int) -> Optional[User]: ...

    def insert_category(self, name: str) -> Category: ...

    def list_categories(self) -> List[Category]: ...

    def get_category(self, category_id: int) -> Optional[Category]: ...

    def update_category(self, category_id: int, name: str) -> Optional[Category]: ...

    def delete_category(self, category_id: int) -> bool: ...


def _error_message(exc: SQLAlchemyError) -> str:
    return str(getattr(exc, "orig", None) or exc)


class SQLAlchemyDataSource:
    """TaskDataSource over a SQLAlchemy session"""

    def __init__(self, db: Session):
        self.db = db

    # ---- helpers ----

    @staticmethod
    def _apply_filter(query, model, allowed, filter: Filter):
        for predicate in filter:
            if predicate.field not in allowed:
                raise DataSourceError(
                    f"column {model.__tablename__}.{predicate.field} does not exist"
                )
            column = getattr(model, predicate.field)
            query = query.filter(_OPERATORS[predicate.op](column, predicate.value))
        return query

    def _read(self, build):
        try:
            return build()
        except SQLAlchemyError as e:
            logger.error(f"Query failed: {e}")
            raise DataSourceError(_error_message(e)) from e

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Write failed: {e}")
            raise DataSourceError(_error_message(e)) from e

    @staticmethod
    def _task_options(include_category: bool, include_status_logs: bool):
        options = []
        if include_category:
            options.append(joinedload(Task.category))
        if include_status_logs:
            options.append(selectinload(Task.status_logs))
        return options

    # ---- tasks ----

    def query_tasks(self, filter, include_category=False, include_status_logs=False):
        query = self.db.query(Task).options(
            *self._task_options(include_category, include_status_logs)
        )
        query = self._apply_filter(query, Task, TASK_FIELDS, filter)
        return self._read(lambda: query.order_by(Task.id).all())

    def get_task(self, task_id, include_category=False, include_status_logs=False):
        query = self.db.query(Task).options(
            *self._task_options(include_category, include_status_logs)
        ).filter(Task.id == task_id)
        return self._read(query.first)

    def insert_task(self, values):
        task = Task(**values)
        self.db.add(task)
        self._commit()
        self.db.refresh(task)
        return task

    def update_task(self, task_id, values):
        task = self.get_task(task_id)
        if task is None:
            return None
        for key, value in values.items():
            setattr(task, key, value)
        self._commit()
        self.db.refresh(task)
        return task

    def delete_task(self, task_id):
        task = self.get_task(task_id)
        if task is None:
            return False
        # status logs go with it (delete-orphan cascade)
        self.db.delete(task)
        self._commit()
        return True

    # ---- status logs ----

    def query_status_logs(self, filter, include_task=False):
        query = self.db.query(TaskStatusLog)
        if include_task:
            query = query.options(
                joinedload(TaskStatusLog.task).joinedload(Task.category)
            )
        query = self._apply_filter(query, TaskStatusLog, STATUS_LOG_FIELDS, filter)
        return self._read(lambda: query.order_by(TaskStatusLog.changed_at, TaskStatusLog.id).all())

    def append_status_log(self, task_id, status, changed_by):
        entry = TaskStatusLog(task_id=task_id, status=status, changed_by=changed_by)
        self.db.add(entry)
        self._commit()
        self.db.refresh(entry)
        return entry

    # ---- users ----

    def list_users(self):
        return self._read(lambda: self.db.query(User).order_by(User.id).all())

    def get_user(self, user_id):
        return self._read(self.db.query(User).filter(User.id == user_id).first)

    # ---- categories ----

    def insert_category(self, name):
        category = Category(name=name)
        self.db.add(category)
        self._commit()
        self.db.refresh(category)
        return category

    def list_categories(self):
        return self._read(lambda: self.db.query(Category).order_by(Category.id).all())

    def get_category(self, category_id):
        return self._read(self.db.query(Category).filter(Category.id == category_id).first)

    def update_category(self, category_id, name):
        category = self.get_category(category_id)
        if category is None:
            return None
        category.name = name
        self._commit()
        self.db.refresh(category)
        return category

    def delete_category(self, category_id):
        category = self.get_category(category_id)
        if category is None:
            return False
        self.db.delete(category)
        self._commit()
        return True
