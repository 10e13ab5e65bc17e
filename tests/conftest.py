# tests/conftest.py

from datetime import date, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base
from app.models import Category, Task, TaskStatusLog, User
from app.services.data_source import SQLAlchemyDataSource


@pytest.fixture()
def engine():
    """In-memory SQLite shared by every session in a test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def source(db):
    return SQLAlchemyDataSource(db)


@pytest.fixture()
def users(db):
    alice = User(email="alice@example.com")
    bob = User(email="bob@example.com")
    db.add_all([alice, bob])
    db.commit()
    return alice, bob


@pytest.fixture()
def category(db):
    work = Category(name="Work")
    db.add(work)
    db.commit()
    return work


@pytest.fixture()
def make_task(db, users, category):
    """Insert a task row directly, bypassing the service layer"""

    def _make(
        status: str = "pending",
        due_date: date = None,
        owner: User = None,
        created_at: datetime = None,
        title: str = "Task",
    ) -> Task:
        task = Task(
            title=title,
            category_id=category.id,
            user_id=(owner or users[0]).id,
            status=status,
            due_date=due_date,
        )
        if created_at is not None:
            task.created_at = created_at
        db.add(task)
        db.commit()
        return task

    return _make


@pytest.fixture()
def make_status_log(db, users):
    def _make(task: Task, status: str, changed_at: datetime) -> TaskStatusLog:
        entry = TaskStatusLog(
            task_id=task.id,
            status=status,
            changed_by=users[0].id,
            changed_at=changed_at,
        )
        db.add(entry)
        db.commit()
        return entry

    return _make
