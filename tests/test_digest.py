# tests/test_digest.py

from datetime import date, datetime, timedelta

import pytest

from app.services.digest import generate_daily_digest, local_today, run_daily_digest
from app.services.exceptions import DataSourceError

from .fakes import FlakyDataSource

NOW = datetime(2025, 3, 10, 0, 0, 0)
TODAY = NOW.date()


@pytest.fixture()
def populated(users, make_task, make_status_log):
    alice, bob = users

    make_task(title="standup notes", status="pending", due_date=TODAY, owner=alice)
    make_task(title="finished today", status="completed", due_date=TODAY, owner=alice)
    make_task(title="late report", status="in_progress", due_date=TODAY - timedelta(days=3), owner=alice)
    make_task(title="late invoice", status="pending", due_date=TODAY - timedelta(days=1), owner=bob)
    make_task(title="tomorrow", status="pending", due_date=TODAY + timedelta(days=1), owner=bob)

    shipped = make_task(title="shipped", status="completed", owner=bob)
    make_status_log(shipped, "completed", NOW - timedelta(hours=5))

    old = make_task(title="old win", status="completed", owner=alice)
    make_status_log(old, "completed", NOW - timedelta(hours=30))

    reopened = make_task(title="reopened", status="pending", owner=alice)
    make_status_log(reopened, "in_progress", NOW - timedelta(hours=2))

    return alice, bob


def _by_email(summary):
    return {user.email: user for user in summary.users}


def test_digest_totals(source, populated):
    summary = generate_daily_digest(source, now=NOW)

    assert summary is not None
    assert summary.total_users == 2
    assert summary.total_upcoming == 1
    assert summary.total_overdue == 2
    assert summary.total_recently_completed == 1


def test_digest_partitions_by_owner(source, populated):
    summary = generate_daily_digest(source, now=NOW)
    digests = _by_email(summary)

    alice = digests["alice@example.com"]
    assert [t.title for t in alice.due_today] == ["standup notes"]
    assert [t.title for t in alice.overdue] == ["late report"]
    assert alice.recently_completed == []

    bob = digests["bob@example.com"]
    assert bob.due_today_count == 0
    assert [t.title for t in bob.overdue] == ["late invoice"]
    assert [t.title for t in bob.recently_completed] == ["shipped"]
    assert bob.recently_completed[0].category.name == "Work"


def test_digest_counts_are_serialized(source, populated):
    summary = generate_daily_digest(source, now=NOW)
    payload = summary.model_dump(mode="json")

    bob = next(u for u in payload["users"] if u["email"] == "bob@example.com")
    assert bob["overdue_count"] == 1
    assert bob["recently_completed_count"] == 1


def test_user_without_tasks_gets_empty_digest(db, source, users):
    summary = generate_daily_digest(source, now=NOW)

    assert summary.total_users == 2
    assert all(u.due_today_count == u.overdue_count == u.recently_completed_count == 0 for u in summary.users)


def test_digest_stops_when_overdue_fetch_fails(source, populated):
    flaky = FlakyDataSource(
        source,
        {"query_tasks": DataSourceError("fetch failed")},
        fail_on_call={"query_tasks": 2},
    )

    assert generate_daily_digest(flaky, now=NOW) is None
    assert flaky.calls == ["query_tasks", "query_tasks"]


@pytest.mark.parametrize(
    "failing, expected_calls",
    [
        ("query_tasks", ["query_tasks"]),
        ("query_status_logs", ["query_tasks", "query_tasks", "query_status_logs"]),
        ("list_users", ["query_tasks", "query_tasks", "query_status_logs", "list_users"]),
    ],
)
def test_digest_stops_at_first_failed_fetch(source, populated, failing, expected_calls):
    flaky = FlakyDataSource(source, {failing: DataSourceError("fetch failed")})

    assert generate_daily_digest(flaky, now=NOW) is None
    assert flaky.calls == expected_calls


def test_digest_swallows_unexpected_errors(source, populated):
    flaky = FlakyDataSource(source, {"list_users": RuntimeError("boom")})

    assert generate_daily_digest(flaky, now=NOW) is None


def test_scheduled_run_uses_its_own_session(session_factory, populated):
    summary = run_daily_digest(session_factory)

    assert summary is not None
    assert summary.total_users == 2


def test_today_follows_digest_timezone(source, make_task, make_status_log, users):
    alice, _ = users
    # midnight in Tokyo on 2025-03-11 is still 2025-03-10 in UTC
    fire_time_utc = datetime(2025, 3, 10, 15, 0, 0)
    make_task(title="due in Tokyo today", status="pending", due_date=date(2025, 3, 11), owner=alice)
    make_task(title="due yesterday", status="pending", due_date=date(2025, 3, 10), owner=alice)
    done = make_task(title="done", status="completed", owner=alice)
    make_status_log(done, "completed", fire_time_utc - timedelta(hours=23))

    summary = generate_daily_digest(source, now=fire_time_utc, tz_name="Asia/Tokyo")

    alice_digest = _by_email(summary)["alice@example.com"]
    assert [t.title for t in alice_digest.due_today] == ["due in Tokyo today"]
    assert [t.title for t in alice_digest.overdue] == ["due yesterday"]
    # the 24h completion window stays anchored to the UTC instant
    assert summary.total_recently_completed == 1


def test_local_today():
    assert local_today(datetime(2025, 3, 10, 15, 0), "Asia/Tokyo") == date(2025, 3, 11)
    assert local_today(datetime(2025, 3, 10, 3, 0), "America/New_York") == date(2025, 3, 9)
    assert local_today(datetime(2025, 3, 10, 3, 0), "UTC") == date(2025, 3, 10)
