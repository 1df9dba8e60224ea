from __future__ import annotations

from datetime import datetime, timezone

import pytest

from attendance_sync.attendance.remote_service import RemoteSyncService
from attendance_sync.common.json_store import JsonFileStore
from attendance_sync.ledger.service import LedgerService
from attendance_sync.sync.timer_state import RunningTimerState
from attendance_sync.tracking.model import TimeEntry, TrackedUser

UTC = timezone.utc


def entry(entry_id, start_hh, end_hh=None, *, project_id="p1", project_name=None):
    start = datetime(2024, 1, 1, start_hh, 0, tzinfo=UTC)
    end = datetime(2024, 1, 1, end_hh, 0, tzinfo=UTC) if end_hh is not None else None
    duration = int((end - start).total_seconds()) if end else 0
    return TimeEntry(
        entry_id=entry_id,
        project_id=project_id,
        start=start,
        end=end,
        duration_seconds=duration,
        project_name=project_name,
    )


class FakeTracking:
    def __init__(self, users):
        self.users = users
        self.running: dict[str, TimeEntry] = {}
        self.last: dict[str, TimeEntry] = {}
        self.project_lookups = 0

    def list_users(self):
        return list(self.users)

    def get_running_entry(self, user_id):
        return self.running.get(user_id)

    def get_last_entry(self, user_id):
        return self.last.get(user_id)

    def get_project_name(self, project_id):
        self.project_lookups += 1
        return {"p1": "Website"}.get(project_id)


@pytest.fixture
def timers(tmp_path):
    return RunningTimerState(JsonFileStore(tmp_path / "clockify_states.json"))


@pytest.fixture
def make_service(ledger_repo, notifier, timers, fixed_now):
    def factory(tracking, sleep=None):
        return RemoteSyncService(
            tracking,
            LedgerService(ledger_repo),
            timers,
            notifier,
            inter_user_delay=0.2,
            tz=UTC,
            sleep=sleep or (lambda s: None),
            clock=lambda: fixed_now,
        )

    return factory


def test_sign_in_then_sign_off(make_service, ledger_repo, notifier, timers):
    tracking = FakeTracking([TrackedUser("u1", "Jane Doe")])
    svc = make_service(tracking)

    tracking.running["u1"] = entry("t-1", 19)
    first = svc.poll()
    assert first.sign_ins == 1
    assert timers.get("u1") == "t-1"

    svc.poll()  # still running, nothing new
    assert len(notifier.messages) == 1

    del tracking.running["u1"]
    tracking.last["u1"] = entry("t-1", 19, 21)
    last = svc.poll()

    assert last.sign_offs == 1
    assert timers.get("u1") is None
    (row,) = ledger_repo.rows
    assert (row.remotes[0].start, row.remotes[0].end) == ("07:00 PM", "09:00 PM")
    assert row.remote_work_time == "02:00"
    assert row.project == "Website"
    assert row.source == "Clockify"

    sign_in, sign_off = notifier.messages
    assert sign_in["label"] == "🏠 Jane Doe"
    assert sign_in["status"] == "Signing In"
    assert sign_in["is_remote"] is True
    assert sign_off["status"] == "Signing off | 2h"
    assert sign_off["timestamp"] == datetime(2024, 1, 1, 21, 0)


def test_hydrated_project_name_skips_lookup(make_service, notifier):
    tracking = FakeTracking([TrackedUser("u1", "Jane Doe")])
    tracking.running["u1"] = entry("t-1", 9, project_name="Mobile App")

    make_service(tracking).poll()

    assert notifier.messages[0]["project"] == "Mobile App"
    assert tracking.project_lookups == 0


def test_new_timer_replacing_old_one_signs_in_again(make_service, notifier, timers):
    tracking = FakeTracking([TrackedUser("u1", "Jane Doe")])
    svc = make_service(tracking)
    tracking.running["u1"] = entry("t-1", 9)
    svc.poll()
    tracking.running["u1"] = entry("t-2", 11)
    result = svc.poll()

    assert result.sign_ins == 1
    assert timers.get("u1") == "t-2"
    assert len(notifier.messages) == 2


def test_mismatched_last_entry_clears_state_silently(make_service, ledger_repo, notifier, timers):
    tracking = FakeTracking([TrackedUser("u1", "Jane Doe")])
    timers.set("u1", "t-1")
    timers.save()
    tracking.last["u1"] = entry("t-9", 9, 10)

    result = make_service(tracking).poll()

    assert result.sign_offs == 0
    assert timers.get("u1") is None
    assert ledger_repo.rows == []
    assert notifier.messages == []


def test_idle_user_is_a_no_op(make_service, ledger_repo, notifier):
    result = make_service(FakeTracking([TrackedUser("u1", "Jane Doe")])).poll()

    assert (result.users, result.sign_ins, result.sign_offs) == (1, 0, 0)
    assert ledger_repo.saves == 0
    assert notifier.messages == []


def test_requests_are_spaced_between_users(make_service):
    sleeps = []
    users = [TrackedUser(f"u{i}", f"User {i}") for i in range(3)]

    make_service(FakeTracking(users), sleep=sleeps.append).poll()

    assert sleeps == [0.2, 0.2]
