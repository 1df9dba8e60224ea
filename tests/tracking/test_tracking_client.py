from __future__ import annotations

from datetime import datetime, timezone

import pytest

from attendance_sync.core.constants import CLOCKIFY_PAGE_SIZE
from attendance_sync.core.exceptions import UpstreamError
from attendance_sync.tracking.client import TimeTrackingClient
from attendance_sync.tracking.model import TimeEntry


class FakeResponse:
    def __init__(self, body, status_code=200):
        self._body = body
        self.status_code = status_code

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return self._body


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append((url, params, headers))
        return self.responses.pop(0)


def client(session):
    return TimeTrackingClient("https://api.clockify.me/api/v1", api_key="key", workspace_id="ws", session=session)


def test_list_users_walks_pages_until_short_page():
    full = [{"id": f"u{i}", "name": f"User {i}"} for i in range(CLOCKIFY_PAGE_SIZE)]
    session = FakeSession([FakeResponse(full), FakeResponse([{"id": "last", "name": " Last "}])])

    users = client(session).list_users()

    assert len(users) == CLOCKIFY_PAGE_SIZE + 1
    assert users[-1].name == "Last"
    assert [c[1]["page"] for c in session.calls] == [1, 2]
    assert session.calls[0][0] == "https://api.clockify.me/api/v1/workspaces/ws/users"
    assert session.calls[0][2] == {"X-Api-Key": "key"}


def test_running_entry_is_parsed():
    body = [{"id": "t-1", "projectId": "p1", "timeInterval": {"start": "2024-01-01T19:00:00Z", "end": None}}]
    session = FakeSession([FakeResponse(body)])

    entry = client(session).get_running_entry("u1")

    assert entry.entry_id == "t-1"
    assert entry.start == datetime(2024, 1, 1, 19, 0, tzinfo=timezone.utc)
    assert entry.end is None
    assert session.calls[0][1] == {"in-progress": "true"}


def test_no_running_entry():
    assert client(FakeSession([FakeResponse([])])).get_running_entry("u1") is None


def test_project_names_are_cached():
    session = FakeSession([FakeResponse({"name": "Website"})])
    tracker = client(session)

    assert tracker.get_project_name("p1") == "Website"
    assert tracker.get_project_name("p1") == "Website"
    assert tracker.get_project_name(None) is None
    assert len(session.calls) == 1


def test_list_entries_sends_utc_range():
    session = FakeSession([FakeResponse([])])
    start = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)
    end = datetime(2024, 1, 1, 20, 0, tzinfo=timezone.utc)

    client(session).list_entries("u1", start, end)

    params = session.calls[0][1]
    assert (params["start"], params["end"]) == ("2024-01-01T08:00:00Z", "2024-01-01T20:00:00Z")
    assert params["hydrated"] == "true"


def test_http_errors_raise_upstream_error():
    with pytest.raises(UpstreamError):
        client(FakeSession([FakeResponse({}, status_code=503)])).list_users()


def test_entry_duration_falls_back_to_interval():
    entry = TimeEntry.from_api(
        {
            "id": "t-1",
            "project": {"name": "Website"},
            "timeInterval": {"start": "2024-01-01T09:00:00Z", "end": "2024-01-01T10:30:00Z"},
        }
    )

    assert entry.duration_seconds == 5400
    assert entry.project_name == "Website"
    assert entry.project_id is None
