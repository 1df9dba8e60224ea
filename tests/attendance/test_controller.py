from __future__ import annotations

from datetime import date
from types import SimpleNamespace

import pytest
from flask import Flask

from attendance_sync.attendance.controller import XLSX_MIMETYPE, register
from attendance_sync.attendance.model import OnSitePollResult, RemotePollResult
from attendance_sync.core.enums import ReportPeriod
from attendance_sync.core.exceptions import NotificationError, UpstreamError, ValidationError
from attendance_sync.reports.model import MergedReportRow, ReportData


class FakeOnSite:
    def __init__(self):
        self.error = None
        self.poll_kwargs = None
        self.credentials = None

    def poll(self, **kwargs):
        self.poll_kwargs = kwargs
        if self.error:
            raise self.error
        return OnSitePollResult(fetched=2, recorded=2)

    def refresh_token(self, username=None, password=None):
        if not username or not password:
            raise ValidationError("Missing username or password.")
        self.credentials = (username, password)
        return "secret-token"


class FakeRemote:
    def poll(self, **kwargs):
        return RemotePollResult(users=3, sign_ins=1)


class FakeReports:
    def __init__(self):
        self.calls = []

    def build_report(self, *, start, end, period):
        self.calls.append((start, end, period))
        return ReportData(rows=[MergedReportRow(name="Jane Doe", work_date=start, onsite_minutes=420)], summary=[])


@pytest.fixture
def container():
    return SimpleNamespace(onsite_service=FakeOnSite(), remote_service=FakeRemote(), report_service=FakeReports())


@pytest.fixture
def client(container):
    app = Flask(__name__)
    register(app, container)
    return app.test_client()


def test_fetch_transactions_raises_notification_errors(client, container):
    resp = client.post("/api/transactions/fetch")

    assert resp.status_code == 200
    assert resp.get_json()["response"]["recorded"] == 2
    assert container.onsite_service.poll_kwargs == {"raise_notification_errors": True}


@pytest.mark.parametrize(
    "error, status",
    [
        (UpstreamError("device down"), 502),
        (NotificationError("chat down"), 500),
    ],
)
def test_fetch_errors_map_to_status_codes(client, container, error, status):
    container.onsite_service.error = error

    resp = client.get("/api/transactions/fetch")

    assert resp.status_code == status
    assert resp.get_json()["statusCode"] == status


def test_token_refresh_does_not_echo_token(client, container):
    resp = client.post("/api/device/token", json={"username": "admin", "password": "pw"})

    assert resp.status_code == 200
    assert "secret-token" not in resp.get_data(as_text=True)
    assert container.onsite_service.credentials == ("admin", "pw")


def test_token_refresh_without_credentials_is_bad_request(client):
    assert client.post("/api/device/token", json={}).status_code == 400


def test_clockify_poll(client):
    resp = client.get("/api/clockify/poll")

    assert resp.get_json()["response"]["sign_ins"] == 1


def test_report_json(client, container):
    resp = client.get("/api/reports/attendance?start=2024-01-03&end=2024-01-10&period=Weekly")

    assert resp.status_code == 200
    assert container.report_service.calls == [(date(2024, 1, 3), date(2024, 1, 10), ReportPeriod.WEEKLY)]
    assert resp.get_json()["response"]["rows"][0]["onsite_work_time"] == "07:00"


def test_report_xlsx_download(client):
    resp = client.get("/api/reports/attendance?start=2024-01-03&end=2024-01-10&format=xlsx")

    assert resp.status_code == 200
    assert resp.mimetype == XLSX_MIMETYPE
    assert "attendance_2024-01-03_2024-01-10.xlsx" in resp.headers["Content-Disposition"]


@pytest.mark.parametrize(
    "query",
    [
        "start=2024-13-01&end=2024-01-10",
        "end=2024-01-10",
        "start=2024-01-03&end=2024-01-10&period=yearly",
    ],
)
def test_report_rejects_bad_parameters(client, query):
    assert client.get(f"/api/reports/attendance?{query}").status_code == 400
