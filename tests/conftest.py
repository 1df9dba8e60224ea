from __future__ import annotations

import copy
from datetime import datetime

import pytest

from attendance_sync.core.exceptions import NotificationError


class InMemoryLedgerRepository:
    def __init__(self, rows=None):
        self.rows = list(rows or [])
        self.saves = 0

    def load_rows(self):
        return copy.deepcopy(self.rows)

    def save_rows(self, rows):
        self.rows = copy.deepcopy(list(rows))
        self.saves += 1


class RecordingNotifier:
    def __init__(self):
        self.messages: list[dict] = []
        self.fail = False

    def send(self, label, timestamp, status, project=None, is_remote=False, retry_policy=None):
        if self.fail:
            raise NotificationError("chat down")
        self.messages.append(
            {"label": label, "timestamp": timestamp, "status": status, "project": project, "is_remote": is_remote}
        )
        return True


@pytest.fixture
def fixed_now():
    return datetime(2024, 1, 1, 17, 30, 0)


@pytest.fixture
def ledger_repo():
    return InMemoryLedgerRepository()


@pytest.fixture
def notifier():
    return RecordingNotifier()
