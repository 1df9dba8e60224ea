from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import requests

from ..core.constants import CLOCKIFY_PAGE_SIZE
from ..core.exceptions import UpstreamError
from .model import TimeEntry, TrackedUser

logger = logging.getLogger(__name__)


def _iso_utc(value: datetime) -> str:
    # naive values are local wall-clock times
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class TimeTrackingClient:
    """Client for the Clockify v1 workspace API (API key auth)."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str,
        workspace_id: str,
        timeout: float = 20,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._workspace_id = workspace_id
        self._timeout = timeout
        self._session = session or requests.Session()
        self._headers = {"X-Api-Key": api_key}
        self._project_names: dict[str, Optional[str]] = {}

    @property
    def _workspace_url(self) -> str:
        return f"{self._base_url}/workspaces/{self._workspace_id}"

    def list_users(self) -> list[TrackedUser]:
        users: list[TrackedUser] = []
        page = 1
        while True:
            batch = self._get(f"{self._workspace_url}/users", params={"page": page, "page-size": CLOCKIFY_PAGE_SIZE})
            users.extend(TrackedUser.from_api(u) for u in batch or [])
            logger.debug("Fetched users page %d (%d users)", page, len(batch or []))
            if len(batch or []) < CLOCKIFY_PAGE_SIZE:
                break
            page += 1
        return users

    def get_running_entry(self, user_id: str) -> Optional[TimeEntry]:
        entries = self._get(f"{self._workspace_url}/user/{user_id}/time-entries", params={"in-progress": "true"})
        return TimeEntry.from_api(entries[0]) if entries else None

    def get_last_entry(self, user_id: str) -> Optional[TimeEntry]:
        entries = self._get(
            f"{self._workspace_url}/user/{user_id}/time-entries",
            params={"hydrated": "true", "page-size": 1},
        )
        return TimeEntry.from_api(entries[0]) if entries else None

    def get_project_name(self, project_id: Optional[str]) -> Optional[str]:
        if not project_id:
            return None
        if project_id not in self._project_names:
            project = self._get(f"{self._workspace_url}/projects/{project_id}")
            self._project_names[project_id] = (project or {}).get("name")
        return self._project_names[project_id]

    def list_entries(self, user_id: str, start: datetime, end: datetime) -> list[TimeEntry]:
        entries: list[TimeEntry] = []
        page = 1
        while True:
            batch = self._get(
                f"{self._workspace_url}/user/{user_id}/time-entries",
                params={
                    "start": _iso_utc(start),
                    "end": _iso_utc(end),
                    "hydrated": "true",
                    "page": page,
                    "page-size": CLOCKIFY_PAGE_SIZE,
                },
            )
            entries.extend(TimeEntry.from_api(e) for e in batch or [])
            if len(batch or []) < CLOCKIFY_PAGE_SIZE:
                break
            page += 1
        return entries

    def _get(self, url: str, *, params: Optional[dict] = None) -> Any:
        try:
            resp = self._session.get(url, params=params, headers=self._headers, timeout=self._timeout)
        except requests.RequestException as exc:
            raise UpstreamError(f"Time tracking request failed: {exc}") from exc
        if not resp.ok:
            raise UpstreamError(f"Time tracking request {url} failed with HTTP {resp.status_code}")
        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamError(f"Time tracking returned a non-JSON body for {url}") from exc
