from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

import requests

from ..common.datetime_utils import format_device_timestamp
from ..core.constants import DEVICE_PAGE_SIZE
from ..core.exceptions import AuthExpiredError, UpstreamError, ValidationError
from .model import RawPunch

logger = logging.getLogger(__name__)


class DeviceClient:
    """HTTP client for the biometric terminal's transaction API (JWT auth)."""

    def __init__(
        self,
        base_url: str,
        *,
        username: str = "",
        password: str = "",
        token: str = "",
        timeout: float = 20,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._username = username
        self._password = password
        self._token = token
        self._timeout = timeout
        self._session = session or requests.Session()

    def authenticate(self, username: Optional[str] = None, password: Optional[str] = None) -> str:
        username = username or self._username
        password = password or self._password
        if not username or not password:
            raise ValidationError("Missing username or password.")

        try:
            resp = self._session.post(
                f"{self._base_url}jwt-api-token-auth/",
                json={"username": username, "password": password},
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise UpstreamError(f"Device auth request failed: {exc}") from exc

        if not resp.ok:
            raise UpstreamError(f"Device auth failed with HTTP {resp.status_code}")
        try:
            token = resp.json().get("token")
        except ValueError as exc:
            raise UpstreamError("Device auth returned a non-JSON body") from exc
        if not token:
            raise UpstreamError("Device auth response carried no token")

        self._token = token
        logger.info("Device token refreshed")
        return token

    def fetch_transactions(self, start: datetime, end: datetime) -> list[RawPunch]:
        params = {
            "start_time": format_device_timestamp(start),
            "end_time": format_device_timestamp(end),
            "page_size": DEVICE_PAGE_SIZE,
        }
        resp = self._get(f"{self._base_url}iclock/api/transactions/", params=params)
        try:
            body = resp.json()
        except ValueError as exc:
            raise UpstreamError("Device returned a non-JSON transaction list") from exc
        return [RawPunch.from_api(p) for p in (body.get("data") or []) if isinstance(p, dict)]

    def fetch_report_page(
        self, start_date: date, end_date: date, url: Optional[str] = None
    ) -> tuple[list[RawPunch], Optional[str]]:
        """One page of the bulk transaction report and the next page URL.

        An HTML error page or any other non-JSON body means "no more data".
        """
        if url is None:
            url = f"{self._base_url}iclock/api/transactions/"
            params: Optional[dict] = {
                "start_time": f"{start_date.isoformat()} 00:00:00",
                "end_time": f"{end_date.isoformat()} 23:59:59",
                "page_size": DEVICE_PAGE_SIZE,
            }
        else:
            params = None

        try:
            resp = self._get(url, params=params)
        except AuthExpiredError:
            raise
        except UpstreamError as exc:
            logger.warning("Report pagination stopped at %s: %s", url, exc)
            return [], None
        if "html" in resp.headers.get("Content-Type", "").lower():
            logger.warning("Report pagination hit an HTML page at %s, stopping", url)
            return [], None
        try:
            body = resp.json()
        except ValueError:
            logger.warning("Report pagination hit a non-JSON page at %s, stopping", url)
            return [], None
        if not isinstance(body, dict):
            return [], None

        records = [RawPunch.from_api(p) for p in (body.get("data") or []) if isinstance(p, dict)]
        return records, body.get("next") or None

    def _get(self, url: str, *, params: Optional[dict]) -> requests.Response:
        try:
            resp = self._session.get(
                url,
                params=params,
                headers={"Content-Type": "application/json", "Authorization": f"JWT {self._token}"},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise UpstreamError(f"Device request failed: {exc}") from exc

        if resp.status_code == 401 or self._token_rejected(resp):
            raise AuthExpiredError("Device token expired or invalid")
        if not resp.ok:
            raise UpstreamError(f"Device request failed with HTTP {resp.status_code}")
        return resp

    @staticmethod
    def _token_rejected(resp: requests.Response) -> bool:
        if resp.status_code < 400:
            return False
        try:
            body = resp.json()
        except ValueError:
            return False
        return isinstance(body, dict) and body.get("code") == "token_not_valid"
