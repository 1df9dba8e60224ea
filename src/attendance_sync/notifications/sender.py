from __future__ import annotations

import logging
import re
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Protocol

import requests

from ..core.exceptions import NotificationError

logger = logging.getLogger(__name__)

_WAIT_RE = re.compile(r"wait\s+(\d+)\s*(?:seconds?|s)\b", re.IGNORECASE)
_RATE_LIMIT_MARKERS = ("too many requests", "error-too-many-requests", "rate limit")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    rate_limit_delay: float = 10.0

    def backoff(self, attempt: int) -> float:
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)


class Notifier(Protocol):
    def send(
        self,
        label: str,
        timestamp: datetime,
        status: str,
        project: Optional[str] = None,
        is_remote: bool = False,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> bool:
        raise NotImplementedError


def format_clock(value: datetime) -> str:
    """Clock time like 9:05 AM, without the leading zero."""
    return value.strftime("%I:%M %p").lstrip("0")


def build_message(label: str, timestamp: datetime, status: str, project: Optional[str], is_remote: bool) -> str:
    if is_remote and project:
        return f"{label} | {project} | {format_clock(timestamp)} | {status}"
    return f"{label} | {format_clock(timestamp)} | {status}"


def rate_limit_wait(error_text: str) -> Optional[float]:
    """Seconds to wait when the error text describes a rate limit, else None."""
    text = error_text or ""
    match = _WAIT_RE.search(text)
    if match:
        return float(match.group(1))
    if any(marker in text.lower() for marker in _RATE_LIMIT_MARKERS):
        return 0.0
    return None


class ChatNotifier(Notifier):
    """Posts attendance messages to a Rocket.Chat channel.

    Consecutive sends are spaced at least `min_interval` seconds apart no
    matter which poller triggered them.
    """

    def __init__(
        self,
        server_url: str,
        *,
        auth_token: str,
        user_id: str,
        channel: str,
        min_interval: float = 1.0,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: float = 20,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._server_url = server_url.rstrip("/")
        self._auth_token = auth_token
        self._user_id = user_id
        self._channel = channel
        self._min_interval = float(min_interval)
        self._retry_policy = retry_policy or RetryPolicy()
        self._timeout = timeout
        self._session = session or requests.Session()
        self._sleep = sleep
        self._clock = clock
        self._send_lock = threading.Lock()
        self._last_sent: Optional[float] = None

    @property
    def configured(self) -> bool:
        return bool(self._server_url and self._channel)

    def send(
        self,
        label: str,
        timestamp: datetime,
        status: str,
        project: Optional[str] = None,
        is_remote: bool = False,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> bool:
        message = build_message(label, timestamp, status, project, is_remote)
        if not self.configured:
            logger.info("Chat not configured, message not sent: %s", message)
            return False

        policy = retry_policy or self._retry_policy
        last_error = ""
        for attempt in range(1, policy.max_attempts + 1):
            ok, last_error = self._post(message)
            if ok:
                logger.info("Sent: %s", message)
                return True
            if attempt == policy.max_attempts:
                break

            wait = rate_limit_wait(last_error)
            if wait is not None:
                delay = max(wait + 1, policy.rate_limit_delay)
                logger.warning("Chat rate limited, retrying in %.1fs", delay)
            else:
                delay = policy.backoff(attempt)
                logger.warning("Chat send failed (attempt %d/%d): %s", attempt, policy.max_attempts, last_error)
            self._sleep(delay)

        raise NotificationError(f"Failed to send message after {policy.max_attempts} attempts: {last_error}")

    def _post(self, message: str) -> tuple[bool, str]:
        with self._send_lock:
            if self._last_sent is not None:
                wait = self._min_interval - (self._clock() - self._last_sent)
                if wait > 0:
                    self._sleep(wait)
            try:
                resp = self._session.post(
                    f"{self._server_url}/api/v1/chat.postMessage",
                    json={"channel": self._channel, "text": message},
                    headers={
                        "X-Auth-Token": self._auth_token,
                        "X-User-Id": self._user_id,
                        "Content-Type": "application/json",
                    },
                    timeout=self._timeout,
                )
            except requests.RequestException as exc:
                return False, str(exc)
            finally:
                self._last_sent = self._clock()

        if resp.ok:
            return True, ""
        if resp.status_code == 429:
            return False, f"HTTP 429 too many requests {resp.text}"
        return False, f"HTTP {resp.status_code} {resp.text}"


def notify(notifier: Notifier, *, raise_errors: bool, **message) -> bool:
    """Send through `notifier`; exhaustion is logged, and re-raised only when asked."""
    try:
        return notifier.send(**message)
    except NotificationError:
        if raise_errors:
            raise
        logger.exception("Dropping chat notification for %s", message.get("label"))
        return False
