from __future__ import annotations

import logging
import time
from datetime import datetime, tzinfo
from typing import Callable, Optional, Protocol

from ..common.datetime_utils import format_duration_text, now_local, to_local
from ..common.guard import RunGuard
from ..core.constants import REMOTE_LABEL_PREFIX
from ..core.enums import EventKind, EventSource
from ..ledger.model import AttendanceEvent
from ..ledger.service import LedgerService
from ..notifications.sender import Notifier, notify
from ..sync.timer_state import RunningTimerState
from ..tracking.model import TimeEntry, TrackedUser
from .model import RemotePollResult

logger = logging.getLogger(__name__)


class TimerSource(Protocol):
    def list_users(self) -> list[TrackedUser]:
        raise NotImplementedError

    def get_running_entry(self, user_id: str) -> Optional[TimeEntry]:
        raise NotImplementedError

    def get_last_entry(self, user_id: str) -> Optional[TimeEntry]:
        raise NotImplementedError

    def get_project_name(self, project_id: Optional[str]) -> Optional[str]:
        raise NotImplementedError


class RemoteSyncService:
    """Use case: turn running-timer changes into remote sign-in / sign-off events.

    The time tracker has no push notifications, so each cycle compares every
    user's in-progress timer against the one remembered from the last cycle.
    """

    def __init__(
        self,
        tracking: TimerSource,
        ledger: LedgerService,
        timers: RunningTimerState,
        notifier: Notifier,
        *,
        inter_user_delay: float = 0.2,
        tz: Optional[tzinfo] = None,
        guard: Optional[RunGuard] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = now_local,
    ):
        self._tracking = tracking
        self._ledger = ledger
        self._timers = timers
        self._notifier = notifier
        self._inter_user_delay = float(inter_user_delay)
        self._tz = tz
        self._guard = guard or RunGuard("remote poll")
        self._sleep = sleep
        self._clock = clock

    def poll(self, *, raise_notification_errors: bool = False) -> RemotePollResult:
        with self._guard.try_run() as acquired:
            if not acquired:
                return RemotePollResult(skipped=True)

            self._timers.load()
            users = self._tracking.list_users()
            result = RemotePollResult(users=len(users))
            for i, user in enumerate(users):
                if i and self._inter_user_delay > 0:
                    self._sleep(self._inter_user_delay)
                self._poll_user(user, result, raise_notification_errors)

            logger.debug(
                "Remote cycle done: %d users, %d sign-ins, %d sign-offs",
                result.users, result.sign_ins, result.sign_offs,
            )
            return result

    def _poll_user(self, user: TrackedUser, result: RemotePollResult, raise_notification_errors: bool) -> None:
        running = self._tracking.get_running_entry(user.user_id)
        stored_id = self._timers.get(user.user_id)

        if running is not None:
            if running.entry_id != stored_id:
                self._sign_in(user, running, raise_notification_errors)
                result.sign_ins += 1
            return

        if not stored_id:
            return

        last = self._tracking.get_last_entry(user.user_id)
        if last is not None and last.entry_id == stored_id and last.end is not None:
            self._sign_off(user, last, raise_notification_errors)
            result.sign_offs += 1
        else:
            logger.warning("Last time entry not found or mismatched for %s", user.name)

        # cleared either way so a vanished timer cannot wedge the user
        self._timers.clear(user.user_id)
        self._timers.save()

    def _sign_in(self, user: TrackedUser, entry: TimeEntry, raise_notification_errors: bool) -> None:
        project = self._project_for(entry)
        started_at = self._local(entry.start)

        self._timers.set(user.user_id, entry.entry_id)
        self._timers.save()

        self._ledger.upsert(
            AttendanceEvent(
                employee_name=user.name,
                timestamp=started_at,
                kind=EventKind.REMOTE_START,
                source=EventSource.REMOTE,
                project=project,
            )
        )
        logger.info("%s signed in (%s) at %s", user.name, project or "no project", started_at)
        notify(
            self._notifier,
            raise_errors=raise_notification_errors,
            label=f"{REMOTE_LABEL_PREFIX}{user.name}",
            timestamp=started_at,
            status="Signing In",
            project=project,
            is_remote=True,
        )

    def _sign_off(self, user: TrackedUser, entry: TimeEntry, raise_notification_errors: bool) -> None:
        project = self._project_for(entry)
        # the entry's own end time, never a value left over from another user or cycle
        ended_at = self._local(entry.end)
        worked = format_duration_text(entry.duration_seconds)

        self._ledger.upsert(
            AttendanceEvent(
                employee_name=user.name,
                timestamp=ended_at,
                kind=EventKind.REMOTE_END,
                source=EventSource.REMOTE,
                project=project,
                duration_seconds=entry.duration_seconds,
            )
        )
        logger.info("%s signed off (%s) at %s after %s", user.name, project or "no project", ended_at, worked)
        notify(
            self._notifier,
            raise_errors=raise_notification_errors,
            label=f"{REMOTE_LABEL_PREFIX}{user.name}",
            timestamp=ended_at,
            status=f"Signing off | {worked}",
            project=project,
            is_remote=True,
        )

    def _project_for(self, entry: TimeEntry) -> Optional[str]:
        return entry.project_name or self._tracking.get_project_name(entry.project_id)

    def _local(self, value: Optional[datetime]) -> datetime:
        if value is None:
            return self._clock()
        return to_local(value, self._tz)
