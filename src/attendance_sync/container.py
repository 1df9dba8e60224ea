from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from types import ModuleType

from .attendance.onsite_service import OnSiteSyncService
from .attendance.remote_service import RemoteSyncService
from .common.datetime_utils import resolve_timezone
from .common.json_store import JsonFileStore
from .device.client import DeviceClient
from .ledger.excel_ledger_repository import ExcelLedgerRepository
from .ledger.service import LedgerService
from .notifications.sender import ChatNotifier, RetryPolicy
from .reports.service import MergeReportService
from .sync.cursor import SyncCursorStore
from .sync.dedup import ProcessedPunchCache
from .sync.timer_state import RunningTimerState
from .tracking.client import TimeTrackingClient


@dataclass(frozen=True)
class Container:
    device_client: DeviceClient
    tracking_client: TimeTrackingClient
    notifier: ChatNotifier

    ledger_repo: ExcelLedgerRepository
    processed_cache: ProcessedPunchCache
    cursor_store: SyncCursorStore
    timer_state: RunningTimerState

    ledger_service: LedgerService
    onsite_service: OnSiteSyncService
    remote_service: RemoteSyncService
    report_service: MergeReportService


def build_container(*, settings: ModuleType) -> Container:
    data_dir = Path(getattr(settings, "DATA_DIR", "data"))
    timeout = float(getattr(settings, "HTTP_TIMEOUT_SECONDS", 20))
    tz = resolve_timezone(getattr(settings, "TIMEZONE", ""))
    inter_user_delay = float(getattr(settings, "INTER_USER_DELAY_SECONDS", 0.2))

    device = settings.DEVICE_CONFIG
    clockify = settings.CLOCKIFY_CONFIG
    chat = settings.CHAT_CONFIG

    device_client = DeviceClient(
        device["url"],
        username=device["username"],
        password=device["password"],
        token=device["token"],
        timeout=timeout,
    )
    tracking_client = TimeTrackingClient(
        clockify["base_url"],
        api_key=clockify["api_key"],
        workspace_id=clockify["workspace_id"],
        timeout=timeout,
    )
    notifier = ChatNotifier(
        chat["server_url"],
        auth_token=chat["auth_token"],
        user_id=chat["user_id"],
        channel=chat["channel"],
        min_interval=float(getattr(settings, "NOTIFY_MIN_INTERVAL_SECONDS", 1.0)),
        retry_policy=RetryPolicy(
            max_attempts=int(getattr(settings, "NOTIFY_MAX_ATTEMPTS", 3)),
            base_delay=float(getattr(settings, "NOTIFY_BASE_DELAY_SECONDS", 1.0)),
        ),
        timeout=timeout,
    )

    ledger_repo = ExcelLedgerRepository(
        data_dir / getattr(settings, "LEDGER_FILE", "attendance.xlsx"),
        sheet_name=getattr(settings, "LEDGER_SHEET", "Attendance"),
    )
    processed_cache = ProcessedPunchCache(JsonFileStore(data_dir / "processed_punches.json"))
    cursor_store = SyncCursorStore(
        JsonFileStore(data_dir / "device_cursor.json"),
        overlap=timedelta(seconds=int(getattr(settings, "OVERLAP_SECONDS", 10))),
    )
    timer_state = RunningTimerState(JsonFileStore(data_dir / "clockify_states.json"))

    ledger_service = LedgerService(ledger_repo)
    onsite_service = OnSiteSyncService(device_client, ledger_service, processed_cache, cursor_store, notifier)
    remote_service = RemoteSyncService(
        tracking_client,
        ledger_service,
        timer_state,
        notifier,
        inter_user_delay=inter_user_delay,
        tz=tz,
    )
    report_service = MergeReportService(device_client, tracking_client, tz=tz, inter_user_delay=inter_user_delay)

    return Container(
        device_client=device_client,
        tracking_client=tracking_client,
        notifier=notifier,
        ledger_repo=ledger_repo,
        processed_cache=processed_cache,
        cursor_store=cursor_store,
        timer_state=timer_state,
        ledger_service=ledger_service,
        onsite_service=onsite_service,
        remote_service=remote_service,
        report_service=report_service,
    )
