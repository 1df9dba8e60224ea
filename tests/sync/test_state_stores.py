import json
from datetime import datetime, timedelta, timezone

from attendance_sync.common.json_store import JsonFileStore
from attendance_sync.sync.cursor import EPOCH, SyncCursorStore
from attendance_sync.sync.dedup import ProcessedPunchCache, punch_key
from attendance_sync.sync.timer_state import RunningTimerState


def test_punch_key_uses_raw_time_string():
    assert punch_key("101", "2024-01-01 09:00:00") == "101_2024-01-01 09:00:00"


def test_processed_cache_persists_across_instances(tmp_path):
    store = JsonFileStore(tmp_path / "processed_punches.json")
    cache = ProcessedPunchCache(store)
    cache.load()
    cache.mark_processed("101_2024-01-01 09:00:00")
    cache.save()

    reloaded = ProcessedPunchCache(store)
    reloaded.load()
    assert reloaded.is_duplicate("101_2024-01-01 09:00:00")
    assert not reloaded.is_duplicate("101_2024-01-01 17:00:00")
    assert len(reloaded) == 1


def test_corrupt_cache_file_starts_empty(tmp_path):
    path = tmp_path / "processed_punches.json"
    path.write_text("{not json", encoding="utf-8")

    cache = ProcessedPunchCache(JsonFileStore(path))
    cache.load()

    assert len(cache) == 0


def test_cursor_defaults_to_two_minutes_back(tmp_path, fixed_now):
    cursor = SyncCursorStore(JsonFileStore(tmp_path / "cursor.json"), clock=lambda: fixed_now)

    assert cursor.get_last_fetched_at() == fixed_now - timedelta(minutes=2)


def test_window_starts_overlap_before_cursor(tmp_path, fixed_now):
    cursor = SyncCursorStore(JsonFileStore(tmp_path / "cursor.json"), clock=lambda: fixed_now)
    cursor.set_last_fetched_at(datetime(2024, 1, 1, 17, 0, 0))

    start, end = cursor.next_window()

    assert start == datetime(2024, 1, 1, 16, 59, 50)
    assert end == fixed_now
    saved = json.loads((tmp_path / "cursor.json").read_text(encoding="utf-8"))
    assert saved == {"lastFetchedAt": "2024-01-01T17:00:00"}


def test_window_never_starts_before_epoch(tmp_path, fixed_now):
    cursor = SyncCursorStore(JsonFileStore(tmp_path / "cursor.json"), clock=lambda: fixed_now)
    cursor.set_last_fetched_at(EPOCH)

    start, _ = cursor.next_window()

    assert start == EPOCH


def test_cursor_saved_with_offset_is_read_as_local_time(tmp_path, fixed_now):
    store = JsonFileStore(tmp_path / "cursor.json")
    store.write({"lastFetchedAt": "2024-01-01T09:00:00Z"})
    cursor = SyncCursorStore(store, clock=lambda: fixed_now)

    start, _ = cursor.next_window()

    expected = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert start.tzinfo is None
    assert start == expected - timedelta(seconds=10)


def test_timer_state_round_trip(tmp_path):
    store = JsonFileStore(tmp_path / "clockify_states.json")
    timers = RunningTimerState(store)
    timers.load()
    timers.set("u1", "t-1")
    timers.set("u2", "t-2")
    timers.clear("u2")
    timers.save()

    reloaded = RunningTimerState(store)
    reloaded.load()
    assert reloaded.get("u1") == "t-1"
    assert reloaded.get("u2") is None


def test_write_failure_is_reported_not_raised(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")

    assert JsonFileStore(blocker / "state.json").write({"a": 1}) is False
