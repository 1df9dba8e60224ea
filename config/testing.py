import os
import tempfile
from pathlib import Path

from .config import *  # noqa: F401,F403

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

DATA_DIR = Path(os.getenv("DATA_DIR", tempfile.gettempdir())) / "attendance_sync_test"
INTER_USER_DELAY_SECONDS = 0.0
NOTIFY_MIN_INTERVAL_SECONDS = 0.0
NOTIFY_BASE_DELAY_SECONDS = 0.0

ENABLE_POLLING = bool(int(os.getenv("ENABLE_POLLING", "0")))
