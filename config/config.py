import os
from pathlib import Path


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "attendance-sync-secret"

    # Biometric terminal
    DEVICE_URL = os.environ.get("DEVICE_URL", "http://localhost:8081/")
    DEVICE_USERNAME = os.environ.get("DEVICE_USERNAME", "")
    DEVICE_PASSWORD = os.environ.get("DEVICE_PASSWORD", "")
    DEVICE_TOKEN = os.environ.get("DEVICE_TOKEN", os.environ.get("JWT_TOKEN", ""))

    # Time tracking
    CLOCKIFY_BASE_URL = os.environ.get("CLOCKIFY_BASE_URL", "https://api.clockify.me/api/v1")
    CLOCKIFY_API_KEY = os.environ.get("CLOCKIFY_API_KEY", "")
    CLOCKIFY_WORKSPACE_ID = os.environ.get("CLOCKIFY_WORKSPACE_ID", "")

    # Chat channel
    ROCKET_CHAT_SERVER_URL = os.environ.get("ROCKET_CHAT_SERVER_URL", "")
    ROCKET_CHAT_AUTH_TOKEN = os.environ.get("ROCKET_CHAT_AUTH_TOKEN", "")
    ROCKET_CHAT_USER_ID = os.environ.get("ROCKET_CHAT_USER_ID", "")
    CHANNEL_NAME = os.environ.get("CHANNEL_NAME", "")

    # Local state
    DATA_DIR = Path(os.environ.get("DATA_DIR", "data"))
    LEDGER_FILE = os.environ.get("LEDGER_FILE", "attendance.xlsx")
    LEDGER_SHEET = os.environ.get("LEDGER_SHEET", "Attendance")

    # Polling
    ONSITE_POLL_SECONDS = int(os.environ.get("ONSITE_POLL_SECONDS", "60"))
    REMOTE_POLL_SECONDS = int(os.environ.get("REMOTE_POLL_SECONDS", "10"))
    OVERLAP_SECONDS = int(os.environ.get("OVERLAP_SECONDS", "10"))
    INTER_USER_DELAY_SECONDS = float(os.environ.get("INTER_USER_DELAY_SECONDS", "0.2"))

    # Notifications
    NOTIFY_MIN_INTERVAL_SECONDS = float(os.environ.get("NOTIFY_MIN_INTERVAL_SECONDS", "1.0"))
    NOTIFY_MAX_ATTEMPTS = int(os.environ.get("NOTIFY_MAX_ATTEMPTS", "3"))
    NOTIFY_BASE_DELAY_SECONDS = float(os.environ.get("NOTIFY_BASE_DELAY_SECONDS", "1.0"))

    HTTP_TIMEOUT_SECONDS = float(os.environ.get("HTTP_TIMEOUT_SECONDS", "20"))
    TIMEZONE = os.environ.get("TIMEZONE", "")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


# Module-level names read by create_app()/build_container()
SECRET_KEY = Config.SECRET_KEY
DEVICE_CONFIG = {
    "url": Config.DEVICE_URL,
    "username": Config.DEVICE_USERNAME,
    "password": Config.DEVICE_PASSWORD,
    "token": Config.DEVICE_TOKEN,
}
CLOCKIFY_CONFIG = {
    "base_url": Config.CLOCKIFY_BASE_URL,
    "api_key": Config.CLOCKIFY_API_KEY,
    "workspace_id": Config.CLOCKIFY_WORKSPACE_ID,
}
CHAT_CONFIG = {
    "server_url": Config.ROCKET_CHAT_SERVER_URL,
    "auth_token": Config.ROCKET_CHAT_AUTH_TOKEN,
    "user_id": Config.ROCKET_CHAT_USER_ID,
    "channel": Config.CHANNEL_NAME,
}

DATA_DIR = Config.DATA_DIR
LEDGER_FILE = Config.LEDGER_FILE
LEDGER_SHEET = Config.LEDGER_SHEET

ONSITE_POLL_SECONDS = Config.ONSITE_POLL_SECONDS
REMOTE_POLL_SECONDS = Config.REMOTE_POLL_SECONDS
OVERLAP_SECONDS = Config.OVERLAP_SECONDS
INTER_USER_DELAY_SECONDS = Config.INTER_USER_DELAY_SECONDS

NOTIFY_MIN_INTERVAL_SECONDS = Config.NOTIFY_MIN_INTERVAL_SECONDS
NOTIFY_MAX_ATTEMPTS = Config.NOTIFY_MAX_ATTEMPTS
NOTIFY_BASE_DELAY_SECONDS = Config.NOTIFY_BASE_DELAY_SECONDS

HTTP_TIMEOUT_SECONDS = Config.HTTP_TIMEOUT_SECONDS
TIMEZONE = Config.TIMEZONE
LOG_LEVEL = Config.LOG_LEVEL

DEBUG = bool(int(os.environ.get("DEBUG", "1")))
ENABLE_POLLING = bool(int(os.environ.get("ENABLE_POLLING", "1")))
