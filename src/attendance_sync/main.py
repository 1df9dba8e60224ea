from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import build_container
from .attendance.controller import register as register_attendance
from .scheduling.jobs import build_scheduler

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    logger.info("settings=%s data_dir=%s", settings_module, getattr(settings, "DATA_DIR", "data"))

    container = build_container(settings=settings)
    app.extensions["attendance_sync"] = container

    register_attendance(app, container)

    if bool(getattr(settings, "ENABLE_POLLING", False)):
        scheduler = build_scheduler(
            container,
            onsite_seconds=int(getattr(settings, "ONSITE_POLL_SECONDS", 60)),
            remote_seconds=int(getattr(settings, "REMOTE_POLL_SECONDS", 10)),
        )
        scheduler.start()
        app.extensions["attendance_sync_scheduler"] = scheduler
        logger.info("Background polling started")

    return app
