from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from apscheduler.schedulers.background import BackgroundScheduler

if TYPE_CHECKING:
    from ..container import Container

logger = logging.getLogger(__name__)


def run_onsite_cycle(container: "Container") -> None:
    """Periodic path: failures are logged and the next tick retries the same window."""
    try:
        container.onsite_service.poll()
    except Exception:
        logger.exception("On-site poll cycle failed")


def run_remote_cycle(container: "Container") -> None:
    try:
        container.remote_service.poll()
    except Exception:
        logger.exception("Remote poll cycle failed")


def build_scheduler(container: "Container", *, onsite_seconds: int, remote_seconds: int) -> BackgroundScheduler:
    scheduler = BackgroundScheduler()
    # max_instances=1: a slow cycle makes the next tick skip, not queue
    scheduler.add_job(
        run_onsite_cycle,
        "interval",
        seconds=onsite_seconds,
        args=[container],
        id="onsite-poll",
        max_instances=1,
        coalesce=True,
        next_run_time=datetime.now(),
    )
    scheduler.add_job(
        run_remote_cycle,
        "interval",
        seconds=remote_seconds,
        args=[container],
        id="remote-poll",
        max_instances=1,
        coalesce=True,
        next_run_time=datetime.now(),
    )
    return scheduler
