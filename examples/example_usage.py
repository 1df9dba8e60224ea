"""Example: drive the service layer directly (no Flask).

Runs one on-site and one remote cycle, then prints today's merged report rows.
"""

import importlib
import logging

from config import get_settings_module

from attendance_sync.common.datetime_utils import now_local
from attendance_sync.container import build_container


def main():
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings=settings)

    print(container.onsite_service.poll().as_dict())
    print(container.remote_service.poll().as_dict())

    today = now_local().date()
    for row in container.report_service.build_merged_rows(start=today, end=today):
        print(row.as_dict())


if __name__ == "__main__":
    main()
