import os

from .config import *  # noqa: F401,F403

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Background pollers run inside the dev server unless disabled
ENABLE_POLLING = bool(int(os.getenv("ENABLE_POLLING", "1")))
