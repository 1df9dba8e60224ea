import os

from .config import *  # noqa: F401,F403

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False

ENABLE_POLLING = bool(int(os.getenv("ENABLE_POLLING", "1")))
