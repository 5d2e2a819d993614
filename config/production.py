import os

from .config import DUPLICATE_THRESHOLD, STREAM_KEEPALIVE_SECONDS, db_config_from_env

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config_from_env()

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

__all__ = [
    "SECRET_KEY",
    "DB_CONFIG",
    "DEBUG",
    "LOG_LEVEL",
    "AUTO_INIT_DB",
    "DUPLICATE_THRESHOLD",
    "STREAM_KEEPALIVE_SECONDS",
]
