import os

from .config import DUPLICATE_THRESHOLD, STREAM_KEEPALIVE_SECONDS, db_config_from_env

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config_from_env()

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

__all__ = [
    "SECRET_KEY",
    "DB_CONFIG",
    "DEBUG",
    "LOG_LEVEL",
    "AUTO_INIT_DB",
    "DUPLICATE_THRESHOLD",
    "STREAM_KEEPALIVE_SECONDS",
]
