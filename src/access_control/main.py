from __future__ import annotations

import importlib
import logging
import time
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .access_logs.controller import register as register_access_logs
from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.constants import DEFAULT_DUPLICATE_THRESHOLD, DEFAULT_KEEPALIVE_SECONDS
from .database.bootstrap import apply_schema, list_tables
from .profiles.controller import register as register_profiles

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
SCHEMA_PATH = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(str(getattr(settings, "LOG_LEVEL", "INFO")))
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            duplicate_threshold=float(getattr(settings, "DUPLICATE_THRESHOLD", DEFAULT_DUPLICATE_THRESHOLD)),
            keepalive_seconds=float(getattr(settings, "STREAM_KEEPALIVE_SECONDS", DEFAULT_KEEPALIVE_SECONDS)),
        )

    app.extensions["access_control"] = container

    register_profiles(app, container)
    register_attendance(app, container)
    register_access_logs(app, container)

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"success": True, "status": "ok", "timestamp": int(time.time() * 1000)})

    return app
