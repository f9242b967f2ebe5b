from __future__ import annotations

import atexit
import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.constants import (
    DEFAULT_FACE_THRESHOLD,
    DEFAULT_MAX_UPLOAD_BYTES,
    DEFAULT_NOTIFY_MAX_PENDING,
    DEFAULT_NOTIFY_MAX_WORKERS,
    DEFAULT_NOTIFY_TIMEOUT_SECONDS,
)
from .database.bootstrap import apply_schema, list_tables
from .subscriptions.controller import register as register_subscriptions
from .workers.controller import register as register_workers

REPO_ROOT = Path(__file__).resolve().parents[3]

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    """Build the Flask app.

    A prebuilt ``container`` skips database bootstrap (used by tests).
    """

    load_dotenv(override=False)
    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["ADMIN_USER"] = getattr(settings, "ADMIN_USER", "")
    app.config["ADMIN_PASS"] = getattr(settings, "ADMIN_PASS", "")
    app.config["MAX_CONTENT_LENGTH"] = int(getattr(settings, "MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES))

    upload_dir = Path(getattr(settings, "UPLOAD_DIR", "uploads"))
    if not upload_dir.is_absolute():
        upload_dir = REPO_ROOT / upload_dir
    for sub in ("events", "ref"):
        (upload_dir / sub).mkdir(parents=True, exist_ok=True)
    app.config["UPLOAD_DIR"] = str(upload_dir)

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            face_threshold=float(getattr(settings, "FACE_THRESHOLD", DEFAULT_FACE_THRESHOLD)),
            telegram_bot_token=getattr(settings, "TELEGRAM_BOT_TOKEN", None),
            notify_max_workers=int(getattr(settings, "NOTIFY_MAX_WORKERS", DEFAULT_NOTIFY_MAX_WORKERS)),
            notify_timeout_seconds=float(getattr(settings, "NOTIFY_TIMEOUT_SECONDS", DEFAULT_NOTIFY_TIMEOUT_SECONDS)),
            notify_max_pending=int(getattr(settings, "NOTIFY_MAX_PENDING", DEFAULT_NOTIFY_MAX_PENDING)),
        )
        atexit.register(container.close)

    app.extensions["face_checkin"] = container

    register_workers(app, container)
    register_attendance(app, container)
    register_subscriptions(app, container)

    @app.route("/", endpoint="index")
    def index():
        return "face-checkin backend is running"

    return app
