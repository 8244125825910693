from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .leave.controller import register as register_leave
from .recognition.controller import register as register_recognition
from .recognition.gate import RecognitionThresholds
from .reports.controller import register as register_reports
from .sessions.controller import register as register_sessions

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def _configure_logging(level: str) -> None:
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    _configure_logging(str(getattr(settings, "LOG_LEVEL", "INFO")))

    if container is None:
        storage_backend = str(getattr(settings, "STORAGE_BACKEND", "mysql"))
        db_config = getattr(settings, "DB_CONFIG", None)
        logger.info(
            "settings=%s storage=%s db=%s@%s:%s/%s",
            settings_module,
            storage_backend,
            (db_config or {}).get("user"),
            (db_config or {}).get("host"),
            (db_config or {}).get("port", 3306),
            (db_config or {}).get("database"),
        )

        if storage_backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            storage_backend=storage_backend,
            notification_backend=str(getattr(settings, "NOTIFICATION_BACKEND", "inprocess")),
            thresholds=RecognitionThresholds.from_dict(getattr(settings, "RECOGNITION_THRESHOLDS", None)),
        )

    app.extensions["attendance_pipeline"] = container
    register_error_handlers(app)
    register_sessions(app, container)
    register_attendance(app, container)
    register_recognition(app, container)
    register_leave(app, container)
    register_reports(app, container)

    return app
