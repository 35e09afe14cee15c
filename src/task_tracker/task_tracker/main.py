from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.errors import register_error_handlers
from .common.health import register as register_health
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_seed_admin, list_tables
from .logging_setup import setup_logging
from .notifications.controller import register as register_events
from .tasks.controller import register as register_tasks
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Tests pass a pre-built ``container`` (in-memory repositories); the
    database bootstrap and the cleanup scheduler are skipped in that case.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["SSE_KEEPALIVE_SECONDS"] = float(getattr(settings, "SSE_KEEPALIVE_SECONDS", 15))

    if container is None:
        setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
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
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_seed_admin(
                db_config,
                name=getattr(settings, "SEED_ADMIN_NAME"),
                email=getattr(settings, "SEED_ADMIN_EMAIL"),
                password=getattr(settings, "SEED_ADMIN_PASSWORD"),
            )

        container = build_container(settings)
        if bool(getattr(settings, "CLEANUP_ENABLED", True)):
            container.scheduler.start()

    app.extensions["task_tracker.container"] = container

    register_users(app, container)
    register_tasks(app, container)
    register_attendance(app, container)
    register_events(app, container)
    register_health(app, container)
    register_error_handlers(app)

    return app
