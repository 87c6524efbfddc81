from __future__ import annotations

import importlib
from typing import Optional

import structlog
from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .classes.controller import register as register_classes
from .common.http import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .core.constants import DEFAULT_ACADEMIC_YEAR
from .core.logging import configure_logging
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .marks.controller import register as register_marks
from .roster.controller import register as register_roster
from .subjects.controller import register as register_subjects
from .users.controller import register as register_users

logger = structlog.get_logger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FORMAT", "console"))
    logger.info(
        "app.settings",
        settings=settings_module,
        db=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
    )

    if container is None:
        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config)
            logger.info("app.schema_ready", tables=len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            ensure_demo_users(db_config)

        container = build_container(
            db_config=db_config,
            default_academic_year=getattr(settings, "DEFAULT_ACADEMIC_YEAR", DEFAULT_ACADEMIC_YEAR),
        )

    app.extensions["school_records"] = container
    register_error_handlers(app)

    register_users(app, container)
    register_classes(app, container)
    register_subjects(app, container)
    register_roster(app, container)
    register_attendance(app, container)
    register_marks(app, container)
    register_dashboard(app, container)

    return app
