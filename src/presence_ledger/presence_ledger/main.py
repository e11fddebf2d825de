from __future__ import annotations

import importlib
import logging
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.logging_setup import configure_logging
from .common.web import register_error_handlers
from .container import build_container_from_settings
from .database.bootstrap import apply_schema, list_tables
from .identities.controller import register as register_identities
from .pending.controller import register as register_pending
from .reports.controller import register as register_reports
from .security.controller import register as register_security
from .summary.controller import register as register_summary

logger = logging.getLogger(__name__)


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """Build the JSON API. ``overrides`` replaces individual settings (tests, scripts)."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    overrides = dict(overrides or {})

    def setting(name: str, default: Any = None) -> Any:
        return overrides.get(name, getattr(settings, name, default))

    configure_logging(setting("LOG_LEVEL", "INFO"), setting("LOG_FILE"))

    app.secret_key = setting("SECRET_KEY")
    app.config["DEBUG"] = bool(setting("DEBUG", False))
    app.config["TESTING"] = bool(setting("TESTING", False))

    backend = setting("STORAGE_BACKEND", "json")
    logger.info("Starting with settings=%s backend=%s data_dir=%s", settings_module, backend, setting("DATA_DIR"))

    container = build_container_from_settings(settings, overrides)

    if backend == "mysql" and bool(setting("AUTO_INIT_DB", False)):
        apply_schema(container.conn)
        logger.info("MySQL schema ready (tables=%d)", len(list_tables(container.conn)))

    app.extensions["presence_container"] = container

    register_error_handlers(app)
    register_security(app, container)
    register_identities(app, container)
    register_attendance(app, container)
    register_summary(app, container)
    register_pending(app, container)
    register_reports(app, container)

    return app
