from __future__ import annotations

import importlib
import logging
import os
from types import ModuleType
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, send_from_directory
from flask_cors import CORS

from config import get_settings_module

from .common.logging_setup import setup_logging
from .common.responses import fail, ok
from .container import Container, build_container
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, ensure_admin_user, list_tables
from .notifications.socket import create_socketio

from .advances.controller import register as register_advances
from .attendance.controller import register as register_attendance
from .payroll.controller import register as register_payroll
from .shifts.controller import register as register_shifts
from .users.controller import register as register_users
from .violations.controller import register as register_violations

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    """Application factory.

    Pass a prebuilt `container` to run on other repositories (tests do);
    otherwise MySQL repositories are wired from the settings module.
    """
    load_dotenv(override=False)
    settings_module = settings_module or get_settings_module()
    settings: ModuleType = importlib.import_module(settings_module)

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", None))

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["JWT_SECRET"] = getattr(settings, "JWT_SECRET")
    app.config["UPLOAD_FOLDER"] = getattr(settings, "UPLOAD_FOLDER", "Uploads")

    cors_origins = list(getattr(settings, "CORS_ORIGINS", ["*"]))
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

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
            apply_schema(db_config)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_ADMIN", False)):
            ensure_admin_user(db_config)
        container = build_container(db_config=db_config, settings=settings)

    app.extensions["container"] = container

    register_users(app, container)
    register_shifts(app, container)
    register_attendance(app, container)
    register_advances(app, container)
    register_violations(app, container)
    register_payroll(app, container)

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return ok({"status": "ok"})

    @app.route("/Uploads/<path:filename>", methods=["GET"], endpoint="uploads")
    def uploads(filename: str):
        return send_from_directory(os.path.abspath(container.images.folder), filename)

    @app.errorhandler(DomainError)
    def domain_error(e: DomainError):
        return fail(str(e), e.status_code)

    @app.errorhandler(404)
    def not_found(_):
        return fail("Not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(_):
        return fail("Method not allowed", 405)

    @app.errorhandler(500)
    def server_error(e):
        logger.error("Unhandled server error: %s", e)
        return fail("Something went wrong!", 500)

    create_socketio(app, cors_origins=cors_origins)
    return app
