from __future__ import annotations

import importlib
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .database.bootstrap import apply_schema, ensure_demo_users, list_tables

from .container import Container, build_container
from .applications.controller import register as register_applications
from .complaints.controller import register as register_complaints
from .core.exceptions import DomainError
from .dashboard.controller import register as register_dashboard
from .keepalive import SelfPinger
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        body = {"message": e.message}
        body.update(e.payload)
        return jsonify(body), e.status_code

    @app.errorhandler(404)
    def handle_not_found(e):
        return jsonify(message="Route not found"), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        return jsonify(message="Method not allowed"), 405

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return jsonify(message=e.description), e.code

        app.logger.exception("Unhandled error")
        detail = str(e) if app.config["DEBUG"] else "Internal server error"
        return jsonify(message="Something went wrong!", error=detail), 500


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    ``container`` lets callers (tests) inject services built on other
    repositories; by default everything is wired to MySQL from settings.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    CORS(app, origins=getattr(settings, "CLIENT_URL", "*"), supports_credentials=True)

    if container is None:
        if app.config["DEBUG"]:
            logger.info(
                "[pension-system] settings=%s db=%s@%s:%s/%s",
                settings_module,
                db_config.get("user"),
                db_config.get("host"),
                db_config.get("port", 3306),
                db_config.get("database"),
            )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("[pension-system] schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(db_config)
            logger.info("[pension-system] demo users ready")

        container = build_container(
            db_config=db_config,
            jwt_secret=getattr(settings, "JWT_SECRET"),
            jwt_expire_days=int(getattr(settings, "JWT_EXPIRE_DAYS", 7)),
        )

    register_error_handlers(app)

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify(
            status="OK",
            message="Pension Management System API is running",
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    register_users(app, container)
    register_applications(app, container)
    register_complaints(app, container)
    register_dashboard(app, container)

    ping_url = getattr(settings, "SELF_PING_URL", "")
    if ping_url and not app.config["TESTING"]:
        pinger = SelfPinger(ping_url, interval=int(getattr(settings, "SELF_PING_INTERVAL_SECONDS", 300)))
        pinger.start()
        app.extensions["self_pinger"] = pinger

    return app
