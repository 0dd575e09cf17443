from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, render_template

from config import get_settings_module

from .common.datetime_utils import format_display
from .common.logging_setup import configure_logging
from .communities.controller import register as register_communities
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .notifications.controller import register as register_notifications
from .spaces.controller import register as register_spaces
from .submissions.controller import register as register_submissions
from .users.controller import register as register_users

logger = logging.getLogger("attendance_spaces")


def create_app(container: Optional[Container] = None) -> Flask:
    """App factory. Pass a container to skip DB bootstrap (tests, scripts)."""

    load_dotenv(override=False)
    app = Flask(__name__, template_folder="../../../templates")

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(str(getattr(settings, "LOG_LEVEL", "INFO")))

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
        _bootstrap_database(settings, db_config)
        container = build_container(db_config=db_config)

    app.extensions["attendance_spaces"] = container
    app.jinja_env.filters["dt"] = format_display

    @app.errorhandler(404)
    def not_found(_e):
        return render_template("404.html"), 404

    register_users(app, container)
    register_spaces(app, container)
    register_submissions(app, container)
    register_communities(app, container)
    register_notifications(app, container)

    return app


def _bootstrap_database(settings, db_config: dict) -> None:
    root = Path(__file__).resolve().parents[3] / "database"
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=root / "schema.sql")
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        ensure_demo_users(db_config)
        apply_seed_sql(db_config, seed_path=root / "seed.sql")
        logger.info("demo seed ready")
