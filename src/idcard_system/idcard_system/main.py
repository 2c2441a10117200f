from __future__ import annotations

import importlib
import logging
from typing import Optional

import mysql.connector
from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS

from config import get_settings_module

from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig
from .idcards.controller import register as register_idcards
from .uploads.controller import register as register_uploads
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def _connect_store(settings) -> Container:
    """Build the MySQL-backed container; exits the process if the DB is unreachable."""
    db_config = dict(getattr(settings, "DB_CONFIG"))
    target = DBConfig.from_mapping(db_config).describe()

    try:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("Schema ready on %s (tables=%d)", target, len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            upload_folder=getattr(settings, "UPLOAD_FOLDER"),
            token_secret=getattr(settings, "SECRET_KEY"),
            token_ttl_hours=int(getattr(settings, "TOKEN_TTL_HOURS", 24)),
            public_path=getattr(settings, "UPLOADS_URL_PATH", "/uploads"),
        )
        container.conn.ping()
    except mysql.connector.Error as e:
        logger.error("Database connection failed (%s): %s", target, e)
        raise SystemExit(1)

    logger.info("Database connected: %s", target)
    return container


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(404)
    def not_found(_error):
        return jsonify({"message": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(_error):
        return jsonify({"message": "Method not allowed"}), 405

    @app.errorhandler(413)
    def too_large(_error):
        return jsonify({"message": "Uploaded file is too large"}), 413


def create_app(*, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["MAX_CONTENT_LENGTH"] = int(getattr(settings, "MAX_CONTENT_LENGTH", 16 * 1024 * 1024))
    app.json.sort_keys = False
    CORS(app, origins=getattr(settings, "CORS_ORIGINS", "*"))
    logger.debug("Using settings module %s", settings_module)

    if container is None:
        container = _connect_store(settings)

    url_prefix = getattr(settings, "URL_PREFIX", "/api")
    public_base_url = getattr(settings, "PUBLIC_BASE_URL", None) or None

    register_users(app, container, url_prefix=url_prefix)
    register_idcards(app, container, url_prefix=url_prefix, public_base_url=public_base_url)
    register_uploads(app, container)
    _register_error_handlers(app)

    @app.route("/", methods=["GET"], endpoint="index")
    def index():
        return "ID Card Backend is Running"

    return app
