# backend/pvz/__init__.py
import logging
import time

from flask import Flask, request, jsonify, g
from werkzeug.exceptions import HTTPException

from .config import Config
from .container import ServiceContainer
from .errors import StoreTimeoutError, StoreUnavailableError
from .extensions import db, migrate


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))
    logging.getLogger("pvz").setLevel(app.logger.level)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    app.extensions["pvz"] = ServiceContainer.from_config(app.config)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.pvz import pvz_bp
    from .routes.receptions import receptions_bp
    from .routes.products import products_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(pvz_bp)
    app.register_blueprint(receptions_bp)
    app.register_blueprint(products_bp)

    @app.before_request
    def start_timer():
        g.request_started_at = time.perf_counter()

    @app.after_request
    def log_request(response):
        started = g.get("request_started_at")
        if started is not None:
            app.logger.info(
                "%s %s - Status: %s - Time: %.4fs",
                request.method,
                request.path,
                response.status_code,
                time.perf_counter() - started,
            )
        return response

    @app.errorhandler(StoreUnavailableError)
    def handle_store_unavailable(exc):
        if isinstance(exc, StoreTimeoutError):
            app.logger.warning("Store deadline exceeded on %s %s: %s", request.method, request.path, exc)
        else:
            app.logger.error("Store unavailable on %s %s: %s", request.method, request.path, exc)
        return jsonify({"message": "Service temporarily unavailable"}), 503

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        if isinstance(exc, HTTPException):
            return jsonify({"message": exc.description}), exc.code
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"message": "Internal server error"}), 500

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
