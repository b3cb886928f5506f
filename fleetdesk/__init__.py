# fleetdesk/__init__.py
from __future__ import annotations

from typing import Any, Mapping, Optional

from flask import Flask, jsonify

from .settings import Config, ConfigurationError, check_required
from .extensions import db, migrate, login_manager, limiter


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    # Fails hard: nothing works without a backend connection
    check_required(app.config)

    # ======================
    # Initialize Extensions
    # ======================
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)

    # ======================
    # Import Models (CRITICAL)
    # ======================
    from . import models  # noqa: F401

    # ======================
    # Register Blueprints
    # ======================
    from .auth import auth
    from .fleet import fleet_bp, media

    app.register_blueprint(auth)
    app.register_blueprint(fleet_bp)
    app.register_blueprint(media)

    # ======================
    # CLI
    # ======================
    from .cli import register_cli

    register_cli(app)

    # ======================
    # Error handlers (JSON)
    # ======================
    from .services.gateway import GatewayError

    @app.errorhandler(GatewayError)
    def gateway_error(e):
        return jsonify({"error": str(e)}), 502

    @app.errorhandler(403)
    def forbidden(e):
        return jsonify({"error": "You do not have access to fleet data."}), 403

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Not found."}), 404

    @app.errorhandler(413)
    def too_large(e):
        return jsonify({"error": "Image file must be less than 5MB"}), 413

    @app.errorhandler(429)
    def ratelimit_handler(e):
        return jsonify({"error": "Too many requests. Please try again later."}), 429

    return app


__all__ = ["create_app", "ConfigurationError"]
