"""
Application factory for Mento Sync.

This module provides a function to create and configure the Flask
application. All extensions (SQLAlchemy, Migrate, JWT) are initialised
here, and the blueprints for profiles, check-ins, journals, teams and
screen navigation are registered inside the factory so that tests can
build isolated app instances.

Environment variables control the database connection, the secret key
and the public origin used for invite links. A default configuration is
provided for development, using SQLite when no database URL is
available.
"""

from __future__ import annotations

import logging
import os
from datetime import timedelta

from flask import Flask
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager

# instantiate extensions without binding them to an app yet.  They will
# be bound in create_app().
from .db import db  # use shared db object from db.py
migrate = Migrate()
jwt = JWTManager()


def create_app(test_config: dict | None = None) -> Flask:
    """Create and configure a Flask application.

    Parameters
    ----------
    test_config: dict | None, optional
        Optional configuration overrides used when running tests.

    Returns
    -------
    Flask
        A configured Flask application instance.
    """
    app = Flask(__name__)

    # Default configuration. Override using environment variables or
    # by passing a ``test_config`` mapping.
    app.config.update(
        SQLALCHEMY_DATABASE_URI=os.environ.get("DATABASE_URL", "sqlite:///mento.db"),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        JWT_SECRET_KEY=os.environ.get("JWT_SECRET_KEY", "please-change-this-secret-key"),
        JWT_ACCESS_TOKEN_EXPIRES=timedelta(days=1),
        APP_ORIGIN=os.environ.get("APP_ORIGIN", "http://localhost:5173"),
        LOG_LEVEL=os.environ.get("LOG_LEVEL", "INFO"),
    )

    if test_config:
        app.config.update(test_config)

    logging.basicConfig(level=app.config["LOG_LEVEL"])

    # Initialise extensions with the app
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    from .errors import register_error_handlers
    register_error_handlers(app)

    # Register blueprints. Importing here avoids circular imports.
    from .routes.auth import auth_bp
    from .routes.profile import profile_bp
    from .routes.journal import journal_bp
    from .routes.teams import teams_bp
    from .routes.navigation import navigation_bp, invite_bp

    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(profile_bp, url_prefix="/api")
    app.register_blueprint(journal_bp, url_prefix="/api")
    app.register_blueprint(teams_bp, url_prefix="/api")
    app.register_blueprint(navigation_bp, url_prefix="/api")
    # Invite links are shared as bare URLs, so they live outside /api.
    app.register_blueprint(invite_bp)

    @app.route("/api/health")
    def health_check() -> dict[str, str]:
        """Return a simple health check response.

        This endpoint can be used by deployment platforms to verify
        that the application has started correctly.
        """
        return {"status": "ok"}

    return app
