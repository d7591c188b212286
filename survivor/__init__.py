import logging
import os

from flask import Flask, jsonify, request
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from config import config

logger = logging.getLogger(__name__)

db = SQLAlchemy()
login_manager = LoginManager()
cache = Cache()
migrate = Migrate()


def get_real_ip():
    """
    Get the real client IP address, accounting for reverse proxies.
    Checks X-Forwarded-For, X-Real-IP, and falls back to remote_addr.
    """
    # X-Forwarded-For: client, proxy1, proxy2, ...
    if request.headers.get("X-Forwarded-For"):
        return request.headers.get("X-Forwarded-For").split(",")[0].strip()
    if request.headers.get("X-Real-IP"):
        return request.headers.get("X-Real-IP")
    return get_remote_address()


limiter = Limiter(
    key_func=get_real_ip,
    default_limits=["10000 per day", "1000 per hour"],
)


def create_app(config_name=None, clock=None):
    app = Flask(__name__)

    # Determine configuration
    if config_name is None:
        config_name = os.environ.get("FLASK_CONFIG", "default")

    app.config.from_object(config[config_name]())
    app.json.sort_keys = False

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    cache.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    # Tokens are verified on every request, nothing is kept in the session
    login_manager.session_protection = None

    from survivor.utils.clock import init_clock

    init_clock(app, clock)

    from survivor import auth  # noqa: F401 - registers the request loader

    # Import and register blueprints
    from survivor.routes.auth import bp as auth_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")

    from survivor.routes.api import bp as api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    from survivor.routes.admin import bp as admin_bp

    app.register_blueprint(admin_bp, url_prefix="/api/admin")

    # Register error handlers
    register_error_handlers(app)

    # Setup logging
    from survivor.utils.logging_config import setup_logging

    setup_logging(app)

    # Create database tables
    with app.app_context():
        db.create_all()

    return app


def no_store(response):
    """Mark a response as never cacheable by clients or proxies"""
    response.headers["Cache-Control"] = (
        "no-store, no-cache, must-revalidate, proxy-revalidate"
    )
    response.headers["Pragma"] = "no-cache"
    response.headers["Expires"] = "0"
    return response


def register_error_handlers(app):
    """Register global error handlers"""
    from survivor.errors import Internal, PoolError

    @app.after_request
    def after_request(response):
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if not app.config.get("DEBUG") and not app.config.get("TESTING"):
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response

    @app.errorhandler(PoolError)
    def handle_pool_error(error):
        if isinstance(error, Internal):
            app.logger.error(
                f"Internal error on {request.method} {request.path}: {error.context}"
            )
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        details = [
            {
                "field": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
            }
            for err in error.errors()
        ]
        return (
            jsonify({"error": "Invalid request", "code": "validation", "details": details}),
            400,
        )

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        if error.code == 400:
            app.logger.warning(
                f"400 Bad Request: {error.description} - Path: {request.path} - Method: {request.method}"
            )
        return jsonify({"error": error.name, "code": "http"}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        db.session.rollback()
        app.logger.exception(
            f"Unhandled error on {request.method} {request.path}: {error}"
        )
        return jsonify({"error": "Internal server error", "code": "internal"}), 500


from survivor import models  # noqa: F401, E402 - imported for model registration
