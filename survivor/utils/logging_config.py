"""
Logging setup for the survivor pool

Everything goes through the root logger: a console handler, plus rotating
files for the application log and for errors when LOG_TO_FILE is on. Each
record carries the request line and the authenticated user, if any.
"""

import logging
import logging.handlers
import os

from flask import g, has_request_context, request

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
REQUEST_SUFFIX = " [%(method)s %(url)s] [ip=%(remote_addr)s user=%(user_id)s]"

# (file name, level, max bytes, backups, extra format)
FILE_HANDLERS = (
    ("survivor.log", None, 10 * 1024 * 1024, 5, REQUEST_SUFFIX),
    ("errors.log", logging.ERROR, 5 * 1024 * 1024, 3, " [%(pathname)s:%(lineno)d]" + REQUEST_SUFFIX),
)

QUIET_LOGGERS = ("werkzeug", "flask_limiter", "urllib3")


class RequestContextFilter(logging.Filter):
    """Stamp records with the request line and the caller's user id"""

    def filter(self, record):
        record.url = record.method = record.remote_addr = record.user_id = "-"
        if has_request_context():
            record.url = request.path
            record.method = request.method
            record.remote_addr = request.remote_addr
            # Only report a user Flask-Login has already loaded for this request
            user = g.get("_login_user")
            if user is not None and user.is_authenticated:
                record.user_id = user.id
        return True


class ColoredFormatter(logging.Formatter):
    """Console formatter that colours the level name"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.COLORS.get(record.levelname)
        if color is None:
            return super().format(record)

        # Work on a copy so file handlers keep the plain level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def _file_handler(log_dir, filename, level, max_bytes, backups, suffix):
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, filename), maxBytes=max_bytes, backupCount=backups
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(PLAIN_FORMAT + suffix, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(app):
    """
    Configure the root logger from the application config

    Args:
        app: Flask application instance
    """
    level = getattr(logging, app.config.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handlers = []

    if app.config.get("LOG_TO_CONSOLE", True):
        console = logging.StreamHandler()
        console.setLevel(level)
        if app.debug:
            console.setFormatter(
                ColoredFormatter(PLAIN_FORMAT + " [%(filename)s:%(lineno)d]", datefmt="%H:%M:%S")
            )
        else:
            console.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(console)

    if app.config.get("LOG_TO_FILE", True):
        log_dir = app.config.get("LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)
        for filename, file_level, max_bytes, backups, suffix in FILE_HANDLERS:
            handlers.append(
                _file_handler(log_dir, filename, file_level or level, max_bytes, backups, suffix)
            )

    context_filter = RequestContextFilter()
    for handler in handlers:
        handler.addFilter(context_filter)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if app.config.get("SQLALCHEMY_ECHO") else logging.WARNING
    )

    app.logger.info(f"Logging configured - Level: {logging.getLevelName(level)}")
