"""Structured JSON logging shared by the application and the uvicorn server."""

import logging
import sys

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "filestorage-api"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s"

# Field names as they appear in the emitted JSON documents.
RENAMED_FIELDS = {"asctime": "timestamp", "levelname": "level", "name": "logger"}

UVICORN_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")


def build_json_handler(stream=None) -> logging.Handler:
    """Returns a stream handler that renders records as one JSON object per line."""
    formatter = jsonlogger.JsonFormatter(
        LOG_FORMAT,
        rename_fields=RENAMED_FIELDS,
        static_fields={"service": SERVICE_NAME},
    )
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)
    return handler


def setup_logging(level: str | int | None = None) -> logging.Logger:
    """
    Routes the root logger and the uvicorn loggers through one JSON handler.

    Every record carries the service name, the caller's ``extra`` fields and,
    when ddtrace log injection is active, the trace and span ids. Calling this
    again replaces the handler instead of adding a second one, so startup can
    log a configuration failure at the default level before the configured
    level is known.

    Args:
        level: Log level name or number. INFO when omitted.

    Returns:
        The configured root logger.
    """
    handler = build_json_handler()

    root_logger = logging.getLogger()
    root_logger.setLevel(level or logging.INFO)
    root_logger.handlers = [handler]

    for logger_name in UVICORN_LOGGERS:
        u_logger = logging.getLogger(logger_name)
        u_logger.setLevel(root_logger.level)
        u_logger.handlers = [handler]
        u_logger.propagate = False

    return root_logger
