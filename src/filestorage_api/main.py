"""Entry point for the file storage service."""

import logging
import sys

import uvicorn
from ddtrace import patch
from pydantic import ValidationError

from filestorage_api.app import create_app
from filestorage_api.config import load_config
from filestorage_api.dependencies import build_storage
from filestorage_api.exceptions import BackendUnavailableError, ConfigurationMissingError
from filestorage_api.logging import setup_logging

logger = logging.getLogger(__name__)


def main():
    """Loads configuration, checks the backend and serves until terminated."""
    try:
        config = load_config()
    except (ConfigurationMissingError, ValidationError) as e:
        setup_logging()
        logger.critical("Invalid configuration", extra={"error": str(e)})
        sys.exit(1)

    setup_logging(config.server.log_level)

    if config.server.tracing_enabled:
        patch(fastapi=True, urllib3=True)
        logger.info("Tracing enabled")

    storage = build_storage(config)
    try:
        storage.ensure_bucket(create=config.s3.create_bucket)
    except BackendUnavailableError as e:
        logger.critical(
            "Storage backend unavailable at startup",
            extra={"bucket_name": config.s3.bucket_name, "error": str(e.cause)},
        )
        sys.exit(1)

    app = create_app(config, storage)
    logger.info(
        "Starting File Storage Service",
        extra={"host": config.server.host, "port": config.server.port},
    )
    uvicorn.run(app, host=config.server.host, port=config.server.port, log_config=None)


if __name__ == "__main__":
    main()
