"""Storage client construction and FastAPI dependency injection."""

import logging
import os
from typing import Annotated
from urllib.parse import urlparse

import certifi
import urllib3
from fastapi import Depends, Header, Request
from minio import Minio
from minio.credentials import (
    AWSConfigProvider,
    ChainedProvider,
    EnvAWSProvider,
    EnvMinioProvider,
    IamAwsProvider,
)

from filestorage_api.config import AppConfig, S3Config
from filestorage_api.domain import BoundedUploader
from filestorage_api.infrastructure import MinioStorage
from filestorage_api.interfaces import StorageClient

logger = logging.getLogger(__name__)

AWS_S3_ENDPOINT = "s3.amazonaws.com"
UNKNOWN_USER = "N/A (no X-User-Preferred-Username header)"


def _http_client(config: S3Config) -> urllib3.PoolManager:
    """Builds the HTTP pool used by the SDK, with configurable timeouts."""
    return urllib3.PoolManager(
        timeout=urllib3.util.Timeout(
            connect=config.connect_timeout, read=config.read_timeout
        ),
        maxsize=10,
        cert_reqs="CERT_REQUIRED",
        ca_certs=os.environ.get("SSL_CERT_FILE") or certifi.where(),
        retries=urllib3.Retry(
            total=5,
            backoff_factor=0.2,
            status_forcelist=[500, 502, 503, 504],
        ),
    )


def build_minio_client(config: S3Config) -> Minio:
    """
    Creates a MinIO SDK client for AWS S3 or a custom S3-compatible endpoint.

    Static credentials are used when both keys are configured, otherwise the
    standard environment / shared-config / IAM provider chain.
    """
    endpoint = AWS_S3_ENDPOINT
    secure = True
    if config.endpoint:
        parsed = urlparse(config.endpoint)
        if parsed.scheme:
            endpoint = parsed.netloc
            secure = parsed.scheme == "https"
        else:
            endpoint = config.endpoint
        logger.info("Using S3 endpoint", extra={"endpoint": config.endpoint})

    credentials = None
    if not (config.access_key and config.secret_key):
        credentials = ChainedProvider(
            [EnvAWSProvider(), EnvMinioProvider(), AWSConfigProvider(), IamAwsProvider()]
        )

    client = Minio(
        endpoint=endpoint,
        access_key=config.access_key if credentials is None else None,
        secret_key=config.secret_key if credentials is None else None,
        secure=secure,
        region=config.region,
        http_client=_http_client(config),
        credentials=credentials,
    )

    if config.force_path_style:
        client.disable_virtual_style_endpoint()
        logger.info("S3 force path style enabled")

    return client


def build_storage(config: AppConfig) -> StorageClient:
    """Returns the storage client for the configured bucket."""
    return MinioStorage(
        build_minio_client(config.s3),
        config.s3.bucket_name,
        part_size=config.upload.part_size,
        chunk_size=config.upload.chunk_size,
    )


def get_config(request: Request) -> AppConfig:
    """Returns the configuration the application was created with."""
    return request.app.state.config


def get_storage(request: Request) -> StorageClient:
    """Returns the storage client attached to the application."""
    return request.app.state.storage


def get_uploader(
    storage: Annotated[StorageClient, Depends(get_storage)],
    config: Annotated[AppConfig, Depends(get_config)],
) -> BoundedUploader:
    """Returns an uploader bound to the configured storage and limits."""
    return BoundedUploader(storage, config.upload)


def get_username(
    x_user_preferred_username: Annotated[str | None, Header()] = None,
) -> str:
    """Returns the caller identity forwarded by the gateway, for logging."""
    return x_user_preferred_username or UNKNOWN_USER
