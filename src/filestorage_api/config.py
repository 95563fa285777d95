"""Application configuration loaded from environment variables."""

import os
from typing import Literal

from pydantic import BaseModel, Field

from filestorage_api.exceptions import ConfigurationMissingError

MIB = 1024 * 1024


class S3Config(BaseModel, frozen=True):
    """S3-compatible backend configuration."""

    region: str
    bucket_name: str
    endpoint: str | None = None
    force_path_style: bool = False
    access_key: str | None = None
    secret_key: str | None = None
    create_bucket: bool = False
    connect_timeout: float = Field(default=300.0, gt=0)
    read_timeout: float = Field(default=300.0, gt=0)


class UploadConfig(BaseModel, frozen=True):
    """Limits applied to streamed uploads."""

    max_file_size: int = Field(default=50 * MIB, gt=0)
    chunk_size: int = Field(default=32 * 1024, gt=0)
    part_size: int = Field(default=10 * MIB, ge=5 * MIB)
    pipe_capacity: int = Field(default=16, gt=0)
    rollback_on_failure: bool = True


class ServerConfig(BaseModel, frozen=True):
    """HTTP listener configuration."""

    host: str = "0.0.0.0"
    port: int = Field(default=8080, gt=0, lt=65536)
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    tracing_enabled: bool = False


class AppConfig(BaseModel, frozen=True):
    """Root application configuration."""

    s3: S3Config
    upload: UploadConfig = UploadConfig()
    server: ServerConfig = ServerConfig()


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if not value:
        return default
    return value.strip().lower() == "true"


def _env_or_none(name: str) -> str | None:
    return os.getenv(name) or None


def load_config() -> AppConfig:
    """
    Loads configuration from environment variables.

    Raises:
        ConfigurationMissingError: If S3_REGION or S3_BUCKET is not set.
        pydantic.ValidationError: If a numeric setting is malformed or out of range.
    """
    region = os.getenv("S3_REGION", "")
    bucket = os.getenv("S3_BUCKET", "")
    missing = [
        name for name, value in (("S3_REGION", region), ("S3_BUCKET", bucket))
        if not value
    ]
    if missing:
        raise ConfigurationMissingError(missing)

    return AppConfig(
        s3=S3Config(
            region=region,
            bucket_name=bucket,
            endpoint=_env_or_none("AWS_ENDPOINT"),
            force_path_style=_env_flag("AWS_S3_FORCE_PATH_STYLE"),
            access_key=_env_or_none("AWS_ACCESS_KEY_ID"),
            secret_key=_env_or_none("AWS_SECRET_ACCESS_KEY"),
            create_bucket=_env_flag("S3_CREATE_BUCKET"),
            connect_timeout=os.getenv("S3_CONNECT_TIMEOUT", "300"),
            read_timeout=os.getenv("S3_READ_TIMEOUT", "300"),
        ),
        upload=UploadConfig(
            max_file_size=os.getenv("MAX_UPLOAD_SIZE_BYTES", str(50 * MIB)),
            chunk_size=os.getenv("UPLOAD_CHUNK_SIZE_BYTES", str(32 * 1024)),
            part_size=os.getenv("UPLOAD_PART_SIZE_BYTES", str(10 * MIB)),
            pipe_capacity=os.getenv("UPLOAD_PIPE_CAPACITY", "16"),
            rollback_on_failure=_env_flag("UPLOAD_ROLLBACK_ON_FAILURE", default=True),
        ),
        server=ServerConfig(
            host=os.getenv("HOST", "0.0.0.0"),
            port=os.getenv("PORT", "8080"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            tracing_enabled=_env_flag("TRACING_ENABLED"),
        ),
    )
