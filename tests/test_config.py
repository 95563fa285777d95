import pytest
from pydantic import ValidationError

from filestorage_api.config import MIB, load_config
from filestorage_api.exceptions import ConfigurationMissingError

ENV_VARS = [
    "S3_REGION",
    "S3_BUCKET",
    "PORT",
    "HOST",
    "AWS_ENDPOINT",
    "AWS_S3_FORCE_PATH_STYLE",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "S3_CREATE_BUCKET",
    "MAX_UPLOAD_SIZE_BYTES",
    "UPLOAD_PART_SIZE_BYTES",
    "UPLOAD_ROLLBACK_ON_FAILURE",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_missing_region_and_bucket(monkeypatch):
    with pytest.raises(ConfigurationMissingError) as exc_info:
        load_config()

    assert exc_info.value.names == ["S3_REGION", "S3_BUCKET"]


def test_missing_bucket_only(monkeypatch):
    monkeypatch.setenv("S3_REGION", "eu-west-1")

    with pytest.raises(ConfigurationMissingError) as exc_info:
        load_config()

    assert exc_info.value.names == ["S3_BUCKET"]


def test_defaults(monkeypatch):
    monkeypatch.setenv("S3_REGION", "eu-west-1")
    monkeypatch.setenv("S3_BUCKET", "files")

    config = load_config()

    assert config.s3.region == "eu-west-1"
    assert config.s3.bucket_name == "files"
    assert config.s3.endpoint is None
    assert config.s3.force_path_style is False
    assert config.server.port == 8080
    assert config.upload.max_file_size == 50 * MIB
    assert config.upload.chunk_size == 32 * 1024
    assert config.upload.rollback_on_failure is True


def test_minio_deployment(monkeypatch):
    monkeypatch.setenv("S3_REGION", "us-east-1")
    monkeypatch.setenv("S3_BUCKET", "files")
    monkeypatch.setenv("PORT", "9090")
    monkeypatch.setenv("AWS_ENDPOINT", "http://minio:9000")
    monkeypatch.setenv("AWS_S3_FORCE_PATH_STYLE", "TRUE")
    monkeypatch.setenv("MAX_UPLOAD_SIZE_BYTES", "1000")
    monkeypatch.setenv("UPLOAD_ROLLBACK_ON_FAILURE", "false")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = load_config()

    assert config.s3.endpoint == "http://minio:9000"
    assert config.s3.force_path_style is True
    assert config.server.port == 9090
    assert config.server.log_level == "DEBUG"
    assert config.upload.max_file_size == 1000
    assert config.upload.rollback_on_failure is False


def test_part_size_below_backend_minimum_is_rejected(monkeypatch):
    monkeypatch.setenv("S3_REGION", "us-east-1")
    monkeypatch.setenv("S3_BUCKET", "files")
    monkeypatch.setenv("UPLOAD_PART_SIZE_BYTES", "1024")

    with pytest.raises(ValidationError):
        load_config()


def test_malformed_port_is_rejected(monkeypatch):
    monkeypatch.setenv("S3_REGION", "us-east-1")
    monkeypatch.setenv("S3_BUCKET", "files")
    monkeypatch.setenv("PORT", "http")

    with pytest.raises(ValidationError):
        load_config()


def test_unknown_log_level_is_rejected(monkeypatch):
    monkeypatch.setenv("S3_REGION", "us-east-1")
    monkeypatch.setenv("S3_BUCKET", "files")
    monkeypatch.setenv("LOG_LEVEL", "verbose")

    with pytest.raises(ValidationError):
        load_config()
