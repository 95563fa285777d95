"""Shared fixtures for the file storage service tests."""

from datetime import datetime, timezone
from typing import BinaryIO

import pytest
from fastapi.testclient import TestClient

from filestorage_api.app import create_app
from filestorage_api.config import AppConfig, S3Config, UploadConfig
from filestorage_api.exceptions import (
    BackendUnavailableError,
    ObjectNotFoundError,
    StreamAbortedError,
    UploadAbortedError,
)
from filestorage_api.interfaces import ObjectSummary, StorageClient, StoredObject

TEST_MAX_FILE_SIZE = 1024


class InMemoryStorage(StorageClient):
    """
    Dict-backed storage that behaves like the real backend on uploads:
    an object only appears after its stream was read to a clean EOF.
    """

    def __init__(self):
        self.objects: dict[str, tuple[bytes, str, datetime]] = {}
        self.failing: set[str] = set()
        self.puts_before_failure: int | None = None
        self.deleted: list[str] = []

    def _check(self, operation: str) -> None:
        if operation in self.failing:
            raise BackendUnavailableError(operation, ConnectionError("backend down"))

    def list_objects(self) -> list[ObjectSummary]:
        self._check("list_objects")
        return [
            ObjectSummary(key=key, last_modified=modified)
            for key, (_, _, modified) in self.objects.items()
        ]

    def put_object(self, object_name: str, data: BinaryIO, content_type: str) -> None:
        self._check("put_object")
        if self.puts_before_failure is not None:
            if self.puts_before_failure == 0:
                raise BackendUnavailableError("put_object", ConnectionError("reset"))
            self.puts_before_failure -= 1

        buffer = bytearray()
        try:
            while chunk := data.read(100):
                buffer.extend(chunk)
        except UploadAbortedError as e:
            raise StreamAbortedError(object_name, e) from e
        self.objects[object_name] = (
            bytes(buffer),
            content_type,
            datetime.now(timezone.utc),
        )

    def get_object(self, object_name: str) -> StoredObject:
        self._check("get_object")
        if object_name not in self.objects:
            raise ObjectNotFoundError(object_name)
        content, content_type, _ = self.objects[object_name]
        return StoredObject(
            key=object_name,
            body=iter([content[i : i + 4] for i in range(0, len(content), 4)]),
            content_type=content_type,
            content_length=len(content),
        )

    def delete_object(self, object_name: str) -> None:
        self._check("delete_object")
        self.objects.pop(object_name, None)
        self.deleted.append(object_name)

    def ensure_bucket(self, create: bool = False) -> None:
        self._check("ensure_bucket")


def make_config(**upload_overrides) -> AppConfig:
    upload = {"max_file_size": TEST_MAX_FILE_SIZE, "chunk_size": 64, "pipe_capacity": 2}
    upload.update(upload_overrides)
    return AppConfig(
        s3=S3Config(region="us-east-1", bucket_name="test-bucket"),
        upload=UploadConfig(**upload),
    )


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def config() -> AppConfig:
    return make_config()


@pytest.fixture
def client(storage, config) -> TestClient:
    return TestClient(create_app(config, storage))
