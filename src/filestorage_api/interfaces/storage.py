"""Abstract interface for object storage operations."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO

from pydantic import BaseModel


class ObjectSummary(BaseModel, frozen=True):
    """A single entry of a bucket listing."""

    key: str
    last_modified: datetime | None = None


@dataclass(frozen=True)
class StoredObject:
    """An object opened for reading, with its body as a chunk iterator."""

    key: str
    body: Iterator[bytes]
    content_type: str = "application/octet-stream"
    content_length: int | None = None


class StorageClient(ABC):
    """Abstract base class for the object store backing the service."""

    @abstractmethod
    def list_objects(self) -> list[ObjectSummary]:
        """
        Lists every object in the configured bucket, in backend order.

        Raises:
            BackendUnavailableError: If the listing fails.
        """

    @abstractmethod
    def put_object(
        self,
        object_name: str,
        data: BinaryIO,
        content_type: str,
    ) -> None:
        """
        Uploads a stream of unknown length.

        The call returns only after the backend accepted every byte. If
        ``data.read`` raises an ``UploadAbortedError`` the object must not
        become visible.

        Args:
            object_name: The destination key.
            data: Readable stream, consumed until it returns ``b""``.
            content_type: MIME type stored with the object.

        Raises:
            StreamAbortedError: If the input stream signalled an error.
            BackendUnavailableError: If the backend rejected the upload.
        """

    @abstractmethod
    def get_object(self, object_name: str) -> StoredObject:
        """
        Opens an object for streaming.

        Raises:
            ObjectNotFoundError: If the key does not exist.
            BackendUnavailableError: For any other failure.
        """

    @abstractmethod
    def delete_object(self, object_name: str) -> None:
        """
        Deletes an object. Deleting an absent key succeeds.

        Raises:
            BackendUnavailableError: If the backend rejected the delete.
        """

    @abstractmethod
    def ensure_bucket(self, create: bool = False) -> None:
        """
        Verifies the configured bucket is reachable.

        Args:
            create: Create the bucket when it does not exist.

        Raises:
            BackendUnavailableError: If the bucket is missing or unreachable.
        """
