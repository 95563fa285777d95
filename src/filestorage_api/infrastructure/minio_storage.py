"""MinIO implementation of the StorageClient interface."""

import logging
from collections.abc import Iterator
from typing import BinaryIO

from minio import Minio
from minio.error import S3Error

from filestorage_api.exceptions import (
    BackendUnavailableError,
    ObjectNotFoundError,
    StreamAbortedError,
    UploadAbortedError,
)
from filestorage_api.interfaces import ObjectSummary, StorageClient, StoredObject

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {"NoSuchKey", "NoSuchObject"}


class MinioStorage(StorageClient):
    """Handles object storage operations against an S3-compatible backend."""

    def __init__(
        self,
        client: Minio,
        bucket_name: str,
        part_size: int = 10 * 1024 * 1024,
        chunk_size: int = 32 * 1024,
    ):
        self._client = client
        self._bucket_name = bucket_name
        self._part_size = part_size
        self._chunk_size = chunk_size

    def list_objects(self) -> list[ObjectSummary]:
        try:
            objects = [
                ObjectSummary(key=obj.object_name, last_modified=obj.last_modified)
                for obj in self._client.list_objects(self._bucket_name, recursive=True)
            ]
        except Exception as e:
            logger.exception(
                "MinIO list failed", extra={"bucket_name": self._bucket_name}
            )
            raise BackendUnavailableError("list_objects", e) from e
        logger.info(
            "Objects listed from MinIO",
            extra={"bucket_name": self._bucket_name, "count": len(objects)},
        )
        return objects

    def put_object(
        self,
        object_name: str,
        data: BinaryIO,
        content_type: str,
    ) -> None:
        # Unknown length forces a multipart upload; the SDK aborts it when
        # reading the stream raises, so a failed stream leaves no object.
        try:
            self._client.put_object(
                bucket_name=self._bucket_name,
                object_name=object_name,
                data=data,
                length=-1,
                part_size=self._part_size,
                content_type=content_type,
            )
        except UploadAbortedError as e:
            logger.info(
                "MinIO upload aborted by input stream",
                extra={"object_name": object_name, "reason": str(e)},
            )
            raise StreamAbortedError(object_name, e) from e
        except Exception as e:
            # The SDK raises its own abort failure in place of the stream error.
            aborted = _find_upload_abort(e)
            if aborted is not None:
                logger.exception(
                    "MinIO multipart abort failed after input stream aborted",
                    extra={"object_name": object_name, "reason": str(aborted)},
                )
                raise StreamAbortedError(object_name, aborted) from e
            logger.exception(
                "MinIO upload failed",
                extra={"bucket_name": self._bucket_name, "object_name": object_name},
            )
            raise BackendUnavailableError("put_object", e) from e
        logger.info(
            "File uploaded to MinIO",
            extra={"bucket_name": self._bucket_name, "object_name": object_name},
        )

    def get_object(self, object_name: str) -> StoredObject:
        try:
            response = self._client.get_object(self._bucket_name, object_name)
        except S3Error as e:
            if e.code in NOT_FOUND_CODES:
                raise ObjectNotFoundError(object_name) from e
            logger.exception(
                "MinIO download failed",
                extra={"bucket_name": self._bucket_name, "object_name": object_name},
            )
            raise BackendUnavailableError("get_object", e) from e
        except Exception as e:
            logger.exception(
                "MinIO download failed",
                extra={"bucket_name": self._bucket_name, "object_name": object_name},
            )
            raise BackendUnavailableError("get_object", e) from e

        content_length = response.headers.get("Content-Length")
        return StoredObject(
            key=object_name,
            body=self._iter_body(response),
            content_type=response.headers.get(
                "Content-Type", "application/octet-stream"
            ),
            content_length=int(content_length) if content_length else None,
        )

    def delete_object(self, object_name: str) -> None:
        try:
            self._client.remove_object(self._bucket_name, object_name)
        except S3Error as e:
            if e.code in NOT_FOUND_CODES:
                logger.info(
                    "Delete of absent object ignored",
                    extra={"object_name": object_name},
                )
                return
            logger.exception(
                "MinIO delete failed",
                extra={"bucket_name": self._bucket_name, "object_name": object_name},
            )
            raise BackendUnavailableError("delete_object", e) from e
        except Exception as e:
            logger.exception(
                "MinIO delete failed",
                extra={"bucket_name": self._bucket_name, "object_name": object_name},
            )
            raise BackendUnavailableError("delete_object", e) from e
        logger.info(
            "File deleted from MinIO",
            extra={"bucket_name": self._bucket_name, "object_name": object_name},
        )

    def ensure_bucket(self, create: bool = False) -> None:
        try:
            exists = self._client.bucket_exists(self._bucket_name)
            if not exists and create:
                self._client.make_bucket(self._bucket_name)
                logger.info("Bucket created", extra={"bucket_name": self._bucket_name})
                return
        except Exception as e:
            logger.exception(
                "MinIO bucket check failed", extra={"bucket_name": self._bucket_name}
            )
            raise BackendUnavailableError("ensure_bucket", e) from e

        if not exists:
            raise BackendUnavailableError(
                "ensure_bucket",
                LookupError(f"Bucket '{self._bucket_name}' does not exist"),
            )
        logger.info("Bucket already exists", extra={"bucket_name": self._bucket_name})

    def _iter_body(self, response) -> Iterator[bytes]:
        """Yields the object body, releasing the connection when done."""
        try:
            yield from response.stream(self._chunk_size)
        finally:
            response.close()
            response.release_conn()


def _find_upload_abort(exc: BaseException) -> UploadAbortedError | None:
    """Returns the UploadAbortedError an exception was raised while handling."""
    seen = set()
    current = exc.__cause__ or exc.__context__
    while current is not None and id(current) not in seen:
        if isinstance(current, UploadAbortedError):
            return current
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return None
