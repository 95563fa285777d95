"""Size-bounded streaming of uploaded files into storage."""

import logging
import os
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import BinaryIO

from filestorage_api.config import UploadConfig
from filestorage_api.exceptions import (
    PipeClosedError,
    SizeExceededError,
    StreamAbortedError,
    UploadReadError,
)
from filestorage_api.interfaces import StorageClient

from .models import UploadSession, UploadStatus
from .pipe import BoundedPipe

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def base_name(file_name: str | None) -> str:
    """Returns the final path component of a client-supplied filename."""
    if not file_name:
        return ""
    return os.path.basename(file_name.replace("\\", "/"))


def generate_object_key(file_name: str) -> str:
    """Mints a fresh key of the form ``<uuid4>_<basename>``."""
    return f"{uuid.uuid4()}_{base_name(file_name)}"


class BoundedUploader:
    """
    Streams uploaded files into storage without buffering them whole.

    Each call to ``upload`` runs one producer thread that copies the source
    into a ``BoundedPipe`` chunk by chunk, while the calling thread hands the
    pipe's reader end to ``StorageClient.put_object``. The producer aborts the
    pipe the moment the running byte count passes ``max_file_size``, so the
    put fails and no object is left behind.
    """

    def __init__(self, storage: StorageClient, config: UploadConfig):
        self._storage = storage
        self._config = config

    @property
    def max_file_size(self) -> int:
        return self._config.max_file_size

    def upload(
        self,
        file_name: str,
        source: BinaryIO,
        content_type: str | None = None,
    ) -> UploadSession:
        """
        Uploads one file under a newly generated key.

        Args:
            file_name: Client-supplied filename.
            source: Readable stream with the file content.
            content_type: MIME type declared by the client.

        Returns:
            The completed UploadSession.

        Raises:
            SizeExceededError: If the file is larger than the ceiling.
            UploadReadError: If reading the source fails.
            BackendUnavailableError: If storage rejected the upload.
        """
        object_name = generate_object_key(file_name)
        pipe = BoundedPipe(self._config.pipe_capacity)

        with ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="upload-producer"
        ) as executor:
            producer = executor.submit(self._produce, file_name, source, pipe)
            try:
                self._storage.put_object(
                    object_name, pipe, content_type or DEFAULT_CONTENT_TYPE
                )
            except StreamAbortedError as e:
                session = self._session(file_name, object_name, producer.result())
                logger.warning(
                    "Upload aborted",
                    extra={**session.model_dump(mode="json"), "reason": str(e.cause)},
                )
                raise e.cause from e
            finally:
                pipe.close_reader()

        session = self._session(file_name, object_name, producer.result())
        logger.info("Upload completed", extra=session.model_dump(mode="json"))
        return session

    def rollback(self, object_names: list[str]) -> list[str]:
        """
        Deletes objects written earlier in a failed batch.

        Failures are logged and skipped so every key gets an attempt.

        Returns:
            The keys that could not be deleted.
        """
        leftovers = []
        for object_name in object_names:
            try:
                self._storage.delete_object(object_name)
                logger.info("Rolled back upload", extra={"object_name": object_name})
            except Exception:
                logger.exception(
                    "Rollback delete failed", extra={"object_name": object_name}
                )
                leftovers.append(object_name)
        return leftovers

    def _produce(
        self, file_name: str, source: BinaryIO, pipe: BoundedPipe
    ) -> tuple[int, UploadStatus]:
        """Copies ``source`` into ``pipe``, enforcing the size ceiling."""
        limit = self._config.max_file_size
        total = 0
        try:
            while True:
                try:
                    chunk = source.read(self._config.chunk_size)
                except Exception as e:
                    pipe.close(UploadReadError(file_name, e))
                    return total, UploadStatus.READ_ERROR
                if not chunk:
                    break
                total += len(chunk)
                if total > limit:
                    pipe.close(SizeExceededError(file_name, limit))
                    return total, UploadStatus.SIZE_EXCEEDED
                pipe.write(chunk)
        except PipeClosedError:
            logger.info(
                "Upload consumer stopped reading",
                extra={"file_name": file_name, "bytes_read": total},
            )
            return total, UploadStatus.READ_ERROR
        pipe.close()
        return total, UploadStatus.COMPLETED

    @staticmethod
    def _session(
        file_name: str, object_name: str, result: tuple[int, UploadStatus]
    ) -> UploadSession:
        bytes_read, status = result
        return UploadSession(
            file_name=file_name,
            object_name=object_name,
            bytes_read=bytes_read,
            status=status,
        )
