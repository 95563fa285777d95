"""Domain models for streamed uploads."""

from enum import Enum

from pydantic import BaseModel


class UploadStatus(str, Enum):
    """Terminal state of a single upload session."""

    COMPLETED = "completed"
    SIZE_EXCEEDED = "size_exceeded"
    READ_ERROR = "read_error"


class UploadSession(BaseModel, frozen=True):
    """Outcome of streaming one file part into storage."""

    file_name: str
    object_name: str
    bytes_read: int
    status: UploadStatus
