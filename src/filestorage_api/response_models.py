"""Response models for the file storage API."""

from datetime import datetime

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Plain informational message."""

    message: str


class HealthResponse(BaseModel):
    """Health check result."""

    status: str


class ErrorResponse(BaseModel):
    """Body returned for every failed request."""

    detail: str


class FileInfo(BaseModel):
    """A stored file as shown in listings."""

    filename: str
    path: str
    uploaded_at: datetime | None = None


class UploadResponse(BaseModel):
    """Response returned after a successful upload."""

    message: str
    uploaded_files: list[str]
