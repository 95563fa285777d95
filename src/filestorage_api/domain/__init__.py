"""Domain layer exports."""

from .models import UploadSession, UploadStatus
from .pipe import BoundedPipe
from .uploader import BoundedUploader, base_name, generate_object_key

__all__ = [
    "BoundedPipe",
    "BoundedUploader",
    "UploadSession",
    "UploadStatus",
    "base_name",
    "generate_object_key",
]
