"""File endpoints: list, upload, download and delete.

Authentication happens upstream; the gateway forwards the caller identity in
``X-User-Preferred-Username``, which is only used for logging here.
"""

import logging
from collections.abc import Iterator
from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from fastapi.responses import StreamingResponse

from filestorage_api.config import AppConfig
from filestorage_api.dependencies import (
    get_config,
    get_storage,
    get_uploader,
    get_username,
)
from filestorage_api.domain import BoundedUploader, base_name
from filestorage_api.exceptions import (
    BackendUnavailableError,
    ObjectNotFoundError,
    SizeExceededError,
    UploadReadError,
)
from filestorage_api.interfaces import StorageClient, StoredObject
from filestorage_api.response_models import ErrorResponse, FileInfo, UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["Files"])

StorageDep = Annotated[StorageClient, Depends(get_storage)]
UploaderDep = Annotated[BoundedUploader, Depends(get_uploader)]
ConfigDep = Annotated[AppConfig, Depends(get_config)]
UsernameDep = Annotated[str, Depends(get_username)]


@router.get(
    "",
    response_model=list[FileInfo],
    responses={500: {"model": ErrorResponse}},
)
def list_files(storage: StorageDep, username: UsernameDep) -> list[FileInfo]:
    """Lists all available files in the bucket."""
    try:
        objects = storage.list_objects()
    except BackendUnavailableError:
        logger.error("Error listing files", extra={"user": username})
        raise HTTPException(status_code=500, detail="Failed to list files from storage.")

    files = [
        FileInfo(
            filename=obj.key,
            path=f"/files/{obj.key}",
            uploaded_at=obj.last_modified,
        )
        for obj in objects
        if not obj.key.endswith("/")
    ]
    logger.info("Files listed successfully", extra={"user": username, "count": len(files)})
    return files


@router.post(
    "",
    status_code=201,
    response_model=UploadResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def upload_files(
    uploader: UploaderDep,
    config: ConfigDep,
    username: UsernameDep,
    files: Annotated[
        list[UploadFile] | None, File(description="Files to upload")
    ] = None,
) -> UploadResponse:
    """
    Uploads one or more files.

    Files are streamed one at a time in the order submitted. Each is stored
    under a fresh ``<uuid>_<filename>`` key. If any file fails, the request
    fails; keys stored earlier in the same request are deleted unless
    rollback is disabled.
    """
    if not files:
        raise HTTPException(status_code=400, detail="No files provided for upload.")

    uploaded: list[str] = []
    for file in files:
        if not base_name(file.filename):
            logger.warning(
                "Received an uploaded file without a filename",
                extra={"user": username},
            )
            continue

        try:
            session = uploader.upload(file.filename, file.file, file.content_type)
        except SizeExceededError as e:
            _abandon_batch(uploader, config, uploaded, username)
            raise HTTPException(status_code=413, detail=str(e))
        except UploadReadError as e:
            logger.error(
                "Error reading uploaded file",
                extra={"file_name": e.file_name, "user": username},
            )
            _abandon_batch(uploader, config, uploaded, username)
            raise HTTPException(
                status_code=500, detail=f"Could not read file '{e.file_name}'"
            )
        except BackendUnavailableError:
            logger.error(
                "Failed to upload file",
                extra={"file_name": file.filename, "user": username},
            )
            _abandon_batch(uploader, config, uploaded, username)
            raise HTTPException(
                status_code=500, detail=f"Could not upload file '{file.filename}'"
            )

        uploaded.append(session.object_name)
        logger.info(
            "File uploaded successfully",
            extra={
                "file_name": file.filename,
                "object_name": session.object_name,
                "size": session.bytes_read,
                "user": username,
            },
        )

    return UploadResponse(
        message="Files uploaded successfully", uploaded_files=uploaded
    )


@router.get(
    "/{filename}",
    response_class=StreamingResponse,
    responses={
        200: {"content": {"application/octet-stream": {}}, "description": "File content"},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def get_file(
    filename: str, storage: StorageDep, username: UsernameDep
) -> StreamingResponse:
    """Retrieves a specific file by its key and streams it to the client."""
    try:
        stored = storage.get_object(filename)
    except ObjectNotFoundError:
        logger.info(
            "Attempted to access non-existent file",
            extra={"object_name": filename, "user": username},
        )
        raise HTTPException(status_code=404, detail=f"File '{filename}' not found.")
    except BackendUnavailableError:
        logger.error(
            "Error getting file", extra={"object_name": filename, "user": username}
        )
        raise HTTPException(status_code=500, detail="Failed to retrieve file.")

    headers = {
        "Content-Type": stored.content_type,
        "Content-Disposition": _content_disposition(filename),
    }
    if stored.content_length is not None:
        headers["Content-Length"] = str(stored.content_length)

    logger.info("Serving file", extra={"object_name": filename, "user": username})
    return StreamingResponse(_stream_to_client(stored, username), headers=headers)


@router.delete(
    "/{filename}",
    status_code=204,
    response_class=Response,
    responses={500: {"model": ErrorResponse}},
)
def delete_file(filename: str, storage: StorageDep, username: UsernameDep) -> Response:
    """Deletes a specific file by its key. Deleting an absent key succeeds."""
    try:
        storage.delete_object(filename)
    except BackendUnavailableError:
        logger.error(
            "Error deleting file", extra={"object_name": filename, "user": username}
        )
        raise HTTPException(
            status_code=500, detail=f"Could not delete file '{filename}'."
        )

    logger.info(
        "File deleted successfully", extra={"object_name": filename, "user": username}
    )
    return Response(status_code=204)


def _abandon_batch(
    uploader: BoundedUploader,
    config: AppConfig,
    uploaded: list[str],
    username: str,
) -> None:
    """Handles keys already stored by a request that is about to fail."""
    if not uploaded:
        return
    if not config.upload.rollback_on_failure:
        logger.warning(
            "Upload batch failed, earlier files kept",
            extra={"object_names": uploaded, "user": username},
        )
        return
    leftovers = uploader.rollback(uploaded)
    logger.warning(
        "Upload batch failed, earlier files rolled back",
        extra={
            "object_names": uploaded,
            "not_deleted": leftovers,
            "user": username,
        },
    )


def _content_disposition(filename: str) -> str:
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


def _stream_to_client(stored: StoredObject, username: str) -> Iterator[bytes]:
    # Headers are already sent once iteration starts; failures can only be logged.
    try:
        yield from stored.body
    except Exception:
        logger.exception(
            "Error streaming file to client",
            extra={"object_name": stored.key, "user": username},
        )
