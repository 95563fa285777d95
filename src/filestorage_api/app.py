"""FastAPI application factory."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from filestorage_api.config import AppConfig
from filestorage_api.interfaces import StorageClient
from filestorage_api.middleware import log_requests, recover_errors
from filestorage_api.routes import files_router, general_router


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = "; ".join(str(error.get("msg", "invalid value")) for error in exc.errors())
    return JSONResponse(
        status_code=400, content={"detail": f"Malformed request: {messages}"}
    )


def create_app(config: AppConfig, storage: StorageClient) -> FastAPI:
    """
    Builds the application around an already configured storage client.

    Args:
        config: Loaded application configuration.
        storage: Storage backend shared by all requests.
    """
    app = FastAPI(
        title="File Storage Service API",
        version="1.0",
        description=(
            "A simple microservice for storing and retrieving files, "
            "with S3/MinIO backend."
        ),
        docs_url="/swagger/index.html",
        openapi_url="/swagger/doc.json",
        redoc_url=None,
    )
    app.state.config = config
    app.state.storage = storage

    # Last added runs first: CORS, then logging, then recovery.
    app.add_middleware(BaseHTTPMiddleware, dispatch=recover_errors)
    app.add_middleware(BaseHTTPMiddleware, dispatch=log_requests)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(general_router)
    app.include_router(files_router)
    return app
