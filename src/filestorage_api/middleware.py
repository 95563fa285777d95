"""HTTP middleware: request logging and error recovery."""

import logging
import time

from fastapi import Request
from fastapi.responses import JSONResponse

from filestorage_api.dependencies import UNKNOWN_USER

logger = logging.getLogger(__name__)


async def log_requests(request: Request, call_next):
    """Logs method, path, status, latency and caller for every request."""
    start = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "Request handled",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            "user": request.headers.get("X-User-Preferred-Username", UNKNOWN_USER),
        },
    )
    return response


async def recover_errors(request: Request, call_next):
    """Turns unhandled exceptions into a logged 500 response."""
    try:
        return await call_next(request)
    except Exception:
        logger.exception(
            "Unhandled error",
            extra={"method": request.method, "path": request.url.path},
        )
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
