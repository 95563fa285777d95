"""Service-level endpoints."""

from fastapi import APIRouter

from filestorage_api.response_models import HealthResponse, MessageResponse

router = APIRouter(tags=["General"])


@router.get("/", response_model=MessageResponse)
def root() -> MessageResponse:
    """Provides a welcome message for the service."""
    return MessageResponse(
        message=(
            "Welcome to the File Storage Service. "
            "Visit /swagger/index.html for API documentation."
        )
    )


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Checks the health status of the service."""
    return HealthResponse(status="healthy")
