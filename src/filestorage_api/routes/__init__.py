from .files import router as files_router
from .general import router as general_router

__all__ = ["files_router", "general_router"]
