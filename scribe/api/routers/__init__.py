"""API routers."""

from scribe.api.routers.files import router as files_router
from scribe.api.routers.meta import router as meta_router

__all__ = ["files_router", "meta_router"]
