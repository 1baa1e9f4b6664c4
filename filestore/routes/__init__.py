"""API routes package."""

from filestore.routes.file_routes import router as file_router
from filestore.routes.profile_routes import router as profile_router

__all__ = ["file_router", "profile_router"]
