"""Route modules."""

from .auth import router as auth_router
from .resources import build_collection_router, collection_routers

__all__ = ["auth_router", "build_collection_router", "collection_routers"]
