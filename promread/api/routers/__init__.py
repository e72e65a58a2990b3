"""promread API routers package."""

from promread.api.routers.health import router as health_router
from promread.api.routers.read import router as read_router

__all__ = [
    "health_router",
    "read_router",
]
