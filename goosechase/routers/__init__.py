"""Routers package."""
from goosechase.routers.venue_router import router as venue_router, set_venue_handler
from goosechase.routers.photo_router import router as photo_router, set_photo_handlers
from goosechase.routers.photo_cache_router import (
    router as photo_cache_router,
    set_photo_cache_handler,
)

__all__ = [
    "venue_router",
    "set_venue_handler",
    "photo_router",
    "set_photo_handlers",
    "photo_cache_router",
    "set_photo_cache_handler",
]
