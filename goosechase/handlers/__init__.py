"""HTTP request handlers."""
from goosechase.handlers.photo_handler import PhotoHandler
from goosechase.handlers.places_handler import PlacesHandler
from goosechase.handlers.venue_handler import VenueHandler
from goosechase.handlers.photo_cache_handler import PhotoCacheHandler

__all__ = ["PhotoHandler", "PlacesHandler", "VenueHandler", "PhotoCacheHandler"]
