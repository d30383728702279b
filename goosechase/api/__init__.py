"""External API clients."""
from goosechase.api.google_places_client import GooglePlacesAPIClient, GooglePlacesError

__all__ = ["GooglePlacesAPIClient", "GooglePlacesError"]
