"""Handler for the Google Places JSON proxy endpoints."""
import logging
from typing import Optional

import httpx
from starlette.responses import JSONResponse, PlainTextResponse, Response

from goosechase.api.google_places_client import GooglePlacesAPIClient, GooglePlacesError
from goosechase.config import Settings

logger = logging.getLogger(__name__)


class PlacesHandler:
    """Wraps one Places call per endpoint, keeping the API key server-side."""

    def __init__(self, settings: Settings, google_places_client: Optional[GooglePlacesAPIClient]):
        self.settings = settings
        self.google_places_client = google_places_client

    def _not_configured(self) -> Optional[Response]:
        if self.google_places_client is None or not self.settings.google_places_configured:
            logger.error("[PlacesHandler] Google Maps API key not configured")
            return PlainTextResponse("Google Maps API key not configured", status_code=500)
        return None

    async def search(self, query: Optional[str]) -> Response:
        """GET /api/google-places-search: upstream text search payload."""
        if not query:
            return PlainTextResponse("Missing query parameter", status_code=400)

        error = self._not_configured()
        if error is not None:
            return error

        try:
            payload = await self.google_places_client.text_search(query)
        except GooglePlacesError as e:
            return JSONResponse({"error": f"Google Places API error: {e.status}"}, status_code=500)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[PlacesHandler] Error searching places: {type(e).__name__}")
            return JSONResponse({"error": "Failed to search places"}, status_code=502)

        return JSONResponse(payload)

    async def place_photos(self, place_id: Optional[str]) -> Response:
        """GET /api/google-places-photos: photo metadata of one place."""
        if not place_id:
            return PlainTextResponse("Missing placeId parameter", status_code=400)

        error = self._not_configured()
        if error is not None:
            return error

        try:
            result = await self.google_places_client.get_place_photos(place_id)
        except GooglePlacesError as e:
            return JSONResponse({"error": f"Google Places API error: {e.status}"}, status_code=500)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[PlacesHandler] Error getting place photos: {type(e).__name__}")
            return JSONResponse({"error": "Failed to get place photos"}, status_code=502)

        return JSONResponse(result)
