"""Google Places API client for place search, place photos and photo bytes."""
import logging
import time
from typing import Any, Optional

import httpx

from goosechase.metrics import (
    GOOGLE_PLACES_API_CALLS_TOTAL,
    GOOGLE_PLACES_API_CALL_DURATION_SECONDS,
    GOOGLE_PLACES_API_ERRORS_TOTAL,
)

logger = logging.getLogger(__name__)

GOOGLE_PLACES_API_BASE = "https://maps.googleapis.com/maps/api/place"

# Statuses that carry a usable (possibly empty) payload
OK_STATUSES = {"OK", "ZERO_RESULTS"}


class GooglePlacesError(RuntimeError):
    """Raised when the Places API answers with a non-OK status."""

    def __init__(self, status: str, message: Optional[str] = None):
        self.status = status
        super().__init__(message or status)


class GooglePlacesAPIClient:
    """Async HTTP client for the Google Places web service.

    The API key is attached server-side to every upstream request and is
    never part of anything this client returns.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = GOOGLE_PLACES_API_BASE,
        timeout: float = 15.0,
    ):
        """Initialize Google Places API client.

        Args:
            api_key: Google Maps/Places API key
            base_url: Places web service base URL
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self.client = httpx.AsyncClient(
            timeout=timeout,
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
        )

    async def close(self):
        """Close the HTTP client and clean up resources."""
        await self.client.aclose()

    def _observe(self, endpoint: str, start_time: float, status: str, error_type: Optional[str] = None):
        duration = time.perf_counter() - start_time
        GOOGLE_PLACES_API_CALL_DURATION_SECONDS.labels(endpoint=endpoint).observe(duration)
        GOOGLE_PLACES_API_CALLS_TOTAL.labels(endpoint=endpoint, status=status).inc()
        if error_type:
            GOOGLE_PLACES_API_ERRORS_TOTAL.labels(endpoint=endpoint, error_type=error_type).inc()

    async def _get_json(self, endpoint: str, path: str, params: dict[str, Any]) -> dict[str, Any]:
        """GET a Places JSON endpoint and check its status field.

        Raises:
            httpx.HTTPError: transport failure or non-2xx response
            GooglePlacesError: Places status other than OK/ZERO_RESULTS
        """
        url = f"{self.base_url}/{path}"
        start_time = time.perf_counter()

        try:
            response = await self.client.get(url, params={**params, "key": self.api_key})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError:
            self._observe(endpoint, start_time, "error", "http_error")
            raise
        except httpx.TimeoutException:
            self._observe(endpoint, start_time, "error", "timeout")
            raise
        except httpx.RequestError:
            self._observe(endpoint, start_time, "error", "connection_error")
            raise

        status = payload.get("status")
        if status not in OK_STATUSES:
            self._observe(endpoint, start_time, "error", "api_status")
            logger.error(
                f"[GooglePlacesAPIClient] {endpoint} failed: status={status}, "
                f"error_message={payload.get('error_message')}"
            )
            raise GooglePlacesError(status or "UNKNOWN", payload.get("error_message"))

        self._observe(endpoint, start_time, "success")
        return payload

    async def text_search(self, query: str) -> dict[str, Any]:
        """Run a Places Text Search.

        Args:
            query: Free-text query, e.g. "Alinea Lincoln Park Chicago"

        Returns:
            The upstream JSON payload (``results`` may be empty)
        """
        logger.debug(f"[GooglePlacesAPIClient] Searching for: {query}")
        return await self._get_json("text_search", "textsearch/json", {"query": query})

    async def get_place_photos(self, place_id: str) -> dict[str, Any]:
        """Fetch the photo metadata of a place.

        Returns:
            The ``result`` object of a Place Details call restricted to photos
        """
        logger.debug(f"[GooglePlacesAPIClient] Fetching photos for place: {place_id}")
        payload = await self._get_json(
            "place_photos", "details/json", {"place_id": place_id, "fields": "photos"}
        )
        return payload.get("result") or {}

    async def fetch_photo(
        self,
        photo_reference: str,
        max_width: int,
        max_height: Optional[int] = None,
    ) -> httpx.Response:
        """Download photo bytes; Places answers with a redirect to the image.

        Raises:
            httpx.HTTPError: transport failure or non-2xx final response
        """
        params: dict[str, Any] = {
            "photoreference": photo_reference,
            "maxwidth": max_width,
            "key": self.api_key,
        }
        if max_height is not None:
            params["maxheight"] = max_height

        start_time = time.perf_counter()
        try:
            response = await self.client.get(
                f"{self.base_url}/photo", params=params, follow_redirects=True
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self._observe("photo", start_time, "error", "http_error")
            # Log status only; the request URL carries the key
            logger.error(f"[GooglePlacesAPIClient] Photo fetch failed: {e.response.status_code}")
            raise
        except httpx.TimeoutException:
            self._observe("photo", start_time, "error", "timeout")
            logger.error("[GooglePlacesAPIClient] Photo fetch timed out")
            raise
        except httpx.RequestError:
            self._observe("photo", start_time, "error", "connection_error")
            logger.error("[GooglePlacesAPIClient] Photo fetch connection error")
            raise

        self._observe("photo", start_time, "success")
        return response

    async def search_place_id(self, query: str) -> Optional[str]:
        """Search for a place and return the first result's place id.

        Returns:
            Place id if found, None on no results or any error
        """
        try:
            payload = await self.text_search(query)
        except (httpx.HTTPError, GooglePlacesError, ValueError) as e:
            logger.error(f"[GooglePlacesAPIClient] Text search error for {query!r}: {type(e).__name__}")
            return None

        results = payload.get("results") or []
        if not results:
            logger.warning(f"[GooglePlacesAPIClient] No place found for: {query}")
            return None

        place_id = results[0].get("place_id")
        logger.debug(f"[GooglePlacesAPIClient] Found place ID: {place_id}")
        return place_id

    async def get_first_photo_reference(self, place_id: str) -> Optional[str]:
        """Return the reference of a place's first photo, or None."""
        try:
            result = await self.get_place_photos(place_id)
        except (httpx.HTTPError, GooglePlacesError, ValueError) as e:
            logger.error(f"[GooglePlacesAPIClient] Place photos error for {place_id}: {type(e).__name__}")
            return None

        photos = result.get("photos") or []
        if not photos:
            logger.warning(f"[GooglePlacesAPIClient] No photos for place: {place_id}")
            return None

        return photos[0].get("photo_reference")
