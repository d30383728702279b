"""Photo proxy handler: relays Google Places photo bytes to the browser."""
import logging
from typing import Optional
from xml.sax.saxutils import escape

import httpx
from starlette.responses import PlainTextResponse, Response

from goosechase.api.google_places_client import GooglePlacesAPIClient
from goosechase.config import Settings
from goosechase.metrics import PHOTO_PROXY_REQUESTS_TOTAL

logger = logging.getLogger(__name__)

DEMO_PHOTO_PREFIX = "demo_photo_"

DEMO_VENUES = {
    "demo_photo_yolk": {
        "name": "YOLK",
        "type": "Breakfast & Brunch",
        "icon": "\U0001F373",
        "color1": "#FF6B35",
        "color2": "#F7931E",
    },
    "demo_photo_pequod": {
        "name": "PEQUOD'S",
        "type": "Deep Dish Pizza",
        "icon": "\U0001F355",
        "color1": "#8B4513",
        "color2": "#CD853F",
    },
    "demo_photo_bavette": {
        "name": "BAVETTE'S",
        "type": "Steakhouse",
        "icon": "\U0001F969",
        "color1": "#8B0000",
        "color2": "#DC143C",
    },
    "demo_photo_portillo": {
        "name": "PORTILLO'S",
        "type": "Italian Beef",
        "icon": "\U0001F32D",
        "color1": "#FF4500",
        "color2": "#FF6347",
    },
    "demo_photo_bigstar": {
        "name": "BIG STAR",
        "type": "Tacos & Tequila",
        "icon": "\U0001F32E",
        "color1": "#FFD700",
        "color2": "#FFA500",
    },
    "demo_photo_generic": {
        "name": "VENUE",
        "type": "Restaurant",
        "icon": "\U0001F37D",
        "color1": "#4F46E5",
        "color2": "#10B981",
    },
}


def render_demo_photo(ref: str, width: int, height: Optional[int] = None) -> str:
    """Render the placeholder SVG for a demo photo reference."""
    venue = DEMO_VENUES.get(ref, DEMO_VENUES["demo_photo_generic"])
    return f"""<svg width="{width}" height="{height or width}" xmlns="http://www.w3.org/2000/svg">
  <defs>
    <linearGradient id="grad1" x1="0%" y1="0%" x2="100%" y2="100%">
      <stop offset="0%" style="stop-color:{venue['color1']};stop-opacity:1" />
      <stop offset="100%" style="stop-color:{venue['color2']};stop-opacity:1" />
    </linearGradient>
  </defs>
  <rect width="100%" height="100%" fill="url(#grad1)"/>
  <circle cx="50%" cy="35%" r="18%" fill="white" opacity="0.9"/>
  <text x="50%" y="42%" text-anchor="middle" font-family="Arial, sans-serif" font-size="28" fill="{venue['color1']}">{venue['icon']}</text>
  <text x="50%" y="65%" text-anchor="middle" font-family="Arial, sans-serif" font-size="12" fill="white" font-weight="bold">{escape(venue['name'])}</text>
  <text x="50%" y="78%" text-anchor="middle" font-family="Arial, sans-serif" font-size="10" fill="white" opacity="0.8">{escape(venue['type'])}</text>
  <text x="50%" y="90%" text-anchor="middle" font-family="Arial, sans-serif" font-size="8" fill="white" opacity="0.6">DEMO PHOTO</text>
</svg>
"""


def _parse_dimension(value: Optional[str]) -> Optional[int]:
    """Parse a positive pixel dimension; raises ValueError when invalid."""
    if value is None or value == "":
        return None
    number = int(value)
    if number <= 0:
        raise ValueError(value)
    return number


class PhotoHandler:
    """Handler for the photo proxy endpoints.

    The API key is attached server-side and never appears in a response.
    """

    def __init__(self, settings: Settings, google_places_client: Optional[GooglePlacesAPIClient]):
        """Initialize photo handler.

        Args:
            settings: Application settings (credential and cache headers)
            google_places_client: Places client, or None when no API key is configured
        """
        self.settings = settings
        self.google_places_client = google_places_client

    @property
    def configured(self) -> bool:
        return self.google_places_client is not None and self.settings.google_places_configured

    async def photo(self, ref: Optional[str], w: Optional[str], h: Optional[str]) -> Response:
        """GET /api/photo: photo bytes for a reference, or a demo SVG.

        Args:
            ref: Photo reference (required)
            w: Max width in pixels (default from settings, 640)
            h: Optional max height in pixels
        """
        if not ref:
            PHOTO_PROXY_REQUESTS_TOTAL.labels(result="missing_ref").inc()
            return PlainTextResponse("Missing ref", status_code=400)

        try:
            width = _parse_dimension(w) or self.settings.photo_proxy_default_width
            height = _parse_dimension(h)
        except ValueError:
            return PlainTextResponse("Invalid photo dimensions", status_code=400)

        if ref.startswith(DEMO_PHOTO_PREFIX):
            PHOTO_PROXY_REQUESTS_TOTAL.labels(result="demo").inc()
            return Response(
                content=render_demo_photo(ref, width, height),
                media_type="image/svg+xml",
                headers={"Cache-Control": self.settings.client_photo_cache_control},
            )

        return await self._proxy(
            ref,
            width,
            height,
            cache_control=self.settings.photo_proxy_cache_control,
        )

    async def google_places_photo(
        self,
        photo_ref: Optional[str],
        max_width: Optional[str],
        max_height: Optional[str],
    ) -> Response:
        """GET /api/google-places-photo: photo bytes with client-side caching only."""
        if not photo_ref:
            PHOTO_PROXY_REQUESTS_TOTAL.labels(result="missing_ref").inc()
            return PlainTextResponse("Missing photoRef parameter", status_code=400)

        try:
            width = _parse_dimension(max_width) or 800
            height = _parse_dimension(max_height)
        except ValueError:
            return PlainTextResponse("Invalid photo dimensions", status_code=400)

        return await self._proxy(
            photo_ref,
            width,
            height,
            cache_control=self.settings.client_photo_cache_control,
        )

    async def _proxy(
        self,
        ref: str,
        width: int,
        height: Optional[int],
        cache_control: str,
    ) -> Response:
        if not self.configured:
            PHOTO_PROXY_REQUESTS_TOTAL.labels(result="not_configured").inc()
            logger.error("[PhotoHandler] Google Maps API key not configured")
            return PlainTextResponse("Google Maps API key not configured", status_code=500)

        try:
            upstream = await self.google_places_client.fetch_photo(ref, width, height)
        except httpx.HTTPStatusError as e:
            PHOTO_PROXY_REQUESTS_TOTAL.labels(result="upstream_error").inc()
            status = e.response.status_code
            return PlainTextResponse(f"Photo fetch failed: {status}", status_code=502)
        except httpx.HTTPError as e:
            PHOTO_PROXY_REQUESTS_TOTAL.labels(result="upstream_error").inc()
            logger.error(f"[PhotoHandler] Photo fetch error: {type(e).__name__}")
            return PlainTextResponse("Photo fetch failed", status_code=502)

        PHOTO_PROXY_REQUESTS_TOTAL.labels(result="success").inc()
        content_type = upstream.headers.get("content-type") or "image/jpeg"
        return Response(
            content=upstream.content,
            media_type=content_type,
            headers={"Cache-Control": cache_control},
        )
