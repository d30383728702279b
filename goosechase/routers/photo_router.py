"""FastAPI routes for the photo and Google Places proxy endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import PlainTextResponse, Response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["photos"])

# Global handler references - set during startup
_photo_handler = None
_places_handler = None


def set_photo_handlers(photo_handler, places_handler):
    """Set the photo and places handler instances (called during startup)."""
    global _photo_handler, _places_handler
    _photo_handler = photo_handler
    _places_handler = places_handler
    logger.info("[PhotoRouter] Handlers injected successfully")


def _service_not_ready() -> Response:
    return PlainTextResponse("Service not ready", status_code=503)


async def _call(handler_call) -> Response:
    try:
        return await handler_call
    except Exception as e:
        logger.error(f"[PhotoRouter] Unhandled error: {e}")
        return PlainTextResponse("Internal server error", status_code=500)


@router.get(
    "/photo",
    summary="Photo proxy",
    description="Fetch a Google Places photo by reference; demo_photo_* references render a placeholder SVG",
    response_class=Response,
)
async def photo(
    ref: Optional[str] = Query(None, description="Photo reference"),
    w: Optional[str] = Query(None, description="Max width in pixels (default 640)"),
    h: Optional[str] = Query(None, description="Max height in pixels"),
) -> Response:
    if _photo_handler is None:
        return _service_not_ready()
    return await _call(_photo_handler.photo(ref, w, h))


@router.get(
    "/google-places-photo",
    summary="Google Places photo",
    description="Fetch a Google Places photo by reference",
    response_class=Response,
)
async def google_places_photo(
    photoRef: Optional[str] = Query(None, description="Photo reference"),
    maxWidth: Optional[str] = Query(None, description="Max width in pixels (default 800)"),
    maxHeight: Optional[str] = Query(None, description="Max height in pixels"),
) -> Response:
    if _photo_handler is None:
        return _service_not_ready()
    return await _call(_photo_handler.google_places_photo(photoRef, maxWidth, maxHeight))


@router.get(
    "/google-places-search",
    summary="Google Places text search",
    description="Proxy a Places text search",
    response_class=Response,
)
async def google_places_search(
    query: Optional[str] = Query(None, description="Free-text search query"),
) -> Response:
    if _places_handler is None:
        return _service_not_ready()
    return await _call(_places_handler.search(query))


@router.get(
    "/google-places-photos",
    summary="Google Places photo metadata",
    description="Proxy a Places details lookup restricted to photos",
    response_class=Response,
)
async def google_places_photos(
    placeId: Optional[str] = Query(None, description="Google place id"),
) -> Response:
    if _places_handler is None:
        return _service_not_ready()
    return await _call(_places_handler.place_photos(placeId))
