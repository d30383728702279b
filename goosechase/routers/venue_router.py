"""FastAPI routes for venue endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse

from goosechase.models import PhotoResolution, VenueFacets, VenueFilter, VenueListResponse

logger = logging.getLogger(__name__)

router = APIRouter()

# Global handler reference - set during startup
_venue_handler = None


def set_venue_handler(handler):
    """Set the venue handler instance (called during startup)."""
    global _venue_handler
    _venue_handler = handler
    logger.info("[VenueRouter] Handler injected successfully")


def get_handler():
    """Get the venue handler, raising error if not initialized."""
    if _venue_handler is None:
        raise HTTPException(status_code=503, detail="Service not ready")
    return _venue_handler


@router.get(
    "/v1/venues",
    response_model=VenueListResponse,
    summary="List venues",
    description="List loaded venues, optionally filtered by name, type, neighborhood or keyword",
)
def list_venues(
    search: str = Query("", description="Case-insensitive substring of the venue name"),
    venue_type: str = Query("", description="One of the slash-separated venue types"),
    neighborhood: str = Query("", description="Exact neighborhood"),
    keyword: str = Query("", description="Case-insensitive substring of a keyword tag"),
) -> VenueListResponse:
    try:
        handler = get_handler()
        venue_filter = VenueFilter(
            search=search,
            venue_type=venue_type,
            neighborhood=neighborhood,
            keyword=keyword,
        )
        return handler.list_venues(venue_filter)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[VenueRouter] Error in list_venues: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get(
    "/v1/venues/facets",
    response_model=VenueFacets,
    summary="Venue filter values",
    description="Distinct venue types and neighborhoods of the loaded venues",
)
def venue_facets() -> VenueFacets:
    try:
        return get_handler().facets()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[VenueRouter] Error in venue_facets: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get(
    "/v1/venues/photo",
    response_model=PhotoResolution,
    summary="Resolve venue photo",
    description="Resolve a displayable photo URL for a venue (CSV reference, cache, then Google Places)",
    responses={404: {"model": PhotoResolution}},
)
async def venue_photo(
    name: str = Query(..., min_length=1, description="Venue name"),
    address: Optional[str] = Query(None, description="Venue address"),
    w: int = Query(300, gt=0, description="Display width"),
    h: int = Query(200, gt=0, description="Display height"),
):
    try:
        handler = get_handler()
        resolution = await handler.venue_photo(name, address, w, h)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[VenueRouter] Error in venue_photo: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    if not resolution.found:
        return JSONResponse(status_code=404, content=resolution.model_dump(exclude_none=True))
    return resolution


@router.post(
    "/v1/venues/reload",
    summary="Reload venues",
    description="Re-read the venue CSV; the previous venues stay in place if loading fails",
)
def reload_venues() -> dict[str, int]:
    try:
        return get_handler().reload()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[VenueRouter] Error in reload_venues: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get(
    "/ping",
    summary="Health check",
    description="Health check endpoint",
)
def ping() -> dict[str, str]:
    """Health check endpoint."""
    handler = get_handler()
    return handler.ping()
