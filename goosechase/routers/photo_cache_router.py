"""FastAPI routes for photo cache administration and CSV photo updates."""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from pydantic import TypeAdapter, ValidationError
from starlette.concurrency import run_in_threadpool

from goosechase.models import (
    CsvPhotoStats,
    EnrichmentResult,
    PhotoCacheSnapshot,
    PhotoUpdateEntry,
    PhotoUpdateResult,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["photo-cache"])

_photo_cache_handler = None

_photo_entries_adapter = TypeAdapter(list[PhotoUpdateEntry])


def set_photo_cache_handler(handler):
    """Set the photo cache handler instance (called during startup)."""
    global _photo_cache_handler
    _photo_cache_handler = handler
    logger.info("[PhotoCacheRouter] Handler injected successfully")


def get_handler():
    """Get the photo cache handler, raising error if not initialized."""
    if _photo_cache_handler is None:
        raise HTTPException(status_code=503, detail="Service not ready")
    return _photo_cache_handler


@router.get("/photo-cache", response_model=PhotoCacheSnapshot, summary="Photo cache contents")
def get_photo_cache() -> PhotoCacheSnapshot:
    return get_handler().snapshot()


@router.delete("/photo-cache", summary="Clear the photo cache")
def clear_photo_cache() -> dict[str, str]:
    return get_handler().clear()


@router.post(
    "/photo-cache/sync-csv",
    response_model=PhotoUpdateResult,
    summary="Write cached photos into the venue CSV",
)
def sync_photo_cache_to_csv() -> PhotoUpdateResult:
    return get_handler().sync_cache_to_csv()


@router.post(
    "/photo-cache/enrich",
    response_model=EnrichmentResult,
    summary="Resolve photos for venues without one",
)
async def enrich_photo_cache(
    limit: Optional[int] = Query(None, ge=0, description="Max venues to look up (0 = unlimited)"),
) -> EnrichmentResult:
    try:
        return await get_handler().enrich(limit)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[PhotoCacheRouter] Error in enrich_photo_cache: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post(
    "/update-csv-photos",
    response_model=PhotoUpdateResult,
    summary="Merge photo references into the venue CSV",
    description="Body: {\"photoData\": [{venue_name, venue_address, place_id, photo_reference}]}",
)
async def update_csv_photos(request: Request):
    try:
        body = await request.json()
    except ValueError:
        return PlainTextResponse("Invalid photo data", status_code=400)

    photo_data = body.get("photoData") if isinstance(body, dict) else None
    if not isinstance(photo_data, list):
        return PlainTextResponse("Invalid photo data", status_code=400)

    try:
        entries = _photo_entries_adapter.validate_python(photo_data)
    except ValidationError as e:
        logger.warning(f"[PhotoCacheRouter] Rejected photo data: {e.error_count()} errors")
        return PlainTextResponse("Invalid photo data", status_code=400)

    # The merge rewrites the CSV on disk
    return await run_in_threadpool(get_handler().update_csv, entries)


@router.get(
    "/update-csv-photos",
    response_model=CsvPhotoStats,
    summary="Photo coverage of the venue CSV",
)
def csv_photo_stats() -> CsvPhotoStats:
    return get_handler().csv_stats()
