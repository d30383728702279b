"""Handler for photo cache administration and CSV photo updates."""
import logging
from typing import Optional

from fastapi import HTTPException

from goosechase.models import (
    CsvPhotoStats,
    EnrichmentResult,
    PhotoCacheSnapshot,
    PhotoUpdateEntry,
    PhotoUpdateResult,
)
from goosechase.services import (
    CsvPhotoService,
    CsvUpdateError,
    PhotoCache,
    PhotoEnrichmentService,
    VenueService,
)

logger = logging.getLogger(__name__)


class PhotoCacheHandler:
    """Operator actions on the photo cache and the on-disk CSV."""

    def __init__(
        self,
        photo_cache: PhotoCache,
        csv_photo_service: CsvPhotoService,
        enrichment_service: PhotoEnrichmentService,
        venue_service: VenueService,
    ):
        self.photo_cache = photo_cache
        self.csv_photo_service = csv_photo_service
        self.enrichment_service = enrichment_service
        self.venue_service = venue_service

    def snapshot(self) -> PhotoCacheSnapshot:
        entries = self.photo_cache.export_all()
        return PhotoCacheSnapshot(size=len(entries), entries=entries)

    def clear(self) -> dict[str, str]:
        self.photo_cache.clear()
        return {"message": "Cache cleared"}

    def update_csv(self, entries: list[PhotoUpdateEntry]) -> PhotoUpdateResult:
        """Merge photo tuples into the CSV."""
        try:
            return self.csv_photo_service.update_photos(entries)
        except CsvUpdateError as e:
            logger.error(f"[PhotoCacheHandler] Error updating CSV with photos: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to update CSV: {e}")

    def sync_cache_to_csv(self) -> PhotoUpdateResult:
        """Write every cached photo into the CSV.

        Cache keys may be normalized, so an entry can carry a caller's
        spelling of the venue. Entries are written under the name and address
        of the loaded venue sharing their cache key, which is what the CSV holds.
        """
        loaded = {
            self.photo_cache.cache_key(venue.name, venue.address): venue
            for venue in self.venue_service.venues
        }

        entries = []
        for entry in self.photo_cache.export_all():
            venue = loaded.get(self.photo_cache.cache_key(entry.venue_name, entry.venue_address))
            entries.append(PhotoUpdateEntry(
                venue_name=venue.name if venue else entry.venue_name,
                venue_address=venue.address if venue else entry.venue_address,
                place_id=entry.place_id,
                photo_reference=entry.photo_reference,
            ))
        if not entries:
            return PhotoUpdateResult(
                success=True,
                message="No cached photos to update CSV with",
                updated_count=0,
            )
        return self.update_csv(entries)

    def csv_stats(self) -> CsvPhotoStats:
        try:
            return self.csv_photo_service.photo_stats()
        except CsvUpdateError as e:
            logger.error(f"[PhotoCacheHandler] Error reading CSV photo data: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to read CSV: {e}")

    async def enrich(self, limit: Optional[int] = None) -> EnrichmentResult:
        return await self.enrichment_service.enrich_missing(limit=limit)
