"""Service for resolving photos for every loaded venue that lacks one."""
import logging
from typing import Optional

from goosechase.models import EnrichmentResult
from goosechase.services.photo_cache import PhotoCache
from goosechase.services.photo_resolution_service import PhotoResolutionService
from goosechase.services.venue_service import VenueService

logger = logging.getLogger(__name__)


class PhotoEnrichmentService:
    """Batch photo enrichment over the venue working set.

    Venues are processed one at a time through the resolution pipeline, so
    results land in the shared photo cache and can then be exported to the CSV.
    """

    def __init__(
        self,
        venue_service: VenueService,
        resolution_service: PhotoResolutionService,
        photo_cache: PhotoCache,
        enrichment_limit: int = 20,
    ):
        """Initialize PhotoEnrichmentService.

        Args:
            venue_service: Source of the venue working set
            resolution_service: Photo resolution pipeline
            photo_cache: Shared photo cache
            enrichment_limit: Default max venues per run (0 = unlimited)
        """
        self.venue_service = venue_service
        self.resolution_service = resolution_service
        self.photo_cache = photo_cache
        self.enrichment_limit = enrichment_limit

    async def enrich_missing(self, limit: Optional[int] = None) -> EnrichmentResult:
        """Resolve photos for venues with neither a CSV reference nor a cache entry.

        Args:
            limit: Maximum number of venues to look up (uses config default if None)

        Returns:
            EnrichmentResult counts
        """
        if limit is None:
            limit = self.enrichment_limit

        result = EnrichmentResult()
        pending = []
        for venue in self.venue_service.venues:
            if venue.has_photo_reference or self.photo_cache.has(venue.name, venue.address):
                result.skipped += 1
                continue
            pending.append(venue)

        if limit > 0:
            pending = pending[:limit]

        logger.info(
            f"[PhotoEnrichmentService] Starting photo enrichment for "
            f"{len(pending)} venues (limit={limit})"
        )

        for venue in pending:
            result.attempted += 1
            resolution = await self.resolution_service.resolve_venue(venue)
            if resolution.found:
                result.resolved += 1
            else:
                result.not_found += 1

        logger.info(
            f"[PhotoEnrichmentService] Photo enrichment complete: "
            f"{result.resolved}/{result.attempted} venues resolved"
        )
        return result
