"""Venue handler for HTTP requests."""
import logging
from typing import Optional

from fastapi import HTTPException

from goosechase.ingestion import CsvIngestionError
from goosechase.models import (
    PhotoResolution,
    VenueFacets,
    VenueFilter,
    VenueListResponse,
)
from goosechase.services import PhotoResolutionService, VenueService

logger = logging.getLogger(__name__)


class VenueHandler:
    """Handler for venue list, filter and photo lookup requests."""

    def __init__(self, venue_service: VenueService, resolution_service: PhotoResolutionService):
        """Initialize venue handler.

        Args:
            venue_service: Venue working set
            resolution_service: Photo resolution pipeline
        """
        self.venue_service = venue_service
        self.resolution_service = resolution_service

    def _require_venues(self) -> None:
        if not self.venue_service.loaded and self.venue_service.last_error:
            raise HTTPException(
                status_code=503,
                detail=f"Venue data unavailable: {self.venue_service.last_error}",
            )

    def list_venues(self, venue_filter: VenueFilter) -> VenueListResponse:
        """Filtered venue list with the unfiltered total."""
        self._require_venues()
        venues = self.venue_service.list_venues(venue_filter)
        total = len(self.venue_service.venues)
        logger.info(f"[VenueHandler] Showing {len(venues)} of {total} venues")
        return VenueListResponse(total=total, count=len(venues), venues=venues)

    def facets(self) -> VenueFacets:
        self._require_venues()
        return self.venue_service.facets()

    async def venue_photo(
        self,
        name: str,
        address: Optional[str],
        width: int,
        height: int,
    ) -> PhotoResolution:
        """Resolve the photo of a loaded venue.

        Venues not in the working set are still resolved by name/address.
        """
        venue = self.venue_service.get_venue(name, address)
        if venue is not None:
            return await self.resolution_service.resolve_venue(venue, width=width, height=height)

        return await self.resolution_service.resolve(
            name,
            address or "",
            width=width,
            height=height,
        )

    def reload(self) -> dict[str, int]:
        """Reload venues from the CSV; a failure keeps the previous set."""
        try:
            venues = self.venue_service.load()
        except CsvIngestionError as e:
            raise HTTPException(status_code=500, detail=f"Failed to load venues: {e}")
        return {"loaded": len(venues)}

    def ping(self) -> dict[str, str]:
        logger.debug("[VenueHandler] Ping")
        return {"status": "pong"}
