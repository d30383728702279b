"""Resolves a displayable photo URL for a venue."""
import asyncio
import logging
from typing import Optional

from goosechase.api.google_places_client import GooglePlacesAPIClient
from goosechase.metrics import PHOTO_RESOLUTION_RESULTS, PHOTO_RESOLUTION_SHARED_LOOKUPS
from goosechase.models import PhotoCacheEntry, PhotoResolution, VenueRecord
from goosechase.services.photo_cache import (
    DEFAULT_CACHE_HEIGHT,
    DEFAULT_CACHE_WIDTH,
    PhotoCache,
    build_photo_url,
    resize_photo_url,
)

logger = logging.getLogger(__name__)


class PhotoResolutionService:
    """Photo lookup pipeline: CSV reference, then cache, then Google Places.

    Google Places lookups for the same venue that overlap in time share a
    single in-flight task. Misses are never cached, so a later call retries
    the lookup.
    """

    def __init__(
        self,
        google_places_client: Optional[GooglePlacesAPIClient],
        photo_cache: PhotoCache,
        search_city: str = "Chicago",
    ):
        """Initialize PhotoResolutionService.

        Args:
            google_places_client: Places client, or None when no API key is configured
            photo_cache: Shared photo cache
            search_city: City appended to every text search query
        """
        self.google_places_client = google_places_client
        self.photo_cache = photo_cache
        self.search_city = search_city
        self._inflight: dict[str, asyncio.Task] = {}

    async def resolve(
        self,
        venue_name: str,
        venue_address: str,
        neighborhood: Optional[str] = None,
        cached_photo_ref: Optional[str] = None,
        width: int = DEFAULT_CACHE_WIDTH,
        height: int = DEFAULT_CACHE_HEIGHT,
    ) -> PhotoResolution:
        """Resolve the photo URL for a venue.

        Args:
            venue_name: Venue name
            venue_address: Venue address (cache key part)
            neighborhood: Search area; falls back to the address
            cached_photo_ref: Photo reference already attached to the venue
            width: Requested display width
            height: Requested display height

        Returns:
            PhotoResolution; status "not_found" when no photo could be found
        """
        if cached_photo_ref:
            PHOTO_RESOLUTION_RESULTS.labels(source="csv").inc()
            return PhotoResolution(
                status="found",
                source="csv",
                photo_reference=cached_photo_ref,
                photo_url=build_photo_url(cached_photo_ref, width, height),
            )

        cached = self.photo_cache.get(venue_name, venue_address)
        if cached is not None:
            logger.debug(f"[PhotoResolutionService] Cache hit for {venue_name}")
            PHOTO_RESOLUTION_RESULTS.labels(source="cache").inc()
            return PhotoResolution(
                status="found",
                source="cache",
                place_id=cached.place_id,
                photo_reference=cached.photo_reference,
                photo_url=resize_photo_url(cached.photo_url, width, height),
            )

        if self.google_places_client is None:
            logger.debug(f"[PhotoResolutionService] Places lookup disabled, no photo for {venue_name}")
            PHOTO_RESOLUTION_RESULTS.labels(source="not_found").inc()
            return PhotoResolution.not_found()

        entry = await self._shared_lookup(venue_name, venue_address, neighborhood)
        if entry is None:
            PHOTO_RESOLUTION_RESULTS.labels(source="not_found").inc()
            return PhotoResolution.not_found()

        PHOTO_RESOLUTION_RESULTS.labels(source="places").inc()
        return PhotoResolution(
            status="found",
            source="places",
            place_id=entry.place_id,
            photo_reference=entry.photo_reference,
            photo_url=build_photo_url(entry.photo_reference, width, height),
        )

    async def resolve_venue(
        self,
        venue: VenueRecord,
        width: int = DEFAULT_CACHE_WIDTH,
        height: int = DEFAULT_CACHE_HEIGHT,
    ) -> PhotoResolution:
        """Resolve the photo for a loaded venue record."""
        return await self.resolve(
            venue.name,
            venue.address,
            neighborhood=venue.neighborhood,
            cached_photo_ref=venue.gmaps_primary_photo_ref,
            width=width,
            height=height,
        )

    def build_search_query(self, venue_name: str, area: str) -> str:
        return " ".join(part for part in (venue_name, area, self.search_city) if part)

    async def _shared_lookup(
        self,
        venue_name: str,
        venue_address: str,
        neighborhood: Optional[str],
    ) -> Optional[PhotoCacheEntry]:
        key = self.photo_cache.cache_key(venue_name, venue_address)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(
                self._lookup(venue_name, venue_address, neighborhood)
            )
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        else:
            PHOTO_RESOLUTION_SHARED_LOOKUPS.inc()
            logger.debug(f"[PhotoResolutionService] Joining in-flight lookup for {venue_name}")

        # A cancelled caller must not cancel the lookup other callers are waiting on
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _lookup(
        self,
        venue_name: str,
        venue_address: str,
        neighborhood: Optional[str],
    ) -> Optional[PhotoCacheEntry]:
        """Text search, then place photos, then cache write."""
        query = self.build_search_query(venue_name, neighborhood or venue_address)

        try:
            place_id = await self.google_places_client.search_place_id(query)
            if not place_id:
                return None

            photo_reference = await self.google_places_client.get_first_photo_reference(place_id)
            if not photo_reference:
                return None
        except Exception as e:
            logger.error(f"[PhotoResolutionService] Error resolving photo for {venue_name}: {e}")
            return None

        logger.info(f"[PhotoResolutionService] Resolved photo for {venue_name} (place {place_id})")
        return self.photo_cache.put(venue_name, venue_address, place_id, photo_reference)
