"""Dependency injection container for application components."""
import logging

from goosechase.api import GooglePlacesAPIClient
from goosechase.config import Settings
from goosechase.handlers import PhotoCacheHandler, PhotoHandler, PlacesHandler, VenueHandler
from goosechase.ingestion import CsvIngestionError
from goosechase.services import (
    CsvPhotoService,
    PhotoCache,
    PhotoEnrichmentService,
    PhotoResolutionService,
    VenueService,
)

logger = logging.getLogger(__name__)


class Container:
    """Dependency injection container.

    Initializes and wires up all application dependencies. The photo cache
    is created here once and shared by every component for the lifetime of
    the process.
    """

    def __init__(self, settings: Settings):
        """Initialize container with all dependencies.

        Args:
            settings: Application settings
        """
        logger.info("[Container] Initializing container")
        self.settings = settings

        self.photo_cache = PhotoCache(
            normalize_keys=settings.photo_cache_normalize_keys,
            width=settings.photo_cache_width,
            height=settings.photo_cache_height,
        )

        # Google Places API client (photo lookups and proxies)
        self.google_places_api = None
        if settings.google_places_configured:
            self.google_places_api = GooglePlacesAPIClient(
                api_key=settings.google_maps_api_key,
                base_url=settings.google_places_base_url,
                timeout=settings.google_places_timeout,
            )
            logger.info("[Container] Google Places API client initialized")
        else:
            logger.warning(
                "[Container] Google Maps API key not configured. "
                "Photo lookups and proxies will be unavailable."
            )

        self.venue_service = VenueService(settings.venues_csv_file, photo_cache=self.photo_cache)
        self.csv_photo_service = CsvPhotoService(settings.venues_csv_file)

        self.photo_resolution_service = PhotoResolutionService(
            self.google_places_api,
            self.photo_cache,
            search_city=settings.photo_search_city,
        )
        self.photo_enrichment_service = PhotoEnrichmentService(
            self.venue_service,
            self.photo_resolution_service,
            self.photo_cache,
            enrichment_limit=settings.photo_enrichment_limit,
        )

        # Handlers
        self.venue_handler = VenueHandler(self.venue_service, self.photo_resolution_service)
        self.photo_handler = PhotoHandler(settings, self.google_places_api)
        self.places_handler = PlacesHandler(settings, self.google_places_api)
        self.photo_cache_handler = PhotoCacheHandler(
            self.photo_cache,
            self.csv_photo_service,
            self.photo_enrichment_service,
            self.venue_service,
        )

        logger.info("[Container] Container initialized")

    def load_venues(self) -> None:
        """Initial venue load; a failure is logged and retried via /v1/venues/reload."""
        try:
            self.venue_service.load()
        except CsvIngestionError as e:
            logger.error(f"[Container] Initial venue load failed: {e}")

    async def shutdown(self):
        """Release network resources."""
        if self.google_places_api is not None:
            await self.google_places_api.close()
            logger.info("[Container] Google Places API client closed")
