"""Services package."""
from goosechase.services.photo_cache import PhotoCache
from goosechase.services.photo_resolution_service import PhotoResolutionService
from goosechase.services.photo_enrichment_service import PhotoEnrichmentService
from goosechase.services.venue_service import VenueService
from goosechase.services.csv_photo_service import CsvPhotoService, CsvUpdateError

__all__ = [
    "PhotoCache",
    "PhotoResolutionService",
    "PhotoEnrichmentService",
    "VenueService",
    "CsvPhotoService",
    "CsvUpdateError",
]
