"""Data models package for goosechase."""
from goosechase.models.venue import (
    VenueRecord,
    VenueFilter,
    VenueListResponse,
    VenueFacets,
    RatingSummary,
)
from goosechase.models.photo import (
    PhotoCacheEntry,
    PhotoResolution,
    PhotoUpdateEntry,
    PhotoUpdateRequest,
    PhotoUpdateResult,
    CsvPhotoStats,
    PhotoCacheSnapshot,
    EnrichmentResult,
)

__all__ = [
    # Venue models
    "VenueRecord",
    "VenueFilter",
    "VenueListResponse",
    "VenueFacets",
    "RatingSummary",
    # Photo models
    "PhotoCacheEntry",
    "PhotoResolution",
    "PhotoUpdateEntry",
    "PhotoUpdateRequest",
    "PhotoUpdateResult",
    "CsvPhotoStats",
    "PhotoCacheSnapshot",
    "EnrichmentResult",
]
