"""Photo cache and photo resolution models."""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class PhotoCacheEntry(BaseModel):
    """A resolved photo for one venue, keyed by venue name + address."""
    venue_name: str
    venue_address: str
    place_id: str
    photo_reference: str
    photo_url: str  # Proxy endpoint URL with the cache's fixed dimensions
    last_updated: str  # ISO-8601 UTC timestamp

    model_config = ConfigDict(frozen=True)


class PhotoResolution(BaseModel):
    """Outcome of resolving a displayable photo URL for a venue.

    ``status == "not_found"`` is a normal result, not an error: callers
    render a placeholder.
    """
    status: Literal["found", "not_found"]
    photo_url: Optional[str] = None
    source: Optional[Literal["csv", "cache", "places"]] = None
    place_id: Optional[str] = None
    photo_reference: Optional[str] = None

    @classmethod
    def not_found(cls) -> "PhotoResolution":
        return cls(status="not_found")

    @property
    def found(self) -> bool:
        return self.status == "found"


class PhotoUpdateEntry(BaseModel):
    """One (venue, place id, photo reference) tuple merged into the CSV."""
    venue_name: str
    venue_address: str
    place_id: str
    photo_reference: str


class PhotoUpdateRequest(BaseModel):
    """Request body of the CSV photo update endpoint."""
    photo_data: list[PhotoUpdateEntry] = Field(alias="photoData")

    model_config = ConfigDict(populate_by_name=True)


class PhotoUpdateResult(BaseModel):
    success: bool
    message: str
    updated_count: int = Field(serialization_alias="updatedCount")


class CsvPhotoStats(BaseModel):
    """Photo coverage of the on-disk CSV."""
    total: int
    with_photos: int = Field(serialization_alias="withPhotos")
    without_photos: int = Field(serialization_alias="withoutPhotos")
    photo_coverage: int = Field(serialization_alias="photoCoverage")  # Percent, rounded


class PhotoCacheSnapshot(BaseModel):
    size: int
    entries: list[PhotoCacheEntry]


class EnrichmentResult(BaseModel):
    """Counts from one photo enrichment run."""
    attempted: int = 0
    resolved: int = 0
    not_found: int = 0
    skipped: int = 0
