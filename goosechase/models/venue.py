"""Venue data models using Pydantic."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RatingSummary(BaseModel):
    """Best rating across the external review providers."""
    source: str
    value: float


class VenueRecord(BaseModel):
    """One venue row from the source CSV.

    Immutable after ingestion. ``name`` (together with ``address``) is the
    de-facto identity; there is no explicit id column.
    """

    # Identity
    name: str = ""
    address: str = ""

    # Classification
    venue_type: str = ""  # May contain several slash-separated sub-types
    neighborhood: str = ""

    # Location: "lat,lng" strict decimal pair
    coordinates: str

    # Descriptions
    blog_description: str = ""
    general_description: str = ""
    keywords_tags: list[str] = Field(default_factory=list)

    # Ratings (None when the source has no value)
    yelp_rating: Optional[float] = None
    google_maps_rating: Optional[float] = None
    tripadvisor_rating: Optional[float] = None
    yelp_reviews_count: Optional[int] = None
    google_maps_reviews_count: Optional[int] = None
    tripadvisor_reviews_count: Optional[int] = None

    # External links
    google_maps_url: str = ""
    yelp_url: str = ""
    tripadvisor_url: str = ""

    processed_at: str = ""

    # Photo fields, from the CSV or filled in by photo enrichment
    gmaps_place_id: Optional[str] = None
    gmaps_primary_photo_ref: Optional[str] = None
    gmaps_photo_attribution: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def lat(self) -> float:
        return float(self.coordinates.split(",")[0])

    @property
    def lng(self) -> float:
        return float(self.coordinates.split(",")[1])

    @property
    def venue_types(self) -> list[str]:
        """Slash-separated venue types, trimmed, empties dropped."""
        return [part.strip() for part in self.venue_type.split("/") if part.strip()]

    @property
    def has_photo_reference(self) -> bool:
        return bool(self.gmaps_primary_photo_ref)

    def highest_rating(self) -> Optional[RatingSummary]:
        """Return the highest available rating across Google, Yelp and TripAdvisor."""
        ratings = [
            ("Google", self.google_maps_rating),
            ("Yelp", self.yelp_rating),
            ("TripAdvisor", self.tripadvisor_rating),
        ]
        best = None
        for source, value in ratings:
            if value is None:
                continue
            if best is None or value > best.value:
                best = RatingSummary(source=source, value=value)
        return best

    def __str__(self) -> str:
        return (
            f"VenueRecord(name={self.name}, address={self.address}, "
            f"coordinates={self.coordinates})"
        )


class VenueFilter(BaseModel):
    """Filters applied to the venue list.

    All filters are optional; empty strings mean "no filter".
    """
    search: str = ""
    venue_type: str = ""
    neighborhood: str = ""
    keyword: str = ""

    def matches(self, venue: VenueRecord) -> bool:
        if self.search and self.search.lower() not in venue.name.lower():
            return False

        if self.venue_type and self.venue_type not in venue.venue_types:
            return False

        if self.neighborhood and venue.neighborhood != self.neighborhood:
            return False

        if self.keyword:
            needle = self.keyword.lower()
            if not any(needle in keyword.lower() for keyword in venue.keywords_tags):
                return False

        return True


class VenueListResponse(BaseModel):
    """Venue list response with filter counts."""
    total: int
    count: int
    venues: list[VenueRecord]


class VenueFacets(BaseModel):
    """Distinct filter values available in the loaded venue set."""
    venue_types: list[str]
    neighborhoods: list[str]
