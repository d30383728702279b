"""Venue service: owns the loaded venue working set."""
import logging
from pathlib import Path
from typing import Optional

from goosechase.ingestion import CsvIngestionError, load_venues_file
from goosechase.metrics import VENUES_LOADED
from goosechase.models import VenueFacets, VenueFilter, VenueRecord
from goosechase.services.photo_cache import PhotoCache

logger = logging.getLogger(__name__)


class VenueService:
    """Holds the venues parsed from the CSV and answers list/filter queries.

    The working set is swapped as a whole on reload; a failed reload keeps
    the previous set.
    """

    def __init__(self, csv_path: Path, photo_cache: Optional[PhotoCache] = None):
        self.csv_path = Path(csv_path)
        self.photo_cache = photo_cache
        self._venues: list[VenueRecord] = []
        self.loaded = False
        self.last_error: Optional[str] = None

    def load(self) -> list[VenueRecord]:
        """(Re)load venues from the CSV file.

        Raises:
            CsvIngestionError: file unreadable or not tokenizable as CSV
        """
        try:
            venues = load_venues_file(self.csv_path, photo_cache=self.photo_cache)
        except CsvIngestionError as e:
            self.last_error = str(e)
            logger.error(f"[VenueService] Failed to load venues: {e}")
            raise

        self._venues = venues
        self.loaded = True
        self.last_error = None
        VENUES_LOADED.set(len(venues))
        logger.info(f"[VenueService] Loaded {len(venues)} venues")
        return venues

    @property
    def venues(self) -> list[VenueRecord]:
        return list(self._venues)

    def list_venues(self, venue_filter: Optional[VenueFilter] = None) -> list[VenueRecord]:
        if venue_filter is None:
            return self.venues
        return [venue for venue in self._venues if venue_filter.matches(venue)]

    def get_venue(self, name: str, address: Optional[str] = None) -> Optional[VenueRecord]:
        """Find a venue by exact name (and address, when given)."""
        for venue in self._venues:
            if venue.name == name and (address is None or venue.address == address):
                return venue
        return None

    def venue_types(self) -> list[str]:
        types = {part for venue in self._venues for part in venue.venue_types}
        return sorted(types)

    def neighborhoods(self) -> list[str]:
        return sorted({venue.neighborhood for venue in self._venues if venue.neighborhood})

    def facets(self) -> VenueFacets:
        return VenueFacets(venue_types=self.venue_types(), neighborhoods=self.neighborhoods())
