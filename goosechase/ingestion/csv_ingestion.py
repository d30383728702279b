"""CSV ingestion: turns raw venue CSV text into validated VenueRecords."""
import csv
import io
import json
import logging
import math
import re
from pathlib import Path
from typing import TYPE_CHECKING, Literal, Optional, Union

from pydantic import BaseModel

from goosechase.metrics import VENUE_ROWS_REJECTED_TOTAL
from goosechase.models import VenueRecord

if TYPE_CHECKING:
    from goosechase.services.photo_cache import PhotoCache

logger = logging.getLogger(__name__)

# A "lat,lng" pair at the start of a value; the coordinate column name is not fixed
COORDINATE_PATTERN = re.compile(r"^-?\d+\.\d+,-?\d+\.\d+")
DECIMAL_PATTERN = re.compile(r"^-?\d+\.\d+$")

LATITUDE_COLUMNS = ("lat", "latitude")
LONGITUDE_COLUMNS = ("lng", "lon", "long", "longitude")

RATING_FIELDS = ("yelp_rating", "google_maps_rating", "tripadvisor_rating")
REVIEW_COUNT_FIELDS = (
    "yelp_reviews_count",
    "google_maps_reviews_count",
    "tripadvisor_reviews_count",
)
TEXT_FIELDS = (
    "name",
    "venue_type",
    "address",
    "neighborhood",
    "google_maps_url",
    "blog_description",
    "general_description",
    "yelp_url",
    "tripadvisor_url",
    "processed_at",
)
PHOTO_FIELDS = ("gmaps_place_id", "gmaps_primary_photo_ref", "gmaps_photo_attribution")


class CsvIngestionError(Exception):
    """Raised when the CSV text cannot be tokenized or decoded at all."""


class KeywordParse(BaseModel):
    """Keyword list together with the format it was recognized as."""
    format: Literal["json", "delimited", "empty"]
    keywords: list[str]


def classify_keywords(raw: Optional[str]) -> KeywordParse:
    """Parse a keywords cell that is either a JSON array or a comma list.

    JSON arrays win; anything else that is non-empty (invalid JSON, or JSON
    that is not an array) is split on commas with braces and quotes removed.
    """
    if raw is None or not raw.strip():
        return KeywordParse(format="empty", keywords=[])

    try:
        parsed = json.loads(raw)
    except ValueError:
        parsed = None

    if isinstance(parsed, list):
        keywords = [str(item).strip() for item in parsed if item is not None]
        return KeywordParse(format="json", keywords=[k for k in keywords if k])

    keywords = [re.sub(r'[{}"]', "", part).strip() for part in raw.split(",")]
    return KeywordParse(format="delimited", keywords=[k for k in keywords if k])


def parse_keywords(raw: Optional[str]) -> list[str]:
    """Normalize a keywords cell into a list of non-empty, trimmed strings."""
    return classify_keywords(raw).keywords


def parse_optional_float(value: Optional[str]) -> Optional[float]:
    """Parse a rating; blank, unparsable or non-finite values become None."""
    if value is None or not value.strip():
        return None
    try:
        number = float(value.strip())
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_optional_int(value: Optional[str]) -> Optional[int]:
    """Parse a review count; thousands separators are tolerated."""
    if value is None or not value.strip():
        return None
    cleaned = value.strip().replace(",", "")
    try:
        return int(cleaned)
    except ValueError:
        pass
    number = parse_optional_float(cleaned)
    if number is None:
        return None
    return int(number)


def _clean(value: Optional[str]) -> str:
    if not isinstance(value, str):
        return ""
    return value.replace('"', "").strip()


def find_coordinates(row: dict) -> Optional[str]:
    """Find the "lat,lng" pair for a row.

    Every value is scanned in column order for a strict decimal pair. When no
    single column holds one, separate latitude/longitude columns are joined.
    """
    for key, value in row.items():
        # Overflow values from over-long rows are stored under the None key as a list
        if key is None or not isinstance(value, str):
            continue
        match = COORDINATE_PATTERN.match(_clean(value))
        if match:
            return match.group(0)

    columns = {key.strip().lower(): value for key, value in row.items() if key is not None}
    lat = next((_clean(columns[c]) for c in LATITUDE_COLUMNS if c in columns), "")
    lng = next((_clean(columns[c]) for c in LONGITUDE_COLUMNS if c in columns), "")
    if DECIMAL_PATTERN.match(lat) and DECIMAL_PATTERN.match(lng):
        return f"{lat},{lng}"

    return None


def coordinates_are_valid(coordinates: Optional[str]) -> bool:
    """True when coordinates hold exactly two finite decimal numbers."""
    if not coordinates:
        return False
    parts = coordinates.split(",")
    if len(parts) != 2:
        return False
    try:
        lat, lng = (float(part.strip()) for part in parts)
    except ValueError:
        return False
    return math.isfinite(lat) and math.isfinite(lng)


def _optional_text(row: dict, field: str) -> Optional[str]:
    value = row.get(field)
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def row_to_venue(row: dict, coordinates: str) -> VenueRecord:
    """Map one CSV row (already known to have coordinates) to a VenueRecord."""
    values = {field: (row.get(field) or "").strip() for field in TEXT_FIELDS}
    values.update({field: parse_optional_float(row.get(field)) for field in RATING_FIELDS})
    values.update({field: parse_optional_int(row.get(field)) for field in REVIEW_COUNT_FIELDS})
    values.update({field: _optional_text(row, field) for field in PHOTO_FIELDS})

    return VenueRecord(
        coordinates=coordinates,
        keywords_tags=parse_keywords(row.get("keywords_tags")),
        **values,
    )


def _read_rows(csv_text: str) -> list[dict]:
    reader = csv.DictReader(io.StringIO(csv_text, newline=""), strict=True)
    try:
        rows = list(reader)
    except csv.Error as e:
        raise CsvIngestionError(f"Malformed CSV at line {reader.line_num}: {e}") from e

    if reader.fieldnames is None:
        return []
    return rows


def parse_venues_csv(
    csv_text: str,
    photo_cache: Optional["PhotoCache"] = None,
) -> list[VenueRecord]:
    """Parse CSV text into venues, dropping rows without valid coordinates.

    Individual bad rows are logged and excluded; only text that cannot be
    tokenized as CSV raises CsvIngestionError.

    Args:
        csv_text: Raw CSV text; the first row is the header
        photo_cache: If given, CSV-supplied (place id, photo reference) pairs
            are registered in it

    Returns:
        Valid venues in file order
    """
    rows = _read_rows(csv_text)

    venues: list[VenueRecord] = []
    for line_number, row in enumerate(rows, start=2):
        name = (row.get("name") or "").strip()
        coordinates = find_coordinates(row)

        if not coordinates:
            logger.warning(f"[CsvIngestion] No coordinates for {name or f'row {line_number}'}")
            VENUE_ROWS_REJECTED_TOTAL.labels(reason="missing_coordinates").inc()
            continue

        if not coordinates_are_valid(coordinates):
            logger.warning(f"[CsvIngestion] Invalid coordinates for {name}: {coordinates}")
            VENUE_ROWS_REJECTED_TOTAL.labels(reason="invalid_coordinates").inc()
            continue

        venue = row_to_venue(row, coordinates)
        venues.append(venue)

        if photo_cache is not None and venue.gmaps_place_id and venue.gmaps_primary_photo_ref:
            photo_cache.put(
                venue.name,
                venue.address,
                venue.gmaps_place_id,
                venue.gmaps_primary_photo_ref,
            )

    logger.info(
        f"[CsvIngestion] Parsed {len(rows)} total venues, "
        f"{len(venues)} with valid coordinates"
    )
    return venues


def load_venues_file(
    path: Union[str, Path],
    photo_cache: Optional["PhotoCache"] = None,
) -> list[VenueRecord]:
    """Read a UTF-8 venue CSV from disk and parse it."""
    try:
        csv_text = Path(path).read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise CsvIngestionError(f"CSV file {path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise CsvIngestionError(f"Could not read CSV file {path}: {e}") from e

    logger.info(f"[CsvIngestion] Loading venues from {path}")
    return parse_venues_csv(csv_text, photo_cache=photo_cache)
