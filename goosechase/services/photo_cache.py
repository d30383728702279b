"""In-memory photo cache keyed by venue name + address."""
import logging
import re
import threading
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote

from goosechase.metrics import PHOTO_CACHE_ENTRIES
from goosechase.models import PhotoCacheEntry

logger = logging.getLogger(__name__)

PHOTO_PROXY_PATH = "/api/photo"
DEFAULT_CACHE_WIDTH = 300
DEFAULT_CACHE_HEIGHT = 200

_DIMENSIONS_PATTERN = re.compile(r"w=\d+&h=\d+")


def build_photo_url(photo_reference: str, width: int, height: Optional[int] = None) -> str:
    """Build the photo proxy URL for a photo reference."""
    url = f"{PHOTO_PROXY_PATH}?ref={quote(photo_reference, safe='')}&w={width}"
    if height is not None:
        url += f"&h={height}"
    return url


def resize_photo_url(photo_url: str, width: int, height: int) -> str:
    """Swap the width/height query parameters of a proxy URL."""
    return _DIMENSIONS_PATTERN.sub(f"w={width}&h={height}", photo_url, count=1)


class PhotoCache:
    """Process-lifetime memo of resolved venue photos.

    Entries never expire and the cache has no size bound; it is emptied only
    by clear(). Writes are last-write-wins.
    """

    def __init__(
        self,
        normalize_keys: bool = True,
        width: int = DEFAULT_CACHE_WIDTH,
        height: int = DEFAULT_CACHE_HEIGHT,
    ):
        """Initialize PhotoCache.

        Args:
            normalize_keys: If True, keys ignore case and repeated whitespace
            width: Width embedded in every cached photo URL
            height: Height embedded in every cached photo URL
        """
        self.normalize_keys = normalize_keys
        self.width = width
        self.height = height
        self._entries: dict[str, PhotoCacheEntry] = {}
        self._lock = threading.Lock()

    def cache_key(self, venue_name: str, venue_address: str) -> str:
        if self.normalize_keys:
            venue_name = " ".join(venue_name.split()).lower()
            venue_address = " ".join(venue_address.split()).lower()
        return f"{venue_name}|{venue_address}"

    def has(self, venue_name: str, venue_address: str) -> bool:
        return self.cache_key(venue_name, venue_address) in self._entries

    def get(self, venue_name: str, venue_address: str) -> Optional[PhotoCacheEntry]:
        return self._entries.get(self.cache_key(venue_name, venue_address))

    def put(
        self,
        venue_name: str,
        venue_address: str,
        place_id: str,
        photo_reference: str,
    ) -> PhotoCacheEntry:
        """Store (overwriting) the photo for a venue.

        Returns:
            The new cache entry
        """
        entry = PhotoCacheEntry(
            venue_name=venue_name,
            venue_address=venue_address,
            place_id=place_id,
            photo_reference=photo_reference,
            photo_url=build_photo_url(photo_reference, self.width, self.height),
            last_updated=datetime.now(timezone.utc).isoformat(),
        )
        key = self.cache_key(venue_name, venue_address)
        with self._lock:
            self._entries[key] = entry
            PHOTO_CACHE_ENTRIES.set(len(self._entries))

        logger.debug(f"[PhotoCache] Cached photo for {key}")
        return entry

    def clear(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            PHOTO_CACHE_ENTRIES.set(0)
        logger.info(f"[PhotoCache] Cleared {count} entries")

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def export_all(self) -> list[PhotoCacheEntry]:
        """Snapshot of every entry, in insertion order."""
        with self._lock:
            return list(self._entries.values())
