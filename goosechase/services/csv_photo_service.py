"""Merges resolved photo references back into the on-disk venue CSV."""
import csv
import logging
import os
import shutil
import tempfile
import threading
from pathlib import Path

from goosechase.models import CsvPhotoStats, PhotoUpdateEntry, PhotoUpdateResult

logger = logging.getLogger(__name__)

PHOTO_COLUMNS = ["gmaps_place_id", "gmaps_primary_photo_ref", "gmaps_photo_attribution"]
PHOTO_ATTRIBUTION = "Photo from Google Places API"


class CsvUpdateError(Exception):
    """Raised when the venue CSV cannot be read or rewritten."""


class CsvPhotoService:
    """Reads and rewrites the photo columns of the venue CSV file."""

    def __init__(self, csv_path: Path):
        self.csv_path = Path(csv_path)
        self._write_lock = threading.Lock()

    def _read(self) -> tuple[list[str], list[dict]]:
        try:
            with open(self.csv_path, "r", encoding="utf-8-sig", newline="") as f:
                reader = csv.DictReader(f)
                rows = list(reader)
                fieldnames = list(reader.fieldnames or [])
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise CsvUpdateError(f"Failed to read CSV: {e}") from e
        return fieldnames, rows

    def _write(self, fieldnames: list[str], rows: list[dict]) -> None:
        directory = self.csv_path.parent
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".venues-", suffix=".csv")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
                writer.writeheader()
                writer.writerows(rows)
            # mkstemp creates 0600 files; keep the permissions of the file being replaced
            shutil.copymode(self.csv_path, tmp_path)
            os.replace(tmp_path, self.csv_path)
        except (OSError, csv.Error) as e:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise CsvUpdateError(f"Failed to write CSV: {e}") from e

    def update_photos(self, entries: list[PhotoUpdateEntry]) -> PhotoUpdateResult:
        """Set the photo columns of every row whose name and address equal an entry's exactly.

        Missing photo columns are appended to the header. The file is
        replaced atomically.

        Returns:
            PhotoUpdateResult with the number of rows actually updated
        """
        by_venue = {
            (entry.venue_name, entry.venue_address): entry
            for entry in entries
        }

        with self._write_lock:
            fieldnames, rows = self._read()
            for column in PHOTO_COLUMNS:
                if column not in fieldnames:
                    fieldnames.append(column)

            updated = 0
            for row in rows:
                key = (row.get("name") or "", row.get("address") or "")
                entry = by_venue.get(key)
                if entry is None:
                    continue
                row["gmaps_place_id"] = entry.place_id
                row["gmaps_primary_photo_ref"] = entry.photo_reference
                row["gmaps_photo_attribution"] = PHOTO_ATTRIBUTION
                updated += 1

            self._write(fieldnames, rows)

        logger.info(
            f"[CsvPhotoService] Updated {updated} venues with photo data "
            f"({len(entries)} entries submitted)"
        )
        return PhotoUpdateResult(
            success=True,
            message=f"Updated {updated} venues with photo data",
            updated_count=updated,
        )

    def photo_stats(self) -> CsvPhotoStats:
        """Count CSV rows that carry a photo reference."""
        _, rows = self._read()
        total = len(rows)
        with_photos = sum(1 for row in rows if (row.get("gmaps_primary_photo_ref") or "").strip())
        coverage = round(with_photos / total * 100) if total else 0
        return CsvPhotoStats(
            total=total,
            with_photos=with_photos,
            without_photos=total - with_photos,
            photo_coverage=coverage,
        )
