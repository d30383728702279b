"""Unit tests for handlers and their routes."""
import importlib
import pytest
from unittest.mock import AsyncMock, Mock, patch
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from goosechase.handlers import PhotoCacheHandler, VenueHandler
from goosechase.ingestion import CsvIngestionError
from goosechase.models import (
    CsvPhotoStats,
    EnrichmentResult,
    PhotoResolution,
    PhotoUpdateEntry,
    PhotoUpdateResult,
    VenueFacets,
    VenueFilter,
    VenueRecord,
)
from goosechase.routers import (
    photo_cache_router,
    set_photo_cache_handler,
    set_venue_handler,
    venue_router,
)
from goosechase.services import CsvPhotoService, CsvUpdateError, PhotoCache


def make_venue(name="Alinea", address="1723 N Halsted St", **kwargs) -> VenueRecord:
    return VenueRecord(name=name, address=address, coordinates="41.9134,-87.6483", **kwargs)


@pytest.fixture
def mock_venue_service():
    """Create mock VenueService."""
    mock = Mock()
    mock.loaded = True
    mock.last_error = None
    mock.venues = [make_venue(), make_venue("Yolk", "1120 S Michigan Ave")]
    return mock


@pytest.fixture
def mock_resolution_service():
    """Create mock PhotoResolutionService."""
    mock = Mock()
    found = PhotoResolution(
        status="found",
        source="cache",
        place_id="place-1",
        photo_reference="ref-1",
        photo_url="/api/photo?ref=ref-1&w=300&h=200",
    )
    mock.resolve_venue = AsyncMock(return_value=found)
    mock.resolve = AsyncMock(return_value=found)
    return mock


@pytest.fixture
def venue_handler(mock_venue_service, mock_resolution_service):
    """Create VenueHandler with mocked services."""
    return VenueHandler(mock_venue_service, mock_resolution_service)


class TestVenueHandler:
    """Test VenueHandler."""

    def test_ping(self, venue_handler):
        assert venue_handler.ping() == {"status": "pong"}

    def test_list_venues_reports_total_and_count(self, venue_handler, mock_venue_service):
        mock_venue_service.list_venues.return_value = [make_venue()]

        result = venue_handler.list_venues(VenueFilter(search="ali"))

        assert result.total == 2
        assert result.count == 1
        assert result.venues[0].name == "Alinea"
        mock_venue_service.list_venues.assert_called_once_with(VenueFilter(search="ali"))

    def test_list_venues_unavailable_after_failed_load(self, venue_handler, mock_venue_service):
        mock_venue_service.loaded = False
        mock_venue_service.last_error = "Failed to read venue CSV"

        with pytest.raises(HTTPException) as exc_info:
            venue_handler.list_venues(VenueFilter())

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_venue_photo_for_loaded_venue(
        self, venue_handler, mock_venue_service, mock_resolution_service
    ):
        venue = make_venue()
        mock_venue_service.get_venue.return_value = venue

        result = await venue_handler.venue_photo("Alinea", None, 640, 480)

        assert result.found
        mock_resolution_service.resolve_venue.assert_awaited_once_with(venue, width=640, height=480)

    @pytest.mark.asyncio
    async def test_venue_photo_for_unknown_venue(
        self, venue_handler, mock_venue_service, mock_resolution_service
    ):
        mock_venue_service.get_venue.return_value = None

        await venue_handler.venue_photo("Elsewhere", None, 300, 200)

        mock_resolution_service.resolve.assert_awaited_once_with(
            "Elsewhere", "", width=300, height=200
        )

    def test_reload(self, venue_handler, mock_venue_service):
        mock_venue_service.load.return_value = [make_venue()]

        assert venue_handler.reload() == {"loaded": 1}

    def test_reload_failure(self, venue_handler, mock_venue_service):
        mock_venue_service.load.side_effect = CsvIngestionError("Failed to read venue CSV")

        with pytest.raises(HTTPException) as exc_info:
            venue_handler.reload()

        assert exc_info.value.status_code == 500


class TestVenueRoutes:
    """Exercise venue routes through FastAPI."""

    @pytest.fixture
    def client(self, venue_handler):
        app = FastAPI()
        app.include_router(venue_router)
        set_venue_handler(venue_handler)
        yield TestClient(app)
        set_venue_handler(None)

    def test_list_route_builds_filter(self, client, mock_venue_service):
        mock_venue_service.list_venues.return_value = [make_venue()]

        response = client.get("/v1/venues", params={"venue_type": "Restaurant", "keyword": "tasting"})

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert body["count"] == 1
        assert body["venues"][0]["coordinates"] == "41.9134,-87.6483"
        mock_venue_service.list_venues.assert_called_once_with(
            VenueFilter(venue_type="Restaurant", keyword="tasting")
        )

    def test_facets_route(self, client, mock_venue_service):
        mock_venue_service.facets.return_value = VenueFacets(
            venue_types=["Bar"], neighborhoods=["Loop"]
        )

        response = client.get("/v1/venues/facets")

        assert response.json() == {"venue_types": ["Bar"], "neighborhoods": ["Loop"]}

    def test_photo_route_found(self, client, mock_venue_service):
        mock_venue_service.get_venue.return_value = make_venue()

        response = client.get("/v1/venues/photo", params={"name": "Alinea"})

        assert response.status_code == 200
        assert response.json()["photo_url"] == "/api/photo?ref=ref-1&w=300&h=200"

    def test_photo_route_not_found(self, client, mock_venue_service, mock_resolution_service):
        mock_venue_service.get_venue.return_value = None
        mock_resolution_service.resolve.return_value = PhotoResolution.not_found()

        response = client.get("/v1/venues/photo", params={"name": "Nowhere"})

        assert response.status_code == 404
        assert response.json() == {"status": "not_found"}

    def test_photo_route_requires_name(self, client):
        response = client.get("/v1/venues/photo")

        assert response.status_code == 422

    def test_reload_route(self, client, mock_venue_service):
        mock_venue_service.load.return_value = [make_venue(), make_venue("Yolk")]

        response = client.post("/v1/venues/reload")

        assert response.json() == {"loaded": 2}

    def test_unexpected_error_is_500(self, client, mock_venue_service):
        mock_venue_service.list_venues.side_effect = RuntimeError("boom")

        response = client.get("/v1/venues")

        assert response.status_code == 500

    def test_ping_route(self, client):
        assert client.get("/ping").json() == {"status": "pong"}

    def test_handler_not_set(self):
        app = FastAPI()
        app.include_router(venue_router)
        set_venue_handler(None)

        response = TestClient(app).get("/v1/venues")

        assert response.status_code == 503


@pytest.fixture
def photo_cache():
    return PhotoCache()


@pytest.fixture
def mock_csv_photo_service():
    """Create mock CsvPhotoService."""
    mock = Mock()
    mock.update_photos.return_value = PhotoUpdateResult(
        success=True, message="Updated 1 venues with photo data", updated_count=1
    )
    return mock


@pytest.fixture
def mock_enrichment_service():
    mock = Mock()
    mock.enrich_missing = AsyncMock(return_value=EnrichmentResult(attempted=2, resolved=1, not_found=1))
    return mock


@pytest.fixture
def photo_cache_handler(photo_cache, mock_csv_photo_service, mock_enrichment_service, mock_venue_service):
    return PhotoCacheHandler(
        photo_cache, mock_csv_photo_service, mock_enrichment_service, mock_venue_service
    )


class TestPhotoCacheHandler:
    """Test PhotoCacheHandler."""

    def test_snapshot(self, photo_cache_handler, photo_cache):
        photo_cache.put("A", "1 Main", "p1", "r1")

        snapshot = photo_cache_handler.snapshot()

        assert snapshot.size == 1
        assert snapshot.entries[0].photo_reference == "r1"

    def test_clear(self, photo_cache_handler, photo_cache):
        photo_cache.put("A", "1 Main", "p1", "r1")

        assert photo_cache_handler.clear() == {"message": "Cache cleared"}
        assert photo_cache.size() == 0

    def test_sync_empty_cache_does_not_touch_csv(self, photo_cache_handler, mock_csv_photo_service):
        result = photo_cache_handler.sync_cache_to_csv()

        assert result.updated_count == 0
        assert result.message == "No cached photos to update CSV with"
        mock_csv_photo_service.update_photos.assert_not_called()

    def test_sync_writes_cached_entries(self, photo_cache_handler, photo_cache, mock_csv_photo_service):
        photo_cache.put("A", "1 Main", "p1", "r1")

        result = photo_cache_handler.sync_cache_to_csv()

        assert result.updated_count == 1
        entries = mock_csv_photo_service.update_photos.call_args[0][0]
        assert entries == [
            PhotoUpdateEntry(
                venue_name="A", venue_address="1 Main", place_id="p1", photo_reference="r1"
            )
        ]

    def test_sync_uses_loaded_venue_spelling(self, mock_csv_photo_service, mock_enrichment_service, mock_venue_service):
        """Test entries cached under a normalized key are written as the CSV spells them."""
        photo_cache = PhotoCache(normalize_keys=True)
        photo_cache.put("alinea", "1723  n halsted st", "p1", "r1")
        handler = PhotoCacheHandler(
            photo_cache, mock_csv_photo_service, mock_enrichment_service, mock_venue_service
        )

        handler.sync_cache_to_csv()

        entries = mock_csv_photo_service.update_photos.call_args[0][0]
        assert entries == [
            PhotoUpdateEntry(
                venue_name="Alinea",
                venue_address="1723 N Halsted St",
                place_id="p1",
                photo_reference="r1",
            )
        ]

    def test_sync_normalized_cache_updates_csv_rows(self, tmp_path, mock_enrichment_service, mock_venue_service):
        csv_path = tmp_path / "venues.csv"
        csv_path.write_text("name,address\nAlinea,1723 N Halsted St\n", encoding="utf-8")
        photo_cache = PhotoCache(normalize_keys=True)
        photo_cache.put("alinea", "1723 n halsted st", "p1", "r1")
        handler = PhotoCacheHandler(
            photo_cache, CsvPhotoService(csv_path), mock_enrichment_service, mock_venue_service
        )

        result = handler.sync_cache_to_csv()

        assert result.updated_count == 1
        assert "r1" in csv_path.read_text(encoding="utf-8")

    def test_update_csv_failure(self, photo_cache_handler, mock_csv_photo_service):
        mock_csv_photo_service.update_photos.side_effect = CsvUpdateError("Failed to write CSV")

        with pytest.raises(HTTPException) as exc_info:
            photo_cache_handler.update_csv([])

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_enrich(self, photo_cache_handler, mock_enrichment_service):
        result = await photo_cache_handler.enrich(5)

        assert result.resolved == 1
        mock_enrichment_service.enrich_missing.assert_awaited_once_with(limit=5)


class TestPhotoCacheRoutes:
    """Exercise photo cache routes through FastAPI."""

    @pytest.fixture
    def client(self, photo_cache_handler):
        app = FastAPI()
        app.include_router(photo_cache_router)
        set_photo_cache_handler(photo_cache_handler)
        yield TestClient(app)
        set_photo_cache_handler(None)

    def test_get_and_delete_cache(self, client, photo_cache):
        photo_cache.put("A", "1 Main", "p1", "r1")

        assert client.get("/api/photo-cache").json()["size"] == 1
        assert client.delete("/api/photo-cache").json() == {"message": "Cache cleared"}
        assert client.get("/api/photo-cache").json() == {"size": 0, "entries": []}

    def test_update_csv_photos(self, client, mock_csv_photo_service):
        body = {
            "photoData": [
                {
                    "venue_name": "A",
                    "venue_address": "1 Main",
                    "place_id": "p1",
                    "photo_reference": "r1",
                }
            ]
        }

        response = client.post("/api/update-csv-photos", json=body)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Updated 1 venues with photo data",
            "updatedCount": 1,
        }
        entries = mock_csv_photo_service.update_photos.call_args[0][0]
        assert entries[0].photo_reference == "r1"

    def test_update_csv_photos_runs_off_event_loop(self, client, photo_cache_handler):
        router_module = importlib.import_module("goosechase.routers.photo_cache_router")
        result = PhotoUpdateResult(success=True, message="Updated 0 venues with photo data", updated_count=0)

        with patch.object(router_module, "run_in_threadpool", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = result
            response = client.post("/api/update-csv-photos", json={"photoData": []})

        assert response.status_code == 200
        mock_run.assert_awaited_once_with(photo_cache_handler.update_csv, [])

    @pytest.mark.parametrize(
        "body",
        [
            {"photoData": "nope"},
            {"photoData": [{"venue_name": "A"}]},
            {},
            [],
        ],
    )
    def test_update_csv_photos_invalid(self, client, mock_csv_photo_service, body):
        response = client.post("/api/update-csv-photos", json=body)

        assert response.status_code == 400
        assert response.text == "Invalid photo data"
        mock_csv_photo_service.update_photos.assert_not_called()

    def test_update_csv_photos_malformed_json(self, client):
        response = client.post(
            "/api/update-csv-photos",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400

    def test_csv_stats(self, client, mock_csv_photo_service):
        mock_csv_photo_service.photo_stats.return_value = CsvPhotoStats(
            total=4, with_photos=3, without_photos=1, photo_coverage=75
        )

        response = client.get("/api/update-csv-photos")

        assert response.json() == {
            "total": 4,
            "withPhotos": 3,
            "withoutPhotos": 1,
            "photoCoverage": 75,
        }

    def test_enrich_route(self, client, mock_enrichment_service):
        response = client.post("/api/photo-cache/enrich", params={"limit": 3})

        assert response.status_code == 200
        assert response.json()["attempted"] == 2
        mock_enrichment_service.enrich_missing.assert_awaited_once_with(limit=3)

    def test_enrich_route_rejects_negative_limit(self, client):
        response = client.post("/api/photo-cache/enrich", params={"limit": -1})

        assert response.status_code == 422
