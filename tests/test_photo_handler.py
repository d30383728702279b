"""Unit tests for the photo proxy handler and its routes."""
import pytest
from unittest.mock import AsyncMock, Mock
import httpx
from fastapi import FastAPI
from fastapi.testclient import TestClient

from goosechase.config import Settings
from goosechase.handlers import PhotoHandler
from goosechase.handlers.photo_handler import render_demo_photo
from goosechase.routers import photo_router, set_photo_handlers

PROXY_CACHE_CONTROL = "public, s-maxage=86400, max-age=3600, stale-while-revalidate=86400"


@pytest.fixture
def settings(tmp_path):
    return Settings(google_maps_api_key="test_key", project_root=str(tmp_path))


@pytest.fixture
def mock_places_client():
    """Create mock Google Places client."""
    mock = Mock()
    mock.fetch_photo = AsyncMock()
    return mock


@pytest.fixture
def photo_handler(settings, mock_places_client):
    return PhotoHandler(settings, mock_places_client)


@pytest.fixture
def unconfigured_handler(tmp_path):
    return PhotoHandler(Settings(google_maps_api_key="", project_root=str(tmp_path)), None)


def make_upstream(content=b"\xff\xd8jpeg", content_type="image/jpeg"):
    upstream = Mock()
    upstream.content = content
    upstream.headers = {"content-type": content_type} if content_type else {}
    return upstream


def make_status_error(status_code):
    request = httpx.Request("GET", "https://maps.googleapis.com/maps/api/place/photo")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError("upstream error", request=request, response=response)


class TestPhotoHandler:
    """Test /api/photo behaviour."""

    @pytest.mark.asyncio
    async def test_missing_ref(self, photo_handler, mock_places_client):
        response = await photo_handler.photo(None, "400", None)

        assert response.status_code == 400
        assert response.body == b"Missing ref"
        mock_places_client.fetch_photo.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_dimensions(self, photo_handler):
        response = await photo_handler.photo("ref-1", "wide", None)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_demo_photo_without_credentials(self, unconfigured_handler):
        """Test demo references render an SVG even with no API key."""
        response = await unconfigured_handler.photo("demo_photo_yolk", "400", None)

        assert response.status_code == 200
        assert response.media_type == "image/svg+xml"
        body = response.body.decode()
        assert "YOLK" in body
        assert 'width="400"' in body

    @pytest.mark.asyncio
    async def test_demo_photo_never_calls_upstream(self, photo_handler, mock_places_client):
        await photo_handler.photo("demo_photo_pequod", None, None)

        mock_places_client.fetch_photo.assert_not_called()

    @pytest.mark.asyncio
    async def test_not_configured(self, unconfigured_handler):
        response = await unconfigured_handler.photo("ref-1", "400", None)

        assert response.status_code == 500
        assert response.body == b"Google Maps API key not configured"

    @pytest.mark.asyncio
    async def test_success_relays_bytes(self, photo_handler, mock_places_client):
        """Test upstream bytes and content type are mirrored with edge cache headers."""
        mock_places_client.fetch_photo.return_value = make_upstream(content_type="image/png")

        response = await photo_handler.photo("ref-1", "400", "300")

        assert response.status_code == 200
        assert response.body == b"\xff\xd8jpeg"
        assert response.media_type == "image/png"
        assert response.headers["cache-control"] == PROXY_CACHE_CONTROL
        mock_places_client.fetch_photo.assert_awaited_once_with("ref-1", 400, 300)

    @pytest.mark.asyncio
    async def test_default_width_and_content_type(self, photo_handler, mock_places_client):
        mock_places_client.fetch_photo.return_value = make_upstream(content_type=None)

        response = await photo_handler.photo("ref-1", None, None)

        assert response.media_type == "image/jpeg"
        mock_places_client.fetch_photo.assert_awaited_once_with("ref-1", 640, None)

    @pytest.mark.asyncio
    async def test_upstream_status_error(self, photo_handler, mock_places_client):
        mock_places_client.fetch_photo.side_effect = make_status_error(403)

        response = await photo_handler.photo("ref-1", "400", None)

        assert response.status_code == 502
        assert response.body == b"Photo fetch failed: 403"

    @pytest.mark.asyncio
    async def test_upstream_transport_error(self, photo_handler, mock_places_client):
        mock_places_client.fetch_photo.side_effect = httpx.ConnectTimeout("timed out")

        response = await photo_handler.photo("ref-1", "400", None)

        assert response.status_code == 502
        assert response.body == b"Photo fetch failed"

    @pytest.mark.asyncio
    async def test_google_places_photo(self, photo_handler, mock_places_client):
        """Test the legacy endpoint defaults to 800px and client-only caching."""
        mock_places_client.fetch_photo.return_value = make_upstream()

        response = await photo_handler.google_places_photo("ref-1", None, None)

        assert response.status_code == 200
        assert response.headers["cache-control"] == "public, max-age=3600"
        mock_places_client.fetch_photo.assert_awaited_once_with("ref-1", 800, None)

    @pytest.mark.asyncio
    async def test_google_places_photo_missing_ref(self, photo_handler):
        response = await photo_handler.google_places_photo("", None, None)

        assert response.status_code == 400
        assert response.body == b"Missing photoRef parameter"


class TestRenderDemoPhoto:
    def test_unknown_reference_uses_generic(self):
        svg = render_demo_photo("demo_photo_unknown", 300, 200)

        assert "VENUE" in svg
        assert 'height="200"' in svg

    def test_height_defaults_to_width(self):
        svg = render_demo_photo("demo_photo_bavette", 300)

        assert "BAVETTE'S" in svg
        assert 'height="300"' in svg


class TestPhotoRoutes:
    """Exercise the photo routes through FastAPI."""

    @pytest.fixture
    def client(self, photo_handler):
        app = FastAPI()
        app.include_router(photo_router)
        set_photo_handlers(photo_handler, Mock())
        yield TestClient(app)
        set_photo_handlers(None, None)

    def test_demo_photo_route(self, client):
        response = client.get("/api/photo", params={"ref": "demo_photo_yolk", "w": "400"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("image/svg+xml")
        assert "YOLK" in response.text

    def test_missing_ref_route(self, client):
        response = client.get("/api/photo")

        assert response.status_code == 400
        assert response.text == "Missing ref"

    def test_proxy_route(self, client, mock_places_client):
        mock_places_client.fetch_photo.return_value = make_upstream()

        response = client.get("/api/photo", params={"ref": "ref-1", "w": "300", "h": "200"})

        assert response.status_code == 200
        assert response.content == b"\xff\xd8jpeg"
        assert response.headers["cache-control"] == PROXY_CACHE_CONTROL
        assert "test_key" not in response.text

    def test_unexpected_error_is_500(self, client, mock_places_client):
        mock_places_client.fetch_photo.side_effect = RuntimeError("boom")

        response = client.get("/api/photo", params={"ref": "ref-1"})

        assert response.status_code == 500

    def test_handlers_not_set(self):
        app = FastAPI()
        app.include_router(photo_router)
        set_photo_handlers(None, None)

        response = TestClient(app).get("/api/photo", params={"ref": "demo_photo_yolk"})

        assert response.status_code == 503
