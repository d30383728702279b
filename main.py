"""Main entry point for the Goose Chase venue server.

Startup sequence:
1. Initialize DI container (photo cache, Places client, services, handlers)
2. Inject handlers into routers
3. Load venues from the CSV (photo references in the CSV seed the photo cache)
4. Start HTTP server with FastAPI
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from goosechase.config import Settings
from goosechase.container import Container
from goosechase.middleware import PrometheusMiddleware
from goosechase.routers import (
    photo_cache_router,
    photo_router,
    set_photo_cache_handler,
    set_photo_handlers,
    set_venue_handler,
    venue_router,
)

settings = Settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Global container
container: Container = None


def startup_sequence(settings: Settings):
    """Build the container, wire routers and load venue data."""
    global container

    logger.info("[Main] Starting startup sequence")

    logger.info("[Main] Initializing DI container")
    container = Container(settings)

    logger.info("[Main] Injecting handlers into routers")
    set_venue_handler(container.venue_handler)
    set_photo_handlers(container.photo_handler, container.places_handler)
    set_photo_cache_handler(container.photo_cache_handler)

    if settings.load_venues_on_startup:
        logger.info(f"[Main] Loading venues from {settings.venues_csv_file}")
        container.load_venues()
    else:
        logger.info("[Main] Skipping initial venue load (LOAD_VENUES_ON_STARTUP=false)")

    logger.info("[Main] Startup sequence completed")


async def shutdown_sequence():
    """Clean up resources on shutdown."""
    global container

    logger.info("[Main] Starting shutdown sequence")

    if container:
        await container.shutdown()

    logger.info("[Main] Shutdown sequence completed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager for startup and shutdown."""
    startup_sequence(settings)
    yield
    await shutdown_sequence()


app = FastAPI(
    title="Goose Chase API",
    description="Chicago venue directory with Google Places photo proxy",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(PrometheusMiddleware)

# Register routers at app creation time (before uvicorn starts)
app.include_router(venue_router)
app.include_router(photo_router)
app.include_router(photo_cache_router)


@app.get("/health")
def health():
    """Liveness plus a summary of the in-memory state."""
    if container is None:
        return {"status": "starting"}
    return {
        "status": "healthy",
        "venues_loaded": len(container.venue_service.venues),
        "photo_cache_size": container.photo_cache.size(),
        "google_places_configured": container.google_places_api is not None,
    }


@app.get("/metrics", response_class=PlainTextResponse)
def metrics():
    """Prometheus metrics endpoint for scraping."""
    return PlainTextResponse(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


if __name__ == "__main__":
    import uvicorn

    logger.info("[Main] Starting Goose Chase server")
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )
