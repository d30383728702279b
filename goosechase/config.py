"""Settings for the Goose Chase server: defaults, optional JSON file, environment."""
import json
import logging
import os
from pathlib import Path
from typing import Any, Iterator, Optional

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


def _iter_config_items(section: dict[str, Any]) -> Iterator[tuple[str, Any]]:
    for key, value in section.items():
        if key.startswith("_"):
            continue
        if isinstance(value, dict):
            yield from _iter_config_items(value)
        else:
            yield key, value


def flatten_json_config(config: dict[str, Any]) -> dict[str, Any]:
    """Collapse grouped JSON config into setting-name keys.

    {"google": {"google_maps_api_key": "..."}, "_comment": "..."} becomes
    {"google_maps_api_key": "..."}. Group names are only for readability;
    "_"-prefixed keys are notes and are dropped at every level.
    """
    return dict(_iter_config_items(config))


def load_json_config(config_file: Optional[str] = None) -> dict[str, Any]:
    """Read the JSON config named by ``config_file`` or $CONFIG_FILE.

    A missing, unreadable or malformed file is logged and yields {} so the
    server still starts on defaults and environment variables.
    """
    file_path = config_file or os.getenv("CONFIG_FILE")
    if not file_path:
        return {}

    try:
        raw = Path(file_path).read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning(f"[Config] Config file not found: {file_path}")
        return {}
    except OSError as e:
        logger.error(f"[Config] Could not read config file {file_path}: {e}")
        return {}

    try:
        config = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error(f"[Config] Invalid JSON in config file {file_path}: {e}")
        return {}

    if not isinstance(config, dict):
        logger.error(f"[Config] Config file {file_path} must hold a JSON object")
        return {}

    logger.info(f"[Config] Loaded configuration from {file_path}")
    return flatten_json_config(config)


class Settings(BaseSettings):
    """Goose Chase settings.

    Configuration priority (highest to lowest):
    1. Environment variables
    2. JSON config file (specified via CONFIG_FILE env var)
    3. Defaults below
    """

    # Google Places API Configuration
    # Server-side only; never returned to the browser
    google_maps_api_key: str = ""
    google_places_base_url: str = "https://maps.googleapis.com/maps/api/place"
    google_places_timeout: float = 15.0

    # Venue data
    venues_csv_path: str = "public/chicago_venues_full_output.csv"
    load_venues_on_startup: bool = True

    # Photo cache
    photo_cache_normalize_keys: bool = True  # Case/whitespace-insensitive name|address keys
    photo_cache_width: int = 300
    photo_cache_height: int = 200

    # Photo proxy
    photo_proxy_default_width: int = 640
    photo_proxy_cache_control: str = (
        "public, s-maxage=86400, max-age=3600, stale-while-revalidate=86400"
    )
    client_photo_cache_control: str = "public, max-age=3600"

    # Photo resolution
    photo_search_city: str = "Chicago"
    photo_enrichment_limit: int = 20  # Max venues resolved per enrichment run

    # Server Configuration
    server_port: int = 8080
    log_level: str = "INFO"

    # Project Paths
    project_root: str = ""

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    def __init__(self, **kwargs):
        """Build settings; precedence is kwargs, env, JSON file, defaults."""
        # pydantic-settings ranks init kwargs above the environment, so JSON
        # values must not be passed for names the environment already sets
        file_values = {
            key: value
            for key, value in load_json_config().items()
            if key.upper() not in os.environ
        }
        super().__init__(**{**file_values, **kwargs})

        if not self.project_root:
            self.project_root = os.getenv("PROJECT_ROOT", os.getcwd())

    @property
    def base_dir(self) -> Path:
        """Get the project root directory as a Path object."""
        return Path(self.project_root)

    @property
    def venues_csv_file(self) -> Path:
        """Absolute path of the venue CSV (relative paths resolve against project_root)."""
        path = Path(self.venues_csv_path)
        if path.is_absolute():
            return path
        return self.base_dir / path

    @property
    def google_places_configured(self) -> bool:
        """True when a Places API credential is available."""
        return bool(self.google_maps_api_key)
