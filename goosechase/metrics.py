"""Prometheus metrics definitions for goosechase.

Exposes metrics for:
1. HTTP API metrics (requests, latency, errors)
2. Google Places API client metrics (calls, latency, errors)
3. Photo resolution and photo cache metrics
4. Venue ingestion metrics
"""
from prometheus_client import Counter, Histogram, Gauge, Info

# =============================================================================
# HTTP API METRICS
# =============================================================================

HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

HTTP_REQUESTS_IN_PROGRESS = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests currently being processed",
    ["method"],
)

HTTP_RESPONSE_SIZE_BYTES = Histogram(
    "http_response_size_bytes",
    "HTTP response body size in bytes",
    ["method", "endpoint"],
    buckets=(100, 500, 1000, 5000, 10000, 50000, 100000, 500000, 1000000),
)

# =============================================================================
# GOOGLE PLACES API CLIENT METRICS
# =============================================================================

GOOGLE_PLACES_API_CALLS_TOTAL = Counter(
    "google_places_api_calls_total",
    "Total number of Google Places API calls",
    ["endpoint", "status"],  # status: success, error
)

GOOGLE_PLACES_API_CALL_DURATION_SECONDS = Histogram(
    "google_places_api_call_duration_seconds",
    "Google Places API call latency in seconds",
    ["endpoint"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

GOOGLE_PLACES_API_ERRORS_TOTAL = Counter(
    "google_places_api_errors_total",
    "Total number of Google Places API errors",
    ["endpoint", "error_type"],  # error_type: http_error, api_status, timeout, connection_error
)

# =============================================================================
# PHOTO METRICS
# =============================================================================

PHOTO_RESOLUTION_RESULTS = Counter(
    "photo_resolution_results_total",
    "Results of photo resolution operations",
    ["source"],  # source: csv, cache, places, not_found
)

PHOTO_RESOLUTION_SHARED_LOOKUPS = Counter(
    "photo_resolution_shared_lookups_total",
    "Resolutions that joined an in-flight lookup for the same venue",
)

PHOTO_CACHE_ENTRIES = Gauge(
    "photo_cache_entries",
    "Number of entries in the in-memory photo cache",
)

PHOTO_PROXY_REQUESTS_TOTAL = Counter(
    "photo_proxy_requests_total",
    "Photo proxy responses by outcome",
    ["result"],  # result: demo, success, missing_ref, not_configured, upstream_error
)

# =============================================================================
# VENUE INGESTION METRICS
# =============================================================================

VENUES_LOADED = Gauge(
    "venues_loaded",
    "Number of venues in the current working set",
)

VENUE_ROWS_REJECTED_TOTAL = Counter(
    "venue_rows_rejected_total",
    "CSV rows excluded during ingestion",
    ["reason"],  # reason: missing_coordinates, invalid_coordinates
)

# =============================================================================
# APPLICATION INFO
# =============================================================================

APP_INFO = Info(
    "goosechase",
    "Goose Chase venue server information",
)

APP_INFO.info({
    "version": "1.0.0",
    "description": "Chicago venue directory and photo proxy service",
})
