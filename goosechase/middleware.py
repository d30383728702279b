"""Request instrumentation for the Prometheus /metrics endpoint."""
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from goosechase.metrics import (
    HTTP_REQUESTS_TOTAL,
    HTTP_REQUEST_DURATION_SECONDS,
    HTTP_REQUESTS_IN_PROGRESS,
    HTTP_RESPONSE_SIZE_BYTES,
)

UNMATCHED_ENDPOINT = "unmatched"


def route_template(request: Request) -> str:
    """Label for a request: the matched route path, never the raw URL.

    Unknown paths all share the "unmatched" label.
    """
    route = request.scope.get("route")
    path: Optional[str] = getattr(route, "path", None)
    return path or UNMATCHED_ENDPOINT


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Records count, latency and body size of every API request."""

    SKIPPED_PATHS = frozenset({"/metrics", "/health", "/ping"})

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path in self.SKIPPED_PATHS:
            return await call_next(request)

        method = request.method
        in_progress = HTTP_REQUESTS_IN_PROGRESS.labels(method=method)
        in_progress.inc()
        started = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            in_progress.dec()
            # The router fills scope["route"] while handling the request
            endpoint = route_template(request)
            HTTP_REQUEST_DURATION_SECONDS.labels(method=method, endpoint=endpoint).observe(
                time.perf_counter() - started
            )
            HTTP_REQUESTS_TOTAL.labels(
                method=method, endpoint=endpoint, status_code=str(status_code)
            ).inc()

        body_size = response.headers.get("content-length", "")
        if body_size.isdigit():
            HTTP_RESPONSE_SIZE_BYTES.labels(method=method, endpoint=endpoint).observe(int(body_size))

        return response
