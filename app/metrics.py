from __future__ import annotations

import time
from collections.abc import Callable

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response as StarletteResponse

# HTTP metrics are labelled by route template, never raw path
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency (seconds)",
    ["method", "path", "status"],
    # Handlers are in-memory only; most requests land in the low buckets
    buckets=(0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

HTTP_ERRORS_TOTAL = Counter(
    "http_errors_total",
    "Total 5xx responses",
    ["method", "path"],
)

# Remember-funding iframe outcomes: "accepted" or a rejection reason
REMEMBER_FUNDING_REQUESTS_TOTAL = Counter(
    "remember_funding_requests_total",
    "Remember-funding iframe requests by outcome",
    ["outcome"],
)

# Labels are limited to the known funding source enumeration
FUNDING_SOURCES_REMEMBERED_TOTAL = Counter(
    "funding_sources_remembered_total",
    "Funding sources written to the SDK cookie",
    ["funding_source"],
)


def _path_template(request: Request) -> str:
    """
    Return the matched route template (e.g., '/ready' or '/remember-funding').
    Only known after routing; unmatched paths collapse to one label.
    """
    route = request.scope.get("route")
    if route and getattr(route, "path", None):
        return route.path
    return "unmatched"


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Records Prometheus metrics for each request:
      - requests total (method, path, status)
      - latency histogram (method, path, status)
      - errors total (5xx)
    """

    def __init__(self, app, skip_predicate: Callable[[Request], bool] | None = None):
        super().__init__(app)
        self._skip = skip_predicate or (lambda req: False)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> StarletteResponse:
        if self._skip(request):
            return await call_next(request)

        start = time.time()
        try:
            response = await call_next(request)
        except Exception:
            HTTP_ERRORS_TOTAL.labels(method=request.method, path=_path_template(request)).inc()
            raise

        path = _path_template(request)
        status = str(response.status_code)
        HTTP_REQUESTS_TOTAL.labels(method=request.method, path=path, status=status).inc()
        HTTP_REQUEST_DURATION_SECONDS.labels(
            method=request.method, path=path, status=status
        ).observe(time.time() - start)

        if response.status_code >= 500:
            HTTP_ERRORS_TOTAL.labels(method=request.method, path=path).inc()

        return response


def metrics_endpoint() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
