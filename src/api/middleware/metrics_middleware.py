"""Metrics middleware for request instrumentation.

Records request duration, request totals and failures to Prometheus.
The endpoint label is the route template (``/v1/proposals/{proposal_id}``)
so proposal and member ids do not create unbounded label sets.
"""

import time
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

from src.infrastructure.monitoring.metrics import get_metrics_collector

UNMATCHED_ENDPOINT = "unmatched"

_CLIENT_ERRORS = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    409: "conflict",
    422: "validation_error",
}

_SERVER_ERRORS = {
    500: "internal_error",
    503: "service_unavailable",
}


def _classify_error_type(status_code: int) -> str:
    """Classify an HTTP error status code into an error type label."""
    if 400 <= status_code < 500:
        return _CLIENT_ERRORS.get(status_code, "client_error")
    if status_code >= 500:
        return _SERVER_ERRORS.get(status_code, "server_error")
    return "unknown"


def _endpoint_label(request: Request) -> str:
    """Return the path template of the route matching the request."""
    for route in request.app.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", UNMATCHED_ENDPOINT)
    return UNMATCHED_ENDPOINT


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to record HTTP request metrics.

    Labels: method, endpoint (route template), status and, for 4xx/5xx
    responses, error_type.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        method = request.method
        endpoint = _endpoint_label(request)
        status = str(response.status_code)

        collector = get_metrics_collector()
        collector.observe_request_duration(
            method=method, endpoint=endpoint, duration=duration
        )
        collector.increment_requests(method=method, endpoint=endpoint, status=status)
        if response.status_code >= 400:
            collector.increment_failed_requests(
                method=method,
                endpoint=endpoint,
                status=status,
                error_type=_classify_error_type(response.status_code),
            )

        return response
