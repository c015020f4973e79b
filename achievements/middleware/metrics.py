"""Prometheus instrumentation for every HTTP request.

The ``endpoint`` label is the route template (``/v1/owners/{owner}/...``),
never the raw URL: owner principals and ids in the path would otherwise
create one time series per record.
"""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from achievements.core.metrics import ACTIVE_REQUESTS, REQUEST_COUNT, REQUEST_DURATION

UNMATCHED_ROUTE = "<unmatched>"
_SCRAPE_PATH = "/metrics"


def route_template(request: Request) -> str:
    """Template of the route the router matched, read after dispatch.

    The router records the matched route in the shared request scope, so
    this only answers once ``call_next`` has run.
    """
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path == _SCRAPE_PATH:
            return await call_next(request)

        method = request.method
        # An exception escaping the app is counted as a 500.
        status_code = 500
        started = time.perf_counter()
        with ACTIVE_REQUESTS.track_inprogress():
            try:
                response = await call_next(request)
                status_code = response.status_code
            finally:
                endpoint = route_template(request)
                REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(
                    time.perf_counter() - started
                )
                REQUEST_COUNT.labels(
                    method=method, endpoint=endpoint, status_code=str(status_code)
                ).inc()
        return response
