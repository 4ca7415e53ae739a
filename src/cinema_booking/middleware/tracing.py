"""
Request tracing middleware
"""
import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from cinema_booking.core.logging_config import set_trace_id, generate_trace_id
from cinema_booking.core.metrics import http_requests_total, http_request_duration_seconds

logger = logging.getLogger(__name__)

TRACE_HEADER = 'X-Trace-ID'

# Scraped or polled constantly; logged at DEBUG only
QUIET_PATHS = frozenset({'/health', '/metrics'})


def _endpoint(request: Request) -> str:
    route = request.scope.get('route')
    return getattr(route, 'path', None) or 'unmatched'


class TracingMiddleware(BaseHTTPMiddleware):
    """Bind a trace ID to the request context, echo it in the response and time the request"""

    async def dispatch(self, request: Request, call_next):
        trace_id = request.headers.get(TRACE_HEADER) or generate_trace_id()
        set_trace_id(trace_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                f"{request.method} {request.url.path} raised",
                extra={'duration_ms': round((time.perf_counter() - started) * 1000, 2)}
            )
            http_requests_total.labels(request.method, _endpoint(request), 500).inc()
            raise

        elapsed = time.perf_counter() - started
        endpoint = _endpoint(request)
        http_requests_total.labels(request.method, endpoint, response.status_code).inc()
        http_request_duration_seconds.labels(request.method, endpoint).observe(elapsed)

        level = logging.DEBUG if request.url.path in QUIET_PATHS else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={'status_code': response.status_code, 'duration_ms': round(elapsed * 1000, 2)}
        )

        response.headers[TRACE_HEADER] = trace_id
        return response
