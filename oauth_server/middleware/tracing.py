"""OpenTelemetry request tracing middleware."""

from __future__ import annotations

from fastapi import Request
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response


class TracingMiddleware(BaseHTTPMiddleware):
    """Create an OpenTelemetry span around request handling.

    Without a configured tracer provider the API returns a no-op tracer.
    """

    def __init__(self, app, tracer: trace.Tracer | None = None) -> None:
        super().__init__(app)
        self._tracer = tracer or trace.get_tracer("oauth_server.middleware.tracing")

    async def dispatch(self, request: Request, call_next) -> Response:
        """Trace request processing and attach key HTTP attributes."""
        span_name = f"{request.method} {request.url.path}"
        with self._tracer.start_as_current_span(span_name) as span:
            span.set_attribute("http.method", request.method)
            span.set_attribute("http.target", request.url.path)
            correlation_id = getattr(request.state, "correlation_id", None)
            if correlation_id is not None:
                span.set_attribute("correlation_id", correlation_id)
            try:
                response = await call_next(request)
            except Exception as exc:
                span.record_exception(exc)
                span.set_status(Status(StatusCode.ERROR))
                raise

            span.set_attribute("http.status_code", response.status_code)
            if response.status_code >= 500:
                span.set_status(Status(StatusCode.ERROR))
            else:
                span.set_status(Status(StatusCode.OK))
            return response
