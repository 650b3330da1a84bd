"""Middleware package exports."""

from oauth_server.middleware.correlation_id import CorrelationIdMiddleware
from oauth_server.middleware.logging import LoggingMiddleware
from oauth_server.middleware.metrics import (
    MetricsMiddleware,
    MetricsRegistry,
    build_metrics_endpoint,
    get_metrics_registry,
)
from oauth_server.middleware.security_headers import SecurityHeadersMiddleware
from oauth_server.middleware.tracing import TracingMiddleware

__all__ = [
    "CorrelationIdMiddleware",
    "LoggingMiddleware",
    "MetricsMiddleware",
    "MetricsRegistry",
    "SecurityHeadersMiddleware",
    "TracingMiddleware",
    "build_metrics_endpoint",
    "get_metrics_registry",
]
