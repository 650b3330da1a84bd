"""FastAPI application factory."""

from fastapi import FastAPI

from oauth_server.config import configure_structlog, get_settings
from oauth_server.error_handlers import register_exception_handlers
from oauth_server.middleware.correlation_id import CorrelationIdMiddleware
from oauth_server.middleware.logging import LoggingMiddleware
from oauth_server.middleware.metrics import MetricsMiddleware, build_metrics_endpoint
from oauth_server.middleware.security_headers import SecurityHeadersMiddleware
from oauth_server.middleware.tracing import TracingMiddleware
from oauth_server.routers import health, introspection, token


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_structlog(settings)

    app = FastAPI(title=settings.app.service)
    register_exception_handlers(
        app,
        environment=settings.app.environment,
        realm=settings.clients.realm,
    )
    app.add_middleware(TracingMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    app.add_api_route("/metrics", build_metrics_endpoint(), methods=["GET"], include_in_schema=False)
    app.include_router(token.router)
    app.include_router(introspection.router)
    app.include_router(health.router)
    return app


app = create_app()
