"""Prometheus-style metrics middleware and endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from time import perf_counter

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import PlainTextResponse, Response

_PREFIX = "oauth_token_service"
_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

Labels = tuple[tuple[str, str], ...]


@dataclass
class _DurationStat:
    """Aggregate duration stats per label set."""

    count: int = 0
    total_seconds: float = 0.0


class MetricsRegistry:
    """In-process registry for HTTP traffic and token endpoint outcomes."""

    def __init__(self) -> None:
        self._request_counts: dict[Labels, int] = {}
        self._duration_stats: dict[Labels, _DurationStat] = {}
        self._token_outcomes: dict[Labels, int] = {}
        self._lock = Lock()

    def record(self, method: str, path: str, status: str, duration_seconds: float) -> None:
        """Record one request measurement for the label set."""
        key = (("method", method), ("path", path), ("status", status))
        with self._lock:
            self._request_counts[key] = self._request_counts.get(key, 0) + 1
            stat = self._duration_stats.setdefault(key, _DurationStat())
            stat.count += 1
            stat.total_seconds += duration_seconds

    def record_token_outcome(self, grant_type: str, outcome: str) -> None:
        """Count one token exchange by grant type and outcome (`issued` or an error code)."""
        key = (("grant_type", grant_type), ("outcome", outcome))
        with self._lock:
            self._token_outcomes[key] = self._token_outcomes.get(key, 0) + 1

    def render_prometheus_text(self) -> str:
        """Render metrics in Prometheus exposition format."""
        lines: list[str] = []
        with self._lock:
            _render_counter(
                lines,
                f"{_PREFIX}_http_requests_total",
                "Total HTTP requests seen by the service.",
                self._request_counts,
            )
            name = f"{_PREFIX}_http_request_duration_seconds"
            lines.append(f"# HELP {name} End-to-end HTTP request duration in seconds.")
            lines.append(f"# TYPE {name} summary")
            for key in sorted(self._duration_stats):
                stat = self._duration_stats[key]
                labels = _format_labels(key)
                lines.append(f"{name}_count{{{labels}}} {stat.count}")
                lines.append(f"{name}_sum{{{labels}}} {stat.total_seconds}")
            _render_counter(
                lines,
                f"{_PREFIX}_token_requests_total",
                "Token endpoint requests by grant type and outcome.",
                self._token_outcomes,
            )
        return "\n".join(lines) + "\n"


def _render_counter(lines: list[str], name: str, help_text: str, counts: dict[Labels, int]) -> None:
    lines.append(f"# HELP {name} {help_text}")
    lines.append(f"# TYPE {name} counter")
    for key in sorted(counts):
        lines.append(f"{name}{{{_format_labels(key)}}} {counts[key]}")


def _escape_label(value: str) -> str:
    """Escape string values for Prometheus label rendering."""
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _format_labels(labels: Labels) -> str:
    """Build deterministic label set string."""
    return ",".join(f'{name}="{_escape_label(value)}"' for name, value in labels)


DEFAULT_METRICS_REGISTRY = MetricsRegistry()


def get_metrics_registry() -> MetricsRegistry:
    """Provide the process-wide metrics registry."""
    return DEFAULT_METRICS_REGISTRY


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record metrics for all responses, including failed requests."""

    def __init__(self, app, registry: MetricsRegistry = DEFAULT_METRICS_REGISTRY) -> None:
        super().__init__(app)
        self._registry = registry

    async def dispatch(self, request: Request, call_next) -> Response:
        """Capture request counts and durations keyed by route template."""
        start = perf_counter()
        path = request.url.path
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            route = request.scope.get("route")
            if route is not None:
                path = getattr(route, "path", path)
            self._registry.record(
                method=request.method,
                path=path,
                status=str(status_code),
                duration_seconds=perf_counter() - start,
            )


def build_metrics_endpoint(registry: MetricsRegistry = DEFAULT_METRICS_REGISTRY):
    """Build FastAPI-compatible endpoint that serves metrics text."""

    async def metrics_endpoint() -> PlainTextResponse:
        """Return current metrics in Prometheus exposition format."""
        return PlainTextResponse(registry.render_prometheus_text(), media_type=_CONTENT_TYPE)

    return metrics_endpoint
