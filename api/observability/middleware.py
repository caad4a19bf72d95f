"""
Per-request telemetry for the blood donation API.

Every response is tagged with the donor (when authenticated) and the route
template, timed, logged once and given an ``X-Trace-Id`` header whenever a
recording span exists.
"""

import time
import logging
from typing import Optional
from flask import Flask, Response, request, g
from opentelemetry import trace
from opentelemetry.instrumentation.flask import FlaskInstrumentor

logger = logging.getLogger(__name__)

# Logged at DEBUG unless they fail
QUIET_PATHS = frozenset({"/api/healthz"})


def _recording_trace_id() -> Optional[str]:
    span = trace.get_current_span()
    if not span.is_recording():
        return None
    return format(span.get_span_context().trace_id, "032x")


def _log_level(status_code: int, path: str) -> int:
    if status_code >= 500:
        return logging.ERROR
    if path in QUIET_PATHS:
        return logging.DEBUG
    return logging.INFO


def add_observability_middleware(app: Flask):
    """Instrument the app and register the timing and logging hooks."""

    FlaskInstrumentor().instrument_app(app)

    @app.before_request
    def start_request_timer():
        g.request_started = time.perf_counter()
        g.trace_id = _recording_trace_id()

    @app.after_request
    def record_request(response: Response) -> Response:
        elapsed_ms = round((time.perf_counter() - g.get('request_started', time.perf_counter())) * 1000, 2)
        route = request.url_rule.rule if request.url_rule else request.path
        donor_context = g.get('donor_context')
        donor_id = donor_context.donor_id if donor_context else None

        span = trace.get_current_span()
        if span.is_recording():
            span.set_attribute("http.route", route)
            span.set_attribute("http.duration_ms", elapsed_ms)
            if donor_id:
                span.set_attribute("donor.id", donor_id)

        logger.log(
            _log_level(response.status_code, request.path),
            f"{request.method} {route} -> {response.status_code}",
            extra={
                "method": request.method,
                "route": route,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
                "trace_id": g.get('trace_id'),
                "donor_id": donor_id
            }
        )

        if g.get('trace_id'):
            response.headers['X-Trace-Id'] = g.trace_id
        return response
