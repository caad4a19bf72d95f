"""
OpenTelemetry Configuration

Sets up distributed tracing and logging for the blood donation API.
"""

import logging
from typing import Any, Mapping
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

SERVICE_NAME = 'blood-donation-api'

SAMPLING_RATIOS = {
    'production': 0.1,
    'staging': 0.5,
}

_tracer_provider_installed = False


def setup_observability(config: Mapping[str, Any]):
    """
    Initialize logging and OpenTelemetry tracing from application config.

    The tracer provider is process-global, so it is installed at most once
    even when several applications are created (as the test suite does).
    """
    global _tracer_provider_installed

    environment = config.get('ENVIRONMENT', 'development')
    setup_structured_logging(environment, config.get('LOG_LEVEL'))

    if not config.get('OTEL_ENABLED', True) or _tracer_provider_installed:
        return

    sampler = TraceIdRatioBased(SAMPLING_RATIOS.get(environment, 1.0))

    resource = Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": config.get('SERVICE_VERSION', '1.0.0'),
        "deployment.environment": environment
    })

    tracer_provider = TracerProvider(
        sampler=sampler,
        resource=resource
    )

    otlp_endpoint = config.get('OTEL_EXPORTER_OTLP_ENDPOINT')
    if otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(endpoint=otlp_endpoint)
        tracer_provider.add_span_processor(
            BatchSpanProcessor(otlp_exporter, max_export_batch_size=512)
        )

    if environment == 'development':
        tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(tracer_provider)
    _tracer_provider_installed = True


def setup_structured_logging(environment: str, level_name: str = None):
    """Configure root logging; LOG_LEVEL overrides the per-environment level."""
    log_level = {
        'production': logging.WARNING,
        'staging': logging.INFO,
        'development': logging.DEBUG
    }.get(environment, logging.INFO)

    if level_name:
        log_level = logging.getLevelName(level_name.upper())
        if not isinstance(log_level, int):
            raise ValueError(f"Unknown LOG_LEVEL: {level_name}")

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s %(levelname)s %(name)s %(message)s',
        handlers=[logging.StreamHandler()]
    )

    if environment == 'production':
        logging.getLogger('pymongo').setLevel(logging.WARNING)
        logging.getLogger('werkzeug').setLevel(logging.WARNING)

    elif environment == 'development':
        logging.getLogger('services').setLevel(logging.DEBUG)
        logging.getLogger('pymongo').setLevel(logging.INFO)
