import os

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)

log = structlog.get_logger(__name__)

SERVICE_VERSION = "1.0.0"


def tracing_disabled() -> bool:
    return os.getenv("DISABLE_TRACING", "").lower() in {"1", "true", "yes"}


def build_resource(service_name: str, environment: str) -> Resource:
    """Attributes attached to every span the checkout emits."""
    return Resource.create(
        {
            "service.name": service_name,
            "service.version": SERVICE_VERSION,
            "deployment.environment": environment,
        }
    )


def _exporter() -> SpanExporter | None:
    if tracing_disabled():
        return None
    try:
        return OTLPSpanExporter()
    except Exception as exc:  # pragma: no cover
        log.warning("tracing.exporter_unavailable", error=str(exc))
        return ConsoleSpanExporter()


def init_tracer(
    service_name: str = "vin-report-checkout", environment: str = "development"
) -> TracerProvider:
    """
    Install the global tracer provider behind the FastAPI request spans.

    With DISABLE_TRACING set, spans are still recorded (so FastAPI
    instrumentation keeps working) but nothing is exported.
    """
    provider = TracerProvider(resource=build_resource(service_name, environment))

    exporter = _exporter()
    if exporter is not None:
        provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(provider)
    log.info(
        "tracing.initialized",
        service_name=service_name,
        environment=environment,
        exporting=exporter is not None,
    )
    return provider
