import contextvars
import logging
import os
from contextlib import contextmanager

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import SpanKind, Status, StatusCode

logger = logging.getLogger(__name__)


def init_tracing(service_name: str, endpoint: str | None = None) -> None:
    """
    Initialize OpenTelemetry tracing with the OTLP HTTP exporter.

    Args:
        service_name: Name of the service (e.g. "query-gateway")
        endpoint: OTLP HTTP endpoint (e.g. "http://jaeger:4318").
                 If None, tries OTEL_EXPORTER_OTLP_ENDPOINT env var,
                 defaults to http://localhost:4318.
    """
    if endpoint is None:
        endpoint = os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318")

    # HTTP exporter needs full URL with /v1/traces path if not already present
    if not endpoint.endswith("/v1/traces"):
        traces_endpoint = f"{endpoint.rstrip('/')}/v1/traces"
    else:
        traces_endpoint = endpoint

    resource = Resource.create({"service.name": service_name})
    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(endpoint=traces_endpoint)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    logger.info(f"Tracing initialized for {service_name} (exporting to {traces_endpoint})")


def shutdown_tracing() -> None:
    """Flush and shutdown the global tracer provider."""
    try:
        provider = trace.get_tracer_provider()
        if hasattr(provider, "shutdown"):
            provider.shutdown()
            logger.info("Tracer shutdown complete")
    except Exception as e:
        logger.warning(f"Tracer shutdown warning: {e}")


@contextmanager
def client_span(name: str, attributes: dict | None = None, tracer_name: str = __name__):
    """Run the block inside a CLIENT span, marking it as an error on exceptions.

    The exception is recorded on the span and re-raised.
    """
    tracer = trace.get_tracer(tracer_name)
    with tracer.start_as_current_span(
        name,
        kind=SpanKind.CLIENT,
        attributes=attributes or {},
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, type(exc).__name__))
            raise


def bind_context(fn):
    """Wrap *fn* so it runs in a copy of the caller's context.

    Needed when handing work to a thread pool: worker threads do not inherit
    the submitting thread's contextvars, so spans started there would lose
    their parent.  A context can only be entered by one thread at a time, so
    bind once per submitted task.
    """
    ctx = contextvars.copy_context()

    def _run(*args, **kwargs):
        return ctx.run(fn, *args, **kwargs)

    return _run
