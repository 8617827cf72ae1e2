"""
Test utilities for the observability stack.

In-memory tracing exporter setup, span lookup (by name or by storage
operation), and a Prometheus registry reset so each test starts from clean
collectors.
"""

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import SpanKind
from prometheus_client import REGISTRY


def setup_test_tracing(service_name: str = "test-service") -> InMemorySpanExporter:
    """
    Install a TracerProvider backed by an InMemorySpanExporter.

    Returns the exporter so tests can inspect finished spans.  Replaces any
    provider installed earlier in the process.
    """
    resource = Resource.create({"service.name": service_name})
    provider = TracerProvider(resource=resource)
    exporter = InMemorySpanExporter()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    # Bypass the "already set" guard so every test can install its own
    trace._TRACER_PROVIDER = None
    trace._TRACER_PROVIDER_SET_ONCE._done = False
    trace.set_tracer_provider(provider)
    return exporter


def get_spans_by_name(exporter: InMemorySpanExporter, name: str) -> list[ReadableSpan]:
    """Filter exported spans by operation name."""
    return [s for s in exporter.get_finished_spans() if s.name == name]


def reset_metrics() -> None:
    """
    Unregister all user-created collectors from the default Prometheus
    registry so the next test gets a clean slate.

    Keeps platform collectors (``gc``, ``process``, ``platform``) intact.
    """
    to_remove = []
    for collector in list(REGISTRY._names_to_collectors.values()):
        # Platform / internal collectors don't have _name
        if hasattr(collector, "_name"):
            to_remove.append(collector)

    seen = set()
    for collector in to_remove:
        cid = id(collector)
        if cid not in seen:
            seen.add(cid)
            try:
                REGISTRY.unregister(collector)
            except KeyError:
                pass


def get_storage_spans(exporter: InMemorySpanExporter, operation: str | None = None) -> list[ReadableSpan]:
    """CLIENT spans emitted by storage calls, optionally for one operation.

    Matches on the ``storage.operation`` attribute rather than the span name,
    so callers can ask for ``"query_last"`` without knowing the naming scheme.
    """
    spans = [
        s for s in exporter.get_finished_spans()
        if s.kind == SpanKind.CLIENT and "storage.operation" in (s.attributes or {})
    ]
    if operation is not None:
        spans = [s for s in spans if s.attributes["storage.operation"] == operation]
    return spans
