"""
Prometheus metric factories and the gateway statistics registry.

``create_counter``, ``create_histogram``, ``create_info`` and
``create_gauge`` tolerate duplicate registration (module reloads, tests).
``CounterRegistry`` groups a fixed set of named monotonic counters behind
``increment`` / ``increment_by`` so request handlers can count work without
touching process-wide globals, and ``metrics_response`` renders the
exposition format for ``/metrics``.
"""

import os

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)


def _get_or_create(metric_cls, name, documentation, registry: CollectorRegistry | None = None, **kwargs):
    """Create a metric or return the existing one if already registered."""
    registry = registry or REGISTRY
    try:
        return metric_cls(name, documentation, registry=registry, **kwargs)
    except ValueError:
        # Already registered: look it up in the target registry
        for collector in registry._names_to_collectors.values():
            if hasattr(collector, '_name') and (
                collector._name == name or
                getattr(collector, '_original_name', None) == name
            ):
                return collector
        raise


def create_counter(
    name: str,
    documentation: str,
    labelnames: list[str] = None,
    registry: CollectorRegistry | None = None,
) -> Counter:
    """Create (or retrieve) a Prometheus Counter."""
    return _get_or_create(Counter, name, documentation, registry, labelnames=labelnames or [])


def create_histogram(
    name: str,
    documentation: str,
    buckets: list[float] = None,
    labelnames: list[str] = None,
    registry: CollectorRegistry | None = None,
) -> Histogram:
    """Create (or retrieve) a Prometheus Histogram."""
    kwargs = {}
    if buckets:
        kwargs["buckets"] = buckets
    if labelnames:
        kwargs["labelnames"] = labelnames
    return _get_or_create(Histogram, name, documentation, registry, **kwargs)


def create_info(name: str, documentation: str, registry: CollectorRegistry | None = None) -> Info:
    """Create (or retrieve) a Prometheus Info metric."""
    return _get_or_create(Info, name, documentation, registry)


def create_gauge(
    name: str,
    documentation: str,
    labelnames: list[str] = None,
    registry: CollectorRegistry | None = None,
) -> Gauge:
    """Create (or retrieve) a Prometheus Gauge."""
    return _get_or_create(Gauge, name, documentation, registry, labelnames=labelnames or [])


def create_service_info(service_name: str, version: str, environment: str | None = None) -> Info:
    """
    Create and populate a service-metadata Info metric.

    Args:
        service_name: Prometheus metric name prefix (e.g. ``"query_gateway"``).
        version: Service version string.
        environment: Deployment environment.  Falls back to the
            ``ENVIRONMENT`` env-var, then ``"development"``.
    """
    info = create_info(service_name, "Service metadata")
    info.info({
        "version": version,
        "environment": environment or os.environ.get("ENVIRONMENT", "development"),
    })
    return info


class CounterRegistry:
    """A fixed set of named monotonic counters.

    Each name maps to a Prometheus ``Counter`` called
    ``<namespace>_<name>`` (exposed with the ``_total`` suffix).  Increments
    are thread-safe, so one registry can be shared by every concurrent
    request.

    Args:
        namespace: Metric name prefix.
        names: The counter names this registry accepts.
        registry: Target Prometheus registry; defaults to the global one.
            Pass a fresh ``CollectorRegistry()`` for isolated tests.
    """

    def __init__(self, namespace: str, names, registry: CollectorRegistry | None = None):
        self.namespace = namespace
        self._counters: dict[str, Counter] = {
            name: create_counter(
                f"{namespace}_{name}",
                f"{namespace} statistics: {name.replace('_', ' ')}",
                registry=registry,
            )
            for name in names
        }

    @property
    def names(self) -> list[str]:
        return list(self._counters)

    def increment(self, name: str) -> None:
        self.increment_by(name, 1)

    def increment_by(self, name: str, amount: int) -> None:
        if amount <= 0:
            return
        self._counters[name].inc(amount)

    def value(self, name: str) -> float:
        """Current value of counter *name*."""
        for metric in self._counters[name].collect():
            for sample in metric.samples:
                if sample.name.endswith("_total"):
                    return sample.value
        return 0.0

    def snapshot(self) -> list[dict]:
        """All counters as ``[{"name": ..., "count": ...}]`` in declaration order."""
        return [{"name": name, "count": int(self.value(name))} for name in self._counters]


def metrics_response():
    """
    Return Prometheus exposition-format bytes and the matching content-type.

    Returns:
        tuple[bytes, str]: ``(body, content_type)`` ready for an HTTP response.
    """
    return generate_latest(), CONTENT_TYPE_LATEST
