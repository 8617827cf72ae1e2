"""
Structured JSON logging with OpenTelemetry trace context injection.

One ``setup_logging()`` call configures the root logger with JSON output,
tags every line with the owning service name and lets OTel inject the
trace/span IDs of the request being served.

Usage::

    from gateway_common.observability.logging import setup_logging, get_logger

    setup_logging(service="query-gateway")   # once at process startup
    logger = get_logger("fetcher")
    logger.warning("query failed", extra={"endpoint": "h1", "counter": "cpu.load"})
"""

import logging
import os

from opentelemetry.instrumentation.logging import LoggingInstrumentor
from pythonjsonlogger.json import JsonFormatter


_FORMAT_STRING = "%(timestamp)s %(level)s %(name)s %(message)s"
_setup_done = False


class JsonTraceFormatter(JsonFormatter):
    """JSON formatter that adds the standard gateway fields to every record.

    Args:
        fmt: Format string naming the base fields.
        service: Service name stamped on every record (omitted when ``None``).
    """

    def __init__(self, fmt: str = _FORMAT_STRING, service: str | None = None, **kwargs):
        super().__init__(fmt, **kwargs)
        self.service = service

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = record.created
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["message"] = record.getMessage()
        if self.service:
            log_record.setdefault("service", self.service)


def level_from_env(default: int = logging.INFO) -> int:
    """Resolve ``$LOG_LEVEL`` (name or number) to a logging level."""
    raw = os.environ.get("LOG_LEVEL")
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else default


def setup_logging(level: int = logging.INFO, service: str | None = None) -> None:
    """
    Configure the root logger with structured JSON output and trace context.

    Safe to call multiple times; subsequent calls are no-ops.

    Args:
        level: The root log level (default ``logging.INFO``).
        service: Service name added to every record as ``service``.
    """
    global _setup_done
    if _setup_done:
        return
    _setup_done = True

    # Instrument stdlib logging so OTel injects trace/span IDs
    LoggingInstrumentor().instrument(set_logging_format=False)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonTraceFormatter(_FORMAT_STRING, service=service))

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Return a named logger (thin wrapper for discoverability)."""
    return logging.getLogger(name)
