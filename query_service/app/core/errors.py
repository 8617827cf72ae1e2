"""
Error taxonomy for the query gateway.

Request-level errors (``EmptyRequest``, ``MissingIdentity``,
``InvalidConsolidation``, ``InvalidWindow``) reject the whole call before any
backend query is issued.  ``BackendError`` subclasses are raised per query by
the storage collaborator; inside a fan-out they are absorbed and the slot
becomes absent.

Every error carries a short machine-readable ``code`` that the HTTP layer
renders as ``{"msg": code}``.
"""


class QueryError(Exception):
    """Base class for all errors the gateway reports to its callers."""

    code = "query_error"
    status_code = 400

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.code)
        self.detail = detail or self.code


class EmptyRequest(QueryError):
    """The caller supplied zero (endpoint, counter) pairs."""

    code = "empty_payload"


class MissingIdentity(QueryError):
    """Endpoint or counter omitted on a single-item request."""

    code = "empty_endpoint_counter"


class InvalidConsolidation(QueryError):
    """Consolidation function outside AVERAGE / MAX / MIN."""

    code = "invalid_cf"


class InvalidWindow(QueryError):
    """Duration token could not be resolved into a time window."""

    code = "invalid_duration"


class BackendError(QueryError):
    code = "backend_error"
    status_code = 502


class BackendUnavailable(BackendError):
    """Storage node unreachable, timed out, or answered with a server error."""

    code = "backend_unavailable"


class NoSuchSeries(BackendError):
    """Storage has no data for the requested (endpoint, counter)."""

    code = "no_such_series"
    status_code = 404
