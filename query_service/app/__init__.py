"""Query gateway FastAPI application."""

from query_service.app.config import VERSION

__version__ = VERSION
