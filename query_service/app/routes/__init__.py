from .graph import router as graph_router
from .health import router as health_router

__all__ = ["graph_router", "health_router"]
