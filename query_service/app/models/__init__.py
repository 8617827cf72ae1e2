from .graph import (
    EndpointCounter,
    HistoryRequest,
    AliveRequest,
    PointModel,
    SeriesResponse,
    LastResponse,
    InfoResponse,
    ChartResponse,
    AliveResponse,
)
from .health import HealthResponse, VersionResponse, CounterValue, CountersResponse

__all__ = [
    "EndpointCounter",
    "HistoryRequest",
    "AliveRequest",
    "PointModel",
    "SeriesResponse",
    "LastResponse",
    "InfoResponse",
    "ChartResponse",
    "AliveResponse",
    "HealthResponse",
    "VersionResponse",
    "CounterValue",
    "CountersResponse",
]
