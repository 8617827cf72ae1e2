from fastapi import APIRouter, Depends, Response

from gateway_common.observability import metrics_response

from query_service.app.config import VERSION
from query_service.app.dependencies import get_gateway
from query_service.app.gateway import QueryGateway
from query_service.app.models.health import (
    CountersResponse,
    CounterValue,
    HealthResponse,
    VersionResponse,
)

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
def health(gateway: QueryGateway = Depends(get_gateway)):
    ping = getattr(gateway.backend, "ping", None)
    backends = ping() if ping is not None else {}
    healthy = not backends or any(backends.values())
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=VERSION,
        backends=backends,
    )


@router.get("/version", response_model=VersionResponse)
def version():
    return VersionResponse(version=VERSION)


@router.get("/metrics")
def metrics():
    body, content_type = metrics_response()
    return Response(content=body, media_type=content_type)


@router.get("/counter/all", response_model=CountersResponse)
@router.get("/statistics/all", response_model=CountersResponse, include_in_schema=False)
def counters(gateway: QueryGateway = Depends(get_gateway)):
    return CountersResponse(data=[CounterValue(**c) for c in gateway.counters()])
