"""
Graph routes: history, info, last values, chart data and agent liveness.

  POST /graph/history       Range query for many (endpoint, counter) pairs
  GET  /graph/history/one   Range query for one pair
  POST /graph/info          Storage metadata for many pairs
  GET  /graph/info/one      Storage metadata for one pair
  POST /graph/last          Latest sample for many pairs
  POST /graph/last/raw      Latest sample, bypassing storage-side caching
  GET  /graph/sdp/one       Counters of one endpoint aligned for charting
  POST /graph/sdp/alive     Heartbeat-based agent liveness
"""

import logging

from fastapi import APIRouter, Depends, Query

from query_service.app.core import AlignmentStrategy
from query_service.app.dependencies import get_gateway
from query_service.app.gateway import QueryGateway
from query_service.app.models.graph import (
    AliveRequest,
    AliveResponse,
    ChartResponse,
    EndpointCounter,
    HistoryRequest,
    InfoResponse,
    LastResponse,
    SeriesResponse,
)

logger = logging.getLogger("routes.graph")

router = APIRouter(prefix="/graph", tags=["Graph"])


@router.post("/history", response_model=list[SeriesResponse])
def history(body: HistoryRequest, gateway: QueryGateway = Depends(get_gateway)):
    pairs = [ec.to_key() for ec in body.endpoint_counters]
    series = gateway.history(body.start, body.end, body.cf, pairs)
    return [SeriesResponse.from_series(s) for s in series]


@router.get("/history/one", response_model=SeriesResponse)
def history_one(
    endpoint: str = Query(default=""),
    counter: str = Query(default=""),
    start: str | None = Query(default=None),
    end: str | None = Query(default=None),
    cf: str = Query(default=""),
    gateway: QueryGateway = Depends(get_gateway),
):
    series = gateway.history_one(endpoint, counter, start=start, end=end, cf=cf)
    return SeriesResponse.from_series(series)


@router.post("/info", response_model=list[InfoResponse])
def info(body: list[EndpointCounter], gateway: QueryGateway = Depends(get_gateway)):
    infos = gateway.info([ec.to_key() for ec in body])
    return [InfoResponse.from_info(i) for i in infos]


@router.get("/info/one", response_model=InfoResponse)
def info_one(
    endpoint: str = Query(default=""),
    counter: str = Query(default=""),
    gateway: QueryGateway = Depends(get_gateway),
):
    return InfoResponse.from_info(gateway.info_one(endpoint, counter))


@router.post("/last", response_model=list[LastResponse])
def last(body: list[EndpointCounter], gateway: QueryGateway = Depends(get_gateway)):
    samples = gateway.last([ec.to_key() for ec in body])
    return [LastResponse.from_sample(s) for s in samples]


@router.post("/last/raw", response_model=list[LastResponse])
def last_raw(body: list[EndpointCounter], gateway: QueryGateway = Depends(get_gateway)):
    samples = gateway.last([ec.to_key() for ec in body], raw=True)
    return [LastResponse.from_sample(s) for s in samples]


@router.get("/sdp/one", response_model=ChartResponse)
def chart(
    endpoint: str = Query(default=""),
    counter: list[str] = Query(default=[]),
    duration: str = Query(default=""),
    cf: str = Query(default=""),
    align: AlignmentStrategy = Query(default=AlignmentStrategy.POSITIONAL),
    gateway: QueryGateway = Depends(get_gateway),
):
    """
    Counters of one endpoint over a relative ``duration`` (``3h``, ``7d``).

    Alignment is positional by default: columns only line up when every
    counter shares the same sampling interval.  Pass ``align=timestamp`` to
    join on timestamps instead.
    """
    table = gateway.chart(endpoint, counter, duration, cf=cf, strategy=align)
    return ChartResponse.from_table(table)


@router.post("/sdp/alive", response_model=list[AliveResponse])
def alive(body: list[AliveRequest], gateway: QueryGateway = Depends(get_gateway)):
    records = gateway.alive([item.endpoint for item in body])
    return [AliveResponse.from_record(r) for r in records]
