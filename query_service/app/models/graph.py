"""Pydantic request/response models for the /graph endpoints."""

import math

from pydantic import BaseModel, Field

from query_service.app.core.models import (
    AlignedTable,
    LastSample,
    LivenessRecord,
    SamplePoint,
    Series,
    SeriesInfo,
    SeriesKey,
)


def _json_float(value: float) -> float | None:
    """NaN has no JSON form; render it as null."""
    return None if value is None or math.isnan(value) else value


# ── Requests ─────────────────────────────────────────────────────


class EndpointCounter(BaseModel):
    endpoint: str
    counter: str

    def to_key(self) -> SeriesKey:
        return SeriesKey(self.endpoint, self.counter)


class HistoryRequest(BaseModel):
    start: int
    end: int
    cf: str = ""
    endpoint_counters: list[EndpointCounter] = Field(default_factory=list)


class AliveRequest(BaseModel):
    endpoint: str


# ── Responses ────────────────────────────────────────────────────


class PointModel(BaseModel):
    timestamp: int
    value: float | None

    @classmethod
    def from_point(cls, point: SamplePoint) -> "PointModel":
        return cls(timestamp=point.timestamp, value=_json_float(point.value))


class SeriesResponse(BaseModel):
    endpoint: str
    counter: str
    dstype: str
    step: int | None = None
    values: list[PointModel]

    @classmethod
    def from_series(cls, series: Series) -> "SeriesResponse":
        return cls(
            endpoint=series.endpoint,
            counter=series.counter,
            dstype=series.dstype,
            step=series.step,
            values=[PointModel.from_point(p) for p in series.points],
        )


class LastResponse(BaseModel):
    endpoint: str
    counter: str
    value: PointModel

    @classmethod
    def from_sample(cls, sample: LastSample) -> "LastResponse":
        return cls(
            endpoint=sample.endpoint,
            counter=sample.counter,
            value=PointModel.from_point(sample.value),
        )


class InfoResponse(BaseModel):
    endpoint: str
    counter: str
    consol_fun: str
    step: int | None = None
    dstype: str
    filename: str
    addr: str

    @classmethod
    def from_info(cls, info: SeriesInfo) -> "InfoResponse":
        return cls(
            endpoint=info.endpoint,
            counter=info.counter,
            consol_fun=info.consolidation,
            step=info.step,
            dstype=info.dstype,
            filename=info.filename,
            addr=info.addr,
        )


class ChartResponse(BaseModel):
    """Columnar chart data; ``data[counter][i]`` belongs to ``timestamp[i]``."""

    timestamp: list[int]
    data: dict[str, list[float | None]]

    @classmethod
    def from_table(cls, table: AlignedTable) -> "ChartResponse":
        return cls(
            timestamp=list(table.timestamps),
            data={
                counter: [_json_float(v) for v in column]
                for counter, column in table.columns.items()
            },
        )


class AliveResponse(BaseModel):
    endpoint: str
    status: int = Field(description="1 when the agent heartbeat is fresh, else 0")

    @classmethod
    def from_record(cls, record: LivenessRecord) -> "AliveResponse":
        return cls(endpoint=record.endpoint, status=1 if record.alive else 0)
