from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    version: str
    backends: dict[str, bool]


class VersionResponse(BaseModel):
    version: str


class CounterValue(BaseModel):
    name: str
    count: int


class CountersResponse(BaseModel):
    msg: str = "success"
    data: list[CounterValue]
