"""
HTTP-level tests for the gateway routes.

Exercises every route through the FastAPI TestClient with the in-memory
backend from conftest, including the ``{"msg": code}`` error envelope.
"""

import math

from query_service.app.config import VERSION
from query_service.app.core import ALIVE_COUNTER

NOW = 1_700_000_000


def _pair(endpoint, counter):
    return {"endpoint": endpoint, "counter": counter}


# ── /graph/history ────────────────────────────────────────────────

class TestHistoryRoutes:
    def test_post_history(self, client, backend):
        backend.add_series("h1", "cpu.load", [(NOW - 60, 0.4), (NOW, math.nan)])
        backend.add_series("h2", "cpu.load", [(NOW, 0.9)])
        backend.fail("h2", "cpu.load")

        resp = client.post("/graph/history", json={
            "start": NOW - 3600,
            "end": NOW,
            "cf": "AVERAGE",
            "endpoint_counters": [_pair("h1", "cpu.load"), _pair("h2", "cpu.load")],
        })

        assert resp.status_code == 200
        body = resp.json()
        assert len(body) == 1
        assert body[0]["endpoint"] == "h1"
        assert body[0]["step"] == 60
        assert body[0]["values"] == [
            {"timestamp": NOW - 60, "value": 0.4},
            {"timestamp": NOW, "value": None},
        ]

    def test_post_history_empty_payload(self, client):
        resp = client.post("/graph/history", json={"start": 0, "end": 1, "endpoint_counters": []})
        assert resp.status_code == 400
        assert resp.json() == {"msg": "empty_payload"}

    def test_post_history_invalid_cf(self, client):
        resp = client.post("/graph/history", json={
            "start": 0, "end": 1, "cf": "SUM",
            "endpoint_counters": [_pair("h1", "cpu.load")],
        })
        assert resp.status_code == 400
        assert resp.json() == {"msg": "invalid_cf"}

    def test_post_history_malformed_body(self, client):
        resp = client.post("/graph/history", json={"endpoint_counters": "h1"})
        assert resp.status_code == 422

    def test_history_one(self, client, backend):
        backend.add_series("h1", "cpu.load", [(NOW, 1.5)])
        resp = client.get("/graph/history/one", params={
            "endpoint": "h1", "counter": "cpu.load", "cf": "MAX",
        })
        assert resp.status_code == 200
        assert resp.json()["values"] == [{"timestamp": NOW, "value": 1.5}]

    def test_history_one_missing_counter(self, client):
        resp = client.get("/graph/history/one", params={"endpoint": "h1"})
        assert resp.status_code == 400
        assert resp.json() == {"msg": "empty_endpoint_counter"}

    def test_history_one_unknown_series(self, client):
        resp = client.get("/graph/history/one", params={"endpoint": "h1", "counter": "nope"})
        assert resp.status_code == 404
        assert resp.json() == {"msg": "no_such_series"}

    def test_history_one_backend_down(self, client, backend):
        backend.add_series("h1", "cpu.load", [])
        backend.fail("h1", "cpu.load")
        resp = client.get("/graph/history/one", params={"endpoint": "h1", "counter": "cpu.load"})
        assert resp.status_code == 502
        assert resp.json() == {"msg": "backend_unavailable"}


# ── /graph/info, /graph/last ──────────────────────────────────────

class TestInfoAndLastRoutes:
    def test_info(self, client, backend):
        backend.add_series("h1", "cpu.load", [])
        resp = client.post("/graph/info", json=[_pair("h1", "cpu.load"), _pair("h1", "gone")])
        assert resp.status_code == 200
        body = resp.json()
        assert len(body) == 1
        assert body[0]["consol_fun"] == "AVERAGE"
        assert body[0]["filename"] == "/data/h1/cpu.load.rrd"

    def test_info_one(self, client, backend):
        backend.add_series("h1", "cpu.load", [])
        resp = client.get("/graph/info/one", params={"endpoint": "h1", "counter": "cpu.load"})
        assert resp.status_code == 200
        assert resp.json()["addr"] == "10.0.0.1:6070"

    def test_last(self, client, backend):
        backend.add_last("h1", "cpu.load", NOW, 0.25)
        resp = client.post("/graph/last", json=[_pair("h1", "cpu.load")])
        assert resp.status_code == 200
        assert resp.json() == [{
            "endpoint": "h1",
            "counter": "cpu.load",
            "value": {"timestamp": NOW, "value": 0.25},
        }]

    def test_last_raw(self, client, backend):
        backend.add_last("h1", "cpu.load", NOW, 0.25)
        resp = client.post("/graph/last/raw", json=[_pair("h1", "cpu.load")])
        assert resp.status_code == 200
        assert backend.calls == [("query_last_raw", "h1", "cpu.load")]

    def test_last_empty_payload(self, client):
        resp = client.post("/graph/last", json=[])
        assert resp.status_code == 400
        assert resp.json() == {"msg": "empty_payload"}


# ── /graph/sdp ────────────────────────────────────────────────────

class TestChartRoute:
    def test_chart_columns(self, client, backend):
        backend.add_series("h1", "cpu.load", [(1, 10.0), (2, 20.0), (3, 30.0)])
        backend.add_series("h1", "mem.used", [(1, 1.0), (3, 3.0)])

        resp = client.get("/graph/sdp/one", params=[
            ("endpoint", "h1"),
            ("counter", "cpu.load"),
            ("counter", "mem.used"),
            ("duration", "1h"),
        ])

        assert resp.status_code == 200
        body = resp.json()
        assert body["timestamp"] == [1, 2, 3]
        assert body["data"]["cpu.load"] == [10.0, 20.0, 30.0]
        assert body["data"]["mem.used"] == [1.0, None, None]

    def test_chart_timestamp_alignment(self, client, backend):
        backend.add_series("h1", "cpu.load", [(1, 10.0), (2, 20.0), (3, 30.0)])
        backend.add_series("h1", "mem.used", [(1, 1.0), (3, 3.0)])

        resp = client.get("/graph/sdp/one", params=[
            ("endpoint", "h1"),
            ("counter", "cpu.load"),
            ("counter", "mem.used"),
            ("duration", "1h"),
            ("align", "timestamp"),
        ])

        assert resp.json()["data"]["mem.used"] == [1.0, None, 3.0]

    def test_chart_invalid_duration(self, client, backend):
        resp = client.get("/graph/sdp/one", params={
            "endpoint": "h1", "counter": "cpu.load", "duration": "5w",
        })
        assert resp.status_code == 400
        assert resp.json() == {"msg": "invalid_duration"}
        assert backend.calls == []

    def test_chart_requires_counter(self, client):
        resp = client.get("/graph/sdp/one", params={"endpoint": "h1", "duration": "1h"})
        assert resp.status_code == 400
        assert resp.json() == {"msg": "empty_endpoint_counter"}

    def test_alive(self, client, backend):
        backend.add_last("h1", ALIVE_COUNTER, NOW - 30)
        backend.add_last("h2", ALIVE_COUNTER, NOW - 3600)

        resp = client.post("/graph/sdp/alive", json=[{"endpoint": "h1"}, {"endpoint": "h2"}])

        assert resp.status_code == 200
        assert resp.json() == [
            {"endpoint": "h1", "status": 1},
            {"endpoint": "h2", "status": 0},
        ]


# ── statistics / health ───────────────────────────────────────────

class TestServiceRoutes:
    def test_counter_all(self, client, backend):
        backend.add_last("h1", "cpu.load", NOW)
        client.post("/graph/last", json=[_pair("h1", "cpu.load")])

        resp = client.get("/counter/all")

        assert resp.status_code == 200
        body = resp.json()
        assert body["msg"] == "success"
        counts = {c["name"]: c["count"] for c in body["data"]}
        assert counts["last_requests"] == 1
        assert counts["last_request_items"] == 1

    def test_statistics_alias(self, client):
        resp = client.get("/statistics/all")
        assert resp.status_code == 200
        assert resp.json()["msg"] == "success"

    def test_version(self, client):
        assert client.get("/version").json() == {"version": VERSION}

    def test_health_without_ping(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["backends"] == {}

    def test_health_degraded(self, client, backend):
        backend.ping = lambda: {"http://n1:6071": False}
        body = client.get("/health").json()
        assert body["status"] == "degraded"
        assert body["backends"] == {"http://n1:6071": False}

    def test_metrics_endpoint(self, client):
        resp = client.get("/metrics")
        assert resp.status_code == 200
        assert "text/plain" in resp.headers["content-type"]

    def test_cors_preflight(self, client):
        resp = client.options("/graph/last", headers={
            "Origin": "http://dashboard.local",
            "Access-Control-Request-Method": "POST",
        })
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] in ("*", "http://dashboard.local")


def test_malformed_storage_body_is_a_502(stats):
    from unittest.mock import MagicMock

    from fastapi.testclient import TestClient

    from query_service.app.dependencies import get_gateway
    from query_service.app.gateway import QueryGateway
    from query_service.app.main import app
    from query_service.app.storage import HttpStorageBackend

    response = MagicMock(status_code=200)
    response.json.return_value = [{"values": []}]
    session = MagicMock()
    session.post.return_value = response
    gateway = QueryGateway(HttpStorageBackend(["http://n1:6071"], session=session), stats=stats)

    app.dependency_overrides[get_gateway] = lambda: gateway
    try:
        resp = TestClient(app).get("/graph/history/one", params={"endpoint": "h1", "counter": "cpu.load"})
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 502
    assert resp.json() == {"msg": "backend_unavailable"}
