"""Tests for the curation HTTP API."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from yieldcurator.api.main import app
from yieldcurator.api.routers.curate import get_curation_service
from yieldcurator.api.services.curation_service import CurationService
from yieldcurator.config import Settings
from yieldcurator.errors import UpstreamError
from yieldcurator.models.pool import PoolMetrics

from conftest import make_history


class FakeSource:
    """In-memory stand-in for the yield source."""

    def __init__(self, histories=None, pools=None, error=None):
        self.histories = histories or {}
        self.pools = pools or []
        self.error = error
        self.closed = False

    async def fetch_histories(self, pool_ids):
        if self.error:
            raise self.error
        return [self.histories.get(pid) for pid in pool_ids]

    async def fetch_pools(self):
        if self.error:
            raise self.error
        return self.pools

    async def aclose(self):
        self.closed = True


LIVE_POOLS = [
    PoolMetrics(pool_id="deep", tvl_usd=2e9, apy=5, apy_base=5, stablecoin=True, protocol="kamino", chain="Solana"),
    PoolMetrics(pool_id="mid", tvl_usd=5e7, apy=9, protocol="jito", chain="Solana"),
    PoolMetrics(pool_id="risky", tvl_usd=5e6, apy=80, apy_reward=70, il_risk="yes", protocol="x", chain="Ethereum"),
    PoolMetrics(pool_id="dust", tvl_usd=5e4, apy=4, protocol="kamino", chain="Solana"),
    PoolMetrics(pool_id="broken", tvl_usd=5e8, apy=50_000, protocol="kamino", chain="Solana"),
]


@pytest.fixture
def source():
    return FakeSource(
        histories={
            "low": make_history("low", [5.0] * 30, end=datetime.now(timezone.utc)),
            "high": make_history("high", [7.2] * 30, end=datetime.now(timezone.utc)),
        },
        pools=LIVE_POOLS,
    )


@pytest.fixture
def client(source):
    app.dependency_overrides[get_curation_service] = lambda: CurationService(Settings(), source=source)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/").json()["status"] == "running"


# ── allocation ──


def test_allocation(client):
    response = client.post(
        "/api/curate/allocation", json={"amount": 10000, "riskTolerance": "conservative"}
    )
    assert response.status_code == 200

    body = response.json()
    assert body["risk_tier"] == "conservative"
    assert sum(a["allocation"] for a in body["allocations"]) == 100
    assert body["summary"]["total_amount"] == 10000


def test_allocation_defaults_to_moderate(client):
    response = client.post("/api/curate/allocation", json={"amount": 5000})
    assert response.json()["risk_tier"] == "moderate"


@pytest.mark.parametrize(
    "payload",
    [
        {"amount": 50, "riskTolerance": "moderate"},
        {"amount": 10000, "riskTolerance": "yolo"},
    ],
)
def test_allocation_rejects_bad_input(client, payload):
    assert client.post("/api/curate/allocation", json=payload).status_code == 400


def test_allocation_preview(client):
    body = client.get("/api/curate/allocation/preview/aggressive").json()
    assert body["expected_apy"] == "12-25%+"
    assert client.get("/api/curate/allocation/preview/nope").status_code == 400


# ── backtest ──


def test_backtest(client, source):
    response = client.post(
        "/api/curate/backtest",
        json={"poolIds": ["low", "high", "gone"], "initialAmount": 10000, "days": 30},
    )
    assert response.status_code == 200

    body = response.json()
    assert body["winner"] == "high"
    assert [r["pool_id"] for r in body["results"]] == ["low", "high", "gone"]
    assert body["results"][2]["data_available"] is False
    assert body["settings"]["compounding"] == "daily"
    assert source.closed


@pytest.mark.parametrize(
    "payload",
    [
        {"poolIds": []},
        {"poolIds": ["a", "b", "c", "d", "e", "f"]},
        {"poolIds": ["low"], "days": 15},
        {"poolIds": ["low"], "compounding": "monthly"},
        {"poolIds": ["low"], "initialAmount": 50},
        {"poolIds": ["gone"]},
    ],
)
def test_backtest_rejects_bad_input(client, payload):
    assert client.post("/api/curate/backtest", json=payload).status_code == 400


def test_backtest_internal_error():
    broken = FakeSource(error=RuntimeError("disk on fire"))
    app.dependency_overrides[get_curation_service] = lambda: CurationService(Settings(), source=broken)
    try:
        response = TestClient(app).post("/api/curate/backtest", json={"poolIds": ["low"]})
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 500


# ── scoring and listings ──


def test_score(client):
    response = client.post(
        "/api/curate/score",
        json={"pool_id": "p", "tvl_usd": 5e6, "apy": 80, "apy_reward": 70, "il_risk": "yes", "protocol": "x"},
    )
    assert response.status_code == 200

    body = response.json()
    assert body["risk_score"] == 85
    assert body["risk_level"] == "very_high"
    assert body["breakdown"]["tvl"] == 30


def test_pools_are_filtered_and_sorted(client):
    body = client.get("/api/curate/pools", params={"sort_by": "risk"}).json()

    ids = [p["pool"]["pool_id"] for p in body["pools"]]
    assert ids == ["deep", "mid", "risky"]
    assert body["total_count"] == 3


def test_pools_filters(client):
    body = client.get(
        "/api/curate/pools", params={"chain": "solana", "stablecoin_only": True}
    ).json()
    assert [p["pool"]["pool_id"] for p in body["pools"]] == ["deep"]

    body = client.get("/api/curate/pools", params={"max_risk_score": 40}).json()
    assert "risky" not in [p["pool"]["pool_id"] for p in body["pools"]]


def test_pools_bad_sort(client):
    assert client.get("/api/curate/pools", params={"sort_by": "vibes"}).status_code == 400


def test_pools_upstream_failure():
    broken = FakeSource(error=UpstreamError("feed down"))
    app.dependency_overrides[get_curation_service] = lambda: CurationService(Settings(), source=broken)
    try:
        response = TestClient(app).get("/api/curate/pools")
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 502


def test_protocols(client):
    body = client.get("/api/curate/protocols").json()
    assert body["count"] == 12
    scores = [p["trust_score"] for p in body["protocols"]]
    assert scores == sorted(scores, reverse=True)


def test_pools_include_yield_breakdown(client):
    body = client.get("/api/curate/pools", params={"sort_by": "risk"}).json()
    deep = body["pools"][0]

    assert deep["yield_breakdown"]["base"] == 5
    assert deep["yield_breakdown"]["points"] == 2.0
    assert deep["yield_breakdown"]["sustainable"] == 5


@pytest.mark.parametrize("limit", [0, -1, 5000])
def test_pools_limit_is_bounded(client, limit):
    assert client.get("/api/curate/pools", params={"limit": limit}).status_code == 422


def test_pools_limit_truncates(client):
    body = client.get("/api/curate/pools", params={"limit": 1}).json()
    assert len(body["pools"]) == 1
    assert body["total_count"] == 3


def test_requests_accept_both_spellings_and_responses_are_snake_case(client):
    camel = client.post("/api/curate/backtest", json={"poolIds": ["low"], "initialAmount": 5000})
    snake = client.post("/api/curate/backtest", json={"pool_ids": ["low"], "initial_amount": 5000})

    assert camel.status_code == snake.status_code == 200
    result = camel.json()["results"][0]
    assert {"pool_id", "total_return_percent", "data_points", "volatility_metrics"} <= result.keys()
    assert "poolId" not in result
    assert camel.json()["settings"]["initial_amount"] == 5000
