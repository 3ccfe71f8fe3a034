"""Shared fixtures for the curation tests."""

from datetime import datetime, timedelta, timezone

import pytest

from yieldcurator.models.pool import HistoryPoint, PoolHistory, PoolMetrics

NOW = datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc)


def make_pool(**overrides) -> PoolMetrics:
    """A deep, boring stablecoin lending pool unless overridden."""
    fields = {
        "pool_id": "pool-1",
        "tvl_usd": 2_000_000_000,
        "apy": 5.0,
        "apy_base": 5.0,
        "apy_reward": 0.0,
        "stablecoin": True,
        "il_risk": "none",
        "protocol": "kamino",
    }
    fields.update(overrides)
    return PoolMetrics(**fields)


def make_history(pool_id: str, apys: list[float], end: datetime = NOW, **meta) -> PoolHistory:
    """Daily series ending at `end`, oldest first."""
    count = len(apys)
    points = [
        HistoryPoint(timestamp=end - timedelta(days=count - 1 - i), apy=apy)
        for i, apy in enumerate(apys)
    ]
    return PoolHistory(pool_id=pool_id, points=points, **meta)


@pytest.fixture
def now() -> datetime:
    return NOW
