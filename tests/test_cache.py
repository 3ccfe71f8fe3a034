"""Tests for the SQLite pool snapshot cache."""

from yieldcurator.models.pool import PoolMetrics
from yieldcurator.services.cache import PoolCache


def pools():
    return [
        PoolMetrics(pool_id="a", tvl_usd=1e9, apy=5, protocol="kamino", chain="Solana", symbol="USDC"),
        PoolMetrics(pool_id="b", tvl_usd=2e7, apy=25, apy_reward=20, il_risk="yes", protocol="orca"),
    ]


def test_empty_cache_misses(tmp_path):
    cache = PoolCache(tmp_path / "cache.db")
    assert cache.get_pools() is None


def test_save_and_load(tmp_path):
    cache = PoolCache(tmp_path / "cache.db")
    cache.save_pools(pools())

    loaded = cache.get_pools()
    assert {p.pool_id for p in loaded} == {"a", "b"}
    assert {p.pool_id: p for p in loaded}["b"] == pools()[1]


def test_save_replaces_previous_snapshot(tmp_path):
    cache = PoolCache(tmp_path / "cache.db")
    cache.save_pools(pools())
    cache.save_pools(pools()[:1])

    assert [p.pool_id for p in cache.get_pools()] == ["a"]


def test_stale_snapshot_misses(tmp_path):
    cache = PoolCache(tmp_path / "cache.db", ttl_seconds=-1)
    cache.save_pools(pools())
    assert cache.get_pools() is None


def test_clear(tmp_path):
    cache = PoolCache(tmp_path / "cache.db")
    cache.save_pools(pools())
    cache.clear()
    assert cache.get_pools() is None
