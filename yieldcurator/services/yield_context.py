"""Yield context: APY source breakdown, TVL trend and volatility metrics."""

from datetime import datetime, timedelta, timezone
from typing import Sequence

from yieldcurator.logger import get_logger
from yieldcurator.models.analytics import (
    TvlTrend,
    TvlTrendData,
    VolatilityLevel,
    VolatilityMetrics,
    YieldBreakdown,
    YieldComponent,
)
from yieldcurator.models.pool import HistoryPoint, PoolMetrics
from yieldcurator.services.protocol_registry import normalize_slug
from yieldcurator.services.risk_scorer import LIQUID_STAKING_PROTOCOLS

logger = get_logger(__name__)

# APY-equivalent guesses for protocols with a live points program
POINTS_PROGRAM_APY = {
    "kamino": 2.0,
    "marginfi": 3.0,
    "jupiter": 2.0,
    "drift": 2.0,
    "sanctum": 2.0,
}

# Extra yield LSTs earn from MEV tips
LST_MEV_BOOST = {
    "jito": 1.5,
    "jupiter": 1.2,
}

RISK_FREE_RATE = 5.0


def _lookup(table: dict, protocol: str):
    slug = normalize_slug(protocol)
    if not slug:
        return None
    if slug in table:
        return table[slug]
    return table.get(slug.split("-")[0])


def is_liquid_staking(protocol: str) -> bool:
    slug = normalize_slug(protocol)
    return any(p in slug for p in LIQUID_STAKING_PROTOCOLS)


def yield_breakdown(
    apy_base: float,
    apy_reward: float | None,
    protocol: str = "",
    is_lst: bool = False,
) -> YieldBreakdown:
    """Split a pool's APY into its sources."""
    base = apy_base or 0.0
    reward = apy_reward or 0.0
    sources = [YieldComponent.BASE]

    if reward > 0:
        sources.append(YieldComponent.REWARD)

    points = _lookup(POINTS_PROGRAM_APY, protocol)
    if points is not None:
        sources.append(YieldComponent.POINTS)

    mev = _lookup(LST_MEV_BOOST, protocol) if is_lst else None
    if mev is not None:
        sources.append(YieldComponent.MEV)

    return YieldBreakdown(
        base=base,
        reward=reward,
        points=points,
        mev=mev,
        total=base + reward,
        sustainable=base + (mev or 0.0),
        sources=sources,
    )


def pool_yield_breakdown(pool: PoolMetrics) -> YieldBreakdown:
    return yield_breakdown(
        pool.apy_base, pool.apy_reward, pool.protocol, is_lst=is_liquid_staking(pool.protocol)
    )


def tvl_trend(current_tvl: float, tvl_7d_ago: float | None, tvl_30d_ago: float | None) -> TvlTrendData:
    """Classify TVL movement. Missing or zero past values count as no change."""
    change_7d = (current_tvl - tvl_7d_ago) / tvl_7d_ago * 100 if tvl_7d_ago else 0.0
    change_30d = (current_tvl - tvl_30d_ago) / tvl_30d_ago * 100 if tvl_30d_ago else 0.0

    if change_30d > 20:
        trend = TvlTrend.GROWING
    elif change_30d < -20:
        trend = TvlTrend.DECLINING
    elif abs(change_7d) > 15:
        trend = TvlTrend.VOLATILE
    else:
        trend = TvlTrend.STABLE

    return TvlTrendData(
        trend=trend,
        change_7d=round(change_7d, 1),
        change_30d=round(change_30d, 1),
        is_healthy=change_30d > -15,
    )


def as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def history_tvl_trend(points: Sequence[HistoryPoint], now: datetime) -> TvlTrendData | None:
    """TVL trend from a history series, using the last sample at or before each lookback."""
    series = sorted(points, key=lambda p: as_utc(p.timestamp))
    now = as_utc(now)
    series = [p for p in series if as_utc(p.timestamp) <= now]
    if not any(p.tvl_usd > 0 for p in series):
        logger.debug("No TVL samples, skipping trend")
        return None

    def tvl_at(days: int) -> float | None:
        target = now - timedelta(days=days)
        earlier = [p for p in series if as_utc(p.timestamp) <= target]
        return earlier[-1].tvl_usd if earlier else None

    return tvl_trend(series[-1].tvl_usd, tvl_at(7), tvl_at(30))


def volatility_metrics(avg_apy: float, sigma: float, risk_free_rate: float = RISK_FREE_RATE) -> VolatilityMetrics:
    """Sharpe ratio, volatility band and stability score for an APY series."""
    sharpe = (avg_apy - risk_free_rate) / sigma if sigma > 0 else 0.0

    if sigma < 1:
        level = VolatilityLevel.LOW
    elif sigma < 5:
        level = VolatilityLevel.MEDIUM
    elif sigma < 15:
        level = VolatilityLevel.HIGH
    else:
        level = VolatilityLevel.VERY_HIGH

    stability = max(0.0, min(100.0, 100 - sigma * 5))

    return VolatilityMetrics(
        sigma=round(sigma, 2),
        sharpe_ratio=round(sharpe, 2),
        volatility_level=level,
        apy_stability_score=round(stability),
    )
