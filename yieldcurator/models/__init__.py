"""Data models for Yield Curator."""

from yieldcurator.models.pool import (
    CuratedPool,
    HistoryPoint,
    ILRisk,
    LiquidityRisk,
    PoolCategory,
    PoolHistory,
    PoolMetrics,
    RiskAssessment,
    RiskBreakdown,
    RiskLevel,
)
from yieldcurator.models.allocation import (
    AllocationRecommendation,
    AllocationSummary,
    AllocationTemplate,
    RecommendationPreview,
    RecommendedAllocation,
    RiskTier,
)
from yieldcurator.models.analytics import (
    TvlTrend,
    TvlTrendData,
    VolatilityLevel,
    VolatilityMetrics,
    YieldBreakdown,
    YieldComponent,
)
from yieldcurator.models.backtest import (
    BacktestDataPoint,
    BacktestPeriod,
    BacktestResponse,
    BacktestResult,
    BacktestSettings,
    CompoundingMode,
)
from yieldcurator.models.protocol import ProtocolRisk, ProtocolTrust, TrustLevel

__all__ = [
    "CuratedPool",
    "HistoryPoint",
    "ILRisk",
    "LiquidityRisk",
    "PoolCategory",
    "PoolHistory",
    "PoolMetrics",
    "RiskAssessment",
    "RiskBreakdown",
    "RiskLevel",
    "AllocationRecommendation",
    "AllocationSummary",
    "AllocationTemplate",
    "RecommendationPreview",
    "RecommendedAllocation",
    "RiskTier",
    "BacktestDataPoint",
    "BacktestPeriod",
    "BacktestResponse",
    "BacktestResult",
    "BacktestSettings",
    "CompoundingMode",
    "TvlTrend",
    "TvlTrendData",
    "VolatilityLevel",
    "VolatilityMetrics",
    "YieldBreakdown",
    "YieldComponent",
    "ProtocolRisk",
    "ProtocolTrust",
    "TrustLevel",
]
