"""Yield context models: where a yield comes from and how steady it is."""

from enum import Enum

from pydantic import BaseModel, Field


class YieldComponent(str, Enum):
    BASE = "base"
    REWARD = "reward"
    POINTS = "points"
    MEV = "mev"


class YieldBreakdown(BaseModel):
    """A pool's APY split by source."""

    base: float = Field(description="Organic APY (fees, interest, staking)")
    reward: float = Field(description="Token-emission APY")
    points: float | None = Field(
        default=None, description="Rough APY-equivalent of an active points program"
    )
    mev: float | None = Field(default=None, description="MEV boost for liquid staking tokens")
    total: float = Field(description="Base plus reward, as reported by the feed")
    sustainable: float = Field(description="Base plus MEV; excludes emissions and points")
    sources: list[YieldComponent]


class TvlTrend(str, Enum):
    GROWING = "growing"
    STABLE = "stable"
    DECLINING = "declining"
    VOLATILE = "volatile"


class TvlTrendData(BaseModel):
    """Direction of a pool's TVL over the last week and month."""

    trend: TvlTrend
    change_7d: float = Field(description="TVL change over 7 days (percent)")
    change_30d: float = Field(description="TVL change over 30 days (percent)")
    is_healthy: bool = Field(description="False when TVL fell more than 15% in 30 days")


class VolatilityLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


class VolatilityMetrics(BaseModel):
    """Risk-adjusted view of an APY series."""

    sigma: float = Field(ge=0, description="Standard deviation of APY")
    sharpe_ratio: float = Field(description="(mean APY - risk-free rate) / sigma")
    volatility_level: VolatilityLevel
    apy_stability_score: int = Field(ge=0, le=100, description="Higher is steadier")
