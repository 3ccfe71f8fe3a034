"""Backtest data models."""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field

from yieldcurator.models.analytics import TvlTrendData, VolatilityMetrics


class CompoundingMode(str, Enum):
    """How often simulated yield is reinvested."""

    DAILY = "daily"
    WEEKLY = "weekly"
    NONE = "none"


class BacktestDataPoint(BaseModel):
    """One day of a simulated compounding walk."""

    date: str = Field(description="ISO date of the sample")
    apy: float
    cumulative_value: float


class BacktestResult(BaseModel):
    """Simulated performance of a single pool."""

    pool_id: str
    project: str = ""
    symbol: str = ""
    initial_amount: float
    final_amount: float
    total_return: float
    total_return_percent: float
    avg_apy: float = 0
    min_apy: float = 0
    max_apy: float = 0
    volatility: float = Field(0, description="Population standard deviation of daily APY")
    volatility_metrics: VolatilityMetrics | None = None
    tvl_trend: TvlTrendData | None = Field(None, description="TVL direction at the end of the window")
    data_available: bool = Field(True, description="False when no history covered the window")
    data_points: List[BacktestDataPoint] = Field(default_factory=list)


class BacktestPeriod(BaseModel):
    """Window the backtest covered."""

    start: str
    end: str
    days: int


class BacktestSettings(BaseModel):
    """Settings the backtest ran with."""

    initial_amount: float
    compounding: CompoundingMode


class BacktestResponse(BaseModel):
    """Results for a batch of pools."""

    results: List[BacktestResult]
    winner: str = Field(description="Pool id with the highest percentage return")
    period: BacktestPeriod
    settings: BacktestSettings
