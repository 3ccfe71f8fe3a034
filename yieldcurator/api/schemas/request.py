"""API request models."""

from pydantic import BaseModel, Field


class AllocationRequest(BaseModel):
    """Request model for an allocation recommendation."""

    amount: float = Field(..., description="Capital to allocate")
    risk_tolerance: str = Field(
        default="moderate",
        alias="riskTolerance",
        description="conservative, moderate, or aggressive (five-tier labels also accepted)",
    )

    model_config = {"populate_by_name": True}


class BacktestRequest(BaseModel):
    """Request model for a historical backtest."""

    pool_ids: list[str] = Field(default_factory=list, alias="poolIds", description="1 to 5 pool ids")
    initial_amount: float = Field(default=10000.0, alias="initialAmount", description="Starting capital")
    days: int = Field(default=30, description="Window length: 7, 30, or 90")
    compounding: str = Field(default="daily", description="daily, weekly, or none")

    model_config = {"populate_by_name": True}
