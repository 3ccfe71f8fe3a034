"""Pool data models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


class ILRisk(str, Enum):
    """Impermanent-loss exposure reported by the market feed."""

    NONE = "none"
    LOW = "low"
    HIGH = "high"

    @classmethod
    def parse(cls, value: "str | ILRisk | None") -> "ILRisk":
        """Accept the feed's yes/no spelling as well as our own values."""
        if isinstance(value, ILRisk):
            return value
        normalized = (value or "").strip().lower()
        if normalized in ("no", "none"):
            return cls.NONE
        if normalized in ("yes", "high"):
            return cls.HIGH
        return cls.LOW


class RiskLevel(str, Enum):
    """Display band for a pool risk score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"

    @classmethod
    def from_score(cls, score: int) -> "RiskLevel":
        if score <= 25:
            return cls.LOW
        if score <= 40:
            return cls.MEDIUM
        if score <= 60:
            return cls.HIGH
        return cls.VERY_HIGH


class PoolCategory(str, Enum):
    """What kind of yield position a curated pool is."""

    STABLECOIN_LENDING = "stablecoin_lending"
    VOLATILE_LENDING = "volatile_lending"
    LIQUID_STAKING_TOKEN = "liquid_staking_token"
    LIQUIDITY_POOL = "liquidity_pool"
    VAULT = "vault"


class PoolMetrics(BaseModel):
    """Raw market metrics for one yield pool."""

    pool_id: str = Field(description="Stable pool identifier from the market feed")
    tvl_usd: float = Field(default=0, description="Total value locked in USD")
    apy: float = Field(default=0, description="Total APY in percent")
    apy_base: float = Field(default=0, description="Organic APY (fees, interest)")
    apy_reward: float = Field(default=0, description="Token-emission APY")
    stablecoin: bool = Field(default=False, description="Whether the pool is a stablecoin pair")
    il_risk: ILRisk = Field(default=ILRisk.NONE, description="Impermanent-loss exposure")
    protocol: str = Field(default="", description="Protocol slug used for the trust lookup")
    chain: str | None = None
    symbol: str | None = None

    @field_validator("il_risk", mode="before")
    @classmethod
    def _parse_il_risk(cls, value):
        return ILRisk.parse(value)

    @field_validator("apy", "apy_base", "apy_reward", "tvl_usd", mode="before")
    @classmethod
    def _none_as_zero(cls, value):
        # The feed reports missing figures as null
        return 0 if value is None else value


class RiskBreakdown(BaseModel):
    """Per-factor contributions to a risk score."""

    tvl: int = Field(ge=0, le=30, description="Liquidity depth risk")
    apy_sustainability: int = Field(ge=0, le=25, description="Yield sustainability risk")
    asset_volatility: int = Field(ge=0, le=20, description="Underlying asset volatility risk")
    impermanent_loss: int = Field(ge=0, le=15, description="Impermanent-loss risk")
    protocol_trust: int = Field(ge=0, le=10, description="Protocol trust risk")

    @property
    def total(self) -> int:
        return (
            self.tvl
            + self.apy_sustainability
            + self.asset_volatility
            + self.impermanent_loss
            + self.protocol_trust
        )


class SlippageEstimates(BaseModel):
    """Estimated exit slippage in percent for a few position sizes."""

    at_100k: float
    at_500k: float
    at_1m: float
    at_5m: float
    at_10m: float


class LiquidityRisk(BaseModel):
    """How easily a position of a given size can exit the pool."""

    score: int = Field(ge=0, le=100, description="Liquidity risk (0-100, higher = harder to exit)")
    pool_tvl: float = Field(ge=0)
    safe_allocation_percent: float = Field(ge=0, description="Share of TVL a position can safely take")
    max_safe_allocation: float = Field(ge=0, description="Largest position in USD considered safe")
    slippage_estimates: SlippageEstimates
    exitability_rating: str = Field(description="excellent, good, moderate, poor, or very_poor")


class RiskAssessment(BaseModel):
    """Scored view of a pool."""

    pool_id: str
    risk_score: int = Field(ge=0, le=100)
    risk_level: RiskLevel
    breakdown: RiskBreakdown
    liquidity: LiquidityRisk | None = None


class CuratedPool(BaseModel):
    """A pool in the curated catalog the allocation engine draws from."""

    id: str
    name: str
    protocol: str
    asset: str
    apy: float
    risk_score: int = Field(ge=0, le=100)
    risk_level: RiskLevel
    category: PoolCategory
    reasoning: str = Field(default="", description="Why this pool is in the catalog")

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _derive_risk_level(cls, data):
        if isinstance(data, dict) and data.get("risk_level") is None and "risk_score" in data:
            data = {**data, "risk_level": RiskLevel.from_score(int(data["risk_score"]))}
        return data


class HistoryPoint(BaseModel):
    """One daily sample of a pool's yield history."""

    timestamp: datetime
    apy: float = 0
    apy_base: float = 0
    apy_reward: float = 0
    tvl_usd: float = 0

    @field_validator("apy", "apy_base", "apy_reward", "tvl_usd", mode="before")
    @classmethod
    def _none_as_zero(cls, value):
        return 0 if value is None else value


class PoolHistory(BaseModel):
    """A pool's historical series plus the metadata shown next to results."""

    pool_id: str
    project: str = ""
    symbol: str = ""
    points: list[HistoryPoint] = Field(default_factory=list)
