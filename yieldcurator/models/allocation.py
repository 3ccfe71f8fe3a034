"""Allocation recommendation data models."""

from enum import Enum

from pydantic import BaseModel, Field

from yieldcurator.errors import InvalidInputError
from yieldcurator.models.pool import PoolCategory, RiskLevel


# Five product-facing tiers collapse onto the three template bands
_TIER_ALIASES = {
    "preserver": "conservative",
    "steady": "conservative",
    "balanced": "moderate",
    "growth": "aggressive",
    "maximizer": "aggressive",
}


class RiskTier(str, Enum):
    """User risk preference driving template selection."""

    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"

    @classmethod
    def from_label(cls, label: "str | RiskTier") -> "RiskTier":
        """Resolve a tier name, including the five-tier product labels."""
        if isinstance(label, RiskTier):
            return label
        normalized = (label or "").strip().lower()
        normalized = _TIER_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidInputError(
                f"Unsupported risk tolerance '{label}': expected conservative, moderate, or aggressive"
            ) from None


class AllocationTemplate(BaseModel):
    """Static allocation bounds for one risk tier."""

    risk_tier: RiskTier
    target_risk_score: int = Field(ge=0, le=100)
    max_risk_score: int = Field(ge=0, le=100)
    eligibility_ceiling: int | None = Field(
        default=None, description="Highest pool risk score admitted; None admits every pool"
    )
    stablecoin_min: int = Field(ge=0, le=100, description="Stablecoin allocation floor (percent)")
    stablecoin_max: int = Field(ge=0, le=100, description="Stablecoin allocation ceiling (percent)")
    lst_max: int = Field(ge=0, le=100, description="Liquid staking allocation ceiling (percent)")
    lp_max: int = Field(ge=0, le=100, description="Liquidity pool allocation ceiling (percent)")
    pool_count: int = Field(ge=1, description="Target number of positions")
    anchor_allocation: int = Field(ge=0, le=100, description="Stablecoin anchor size (percent)")
    primary_allocation: int = Field(ge=0, le=100, description="Primary volatile exposure size (percent)")
    expected_apy_range: str = Field(description="Indicative APY range shown in previews")
    risk_label: str = Field(description="Human-readable risk label")

    model_config = {"frozen": True}


class RecommendedAllocation(BaseModel):
    """A single pool position inside a recommendation."""

    pool_id: str
    pool_name: str
    protocol: str
    asset: str
    category: PoolCategory
    allocation: int = Field(ge=0, le=100, description="Percentage of capital")
    apy: float
    risk_score: int = Field(ge=0, le=100)
    risk_level: RiskLevel
    reasoning: str


class AllocationSummary(BaseModel):
    """Capital-weighted figures for a recommendation."""

    total_amount: float = Field(ge=0)
    expected_apy: float = Field(description="Capital-weighted APY in percent")
    expected_yield: float = Field(description="Expected annual yield in currency units")
    weighted_risk_score: float = Field(ge=0, le=100)
    overall_risk: str = Field(description="low, medium, or high")
    diversification_score: int = Field(ge=0, le=100)


class AllocationRecommendation(BaseModel):
    """Complete allocation recommendation."""

    risk_tier: RiskTier
    allocations: list[RecommendedAllocation]
    summary: AllocationSummary
    insights: list[str]
    warnings: list[str]


class RecommendationPreview(BaseModel):
    """Quick look at what a tier tends to produce."""

    risk_tier: RiskTier
    expected_apy: str
    pool_count: int
    risk_level: str
