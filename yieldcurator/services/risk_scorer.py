"""Multi-factor risk scoring for yield pools."""

from yieldcurator.logger import get_logger
from yieldcurator.models.pool import (
    ILRisk,
    LiquidityRisk,
    PoolMetrics,
    RiskAssessment,
    RiskBreakdown,
    RiskLevel,
    SlippageEstimates,
)
from yieldcurator.models.protocol import TrustLevel
from yieldcurator.services.protocol_registry import ProtocolRegistry

logger = get_logger(__name__)

TVL_MAX = 30
APY_MAX = 25
VOLATILITY_MAX = 20
IL_MAX = 15
PROTOCOL_MAX = 10

REWARD_DOMINANCE_RATIO = 0.7
REWARD_DOMINANCE_PENALTY = 5

PROTOCOL_TRUST_SCORES = {
    TrustLevel.HIGH: 0,
    TrustLevel.MEDIUM: 5,
    TrustLevel.LOW: 10,
}
# Protocols missing from the registry are treated as medium trust
UNKNOWN_PROTOCOL_SCORE = 5

LENDING_PROTOCOLS = (
    "aave", "compound", "morpho", "spark", "maker", "sky-lending", "maple",
    "euler", "radiant", "benqi", "venus", "kamino", "marginfi", "save", "solend",
)
LIQUID_STAKING_PROTOCOLS = (
    "lido", "rocket-pool", "jito", "marinade", "ether.fi", "frax-ether",
    "sanctum", "solblaze",
)


class RiskScorer:
    """Scores a pool's risk from 0 (safest) to 100 (riskiest)."""

    def __init__(self, registry: ProtocolRegistry | None = None):
        self.registry = registry or ProtocolRegistry()

    def score(self, pool: PoolMetrics) -> tuple[int, RiskBreakdown]:
        """Score a pool and return the total with its factor breakdown."""
        breakdown = RiskBreakdown(
            tvl=self._tvl_score(pool.tvl_usd),
            apy_sustainability=self._apy_score(pool.apy, pool.apy_reward),
            asset_volatility=0 if pool.stablecoin else 10,
            impermanent_loss=IL_MAX if pool.il_risk == ILRisk.HIGH else 0,
            protocol_trust=self._protocol_score(pool.protocol),
        )
        total = max(0, min(100, breakdown.total))
        logger.debug(f"Scored pool {pool.pool_id}: {total} ({breakdown.model_dump()})")
        return total, breakdown

    def assess(self, pool: PoolMetrics, include_liquidity: bool = True) -> RiskAssessment:
        """Score a pool and wrap the result with its display band."""
        total, breakdown = self.score(pool)
        return RiskAssessment(
            pool_id=pool.pool_id,
            risk_score=total,
            risk_level=RiskLevel.from_score(total),
            breakdown=breakdown,
            liquidity=self.assess_liquidity(pool.tvl_usd, pool.protocol) if include_liquidity else None,
        )

    def _tvl_score(self, tvl_usd: float) -> int:
        tvl = max(tvl_usd, 0.0)
        if tvl < 10_000_000:
            return 30
        if tvl < 100_000_000:
            return 20
        if tvl < 1_000_000_000:
            return 10
        return 0

    def _apy_score(self, apy: float, apy_reward: float) -> int:
        if apy > 50:
            score = 25
        elif apy > 20:
            score = 15
        elif apy > 10:
            score = 10
        else:
            score = 0

        reward_ratio = apy_reward / max(apy, 1) if apy > 0 else 0.0
        if reward_ratio > REWARD_DOMINANCE_RATIO:
            score += REWARD_DOMINANCE_PENALTY

        return min(score, APY_MAX)

    def _protocol_score(self, protocol: str) -> int:
        level = self.registry.trust_level(protocol)
        if level is None:
            logger.debug(f"Protocol '{protocol}' not in registry, using default trust score")
            return UNKNOWN_PROTOCOL_SCORE
        return PROTOCOL_TRUST_SCORES[level]

    def assess_liquidity(self, tvl_usd: float, protocol: str = "") -> LiquidityRisk:
        """Estimate how hard it is to exit a position in this pool."""
        tvl = max(tvl_usd, 0.0)
        slug = protocol.lower()
        is_lending = any(p in slug for p in LENDING_PROTOCOLS)
        is_staking = any(p in slug for p in LIQUID_STAKING_PROTOCOLS)
        slippage_factor = 0.3 if is_staking else 0.5 if is_lending else 1.0

        if tvl >= 1_000_000_000:
            safe_percent = 5.0
        elif tvl >= 100_000_000:
            safe_percent = 3.0
        elif tvl >= 10_000_000:
            safe_percent = 2.0
        else:
            safe_percent = 1.0
        if is_lending:
            safe_percent *= 2

        def slippage(position: float) -> float:
            if tvl == 0:
                return 100.0
            ratio = position / tvl
            return min(round(ratio * 100 * slippage_factor * (1 + ratio * 2), 2), 100.0)

        estimates = SlippageEstimates(
            at_100k=slippage(100_000),
            at_500k=slippage(500_000),
            at_1m=slippage(1_000_000),
            at_5m=slippage(5_000_000),
            at_10m=slippage(10_000_000),
        )

        thresholds = [
            (1_000_000_000, 5),
            (500_000_000, 10),
            (100_000_000, 20),
            (50_000_000, 30),
            (10_000_000, 45),
            (5_000_000, 60),
            (1_000_000, 75),
        ]
        score = next((s for floor, s in thresholds if tvl >= floor), 90)

        if is_lending:
            score = max(0, score - 10)
        if is_staking:
            score = max(0, score - 15)
        if estimates.at_1m > 5:
            score = min(100, score + 10)
        elif estimates.at_1m < 0.5:
            score = max(0, score - 10)

        if score <= 15:
            rating = "excellent"
        elif score <= 30:
            rating = "good"
        elif score <= 50:
            rating = "moderate"
        elif score <= 70:
            rating = "poor"
        else:
            rating = "very_poor"

        return LiquidityRisk(
            score=score,
            pool_tvl=tvl,
            safe_allocation_percent=safe_percent,
            max_safe_allocation=tvl * safe_percent / 100,
            slippage_estimates=estimates,
            exitability_rating=rating,
        )
