"""Template-driven portfolio allocation."""

from typing import Iterable, Sequence

from yieldcurator.errors import InvalidInputError, NoEligiblePoolsError
from yieldcurator.logger import get_logger
from yieldcurator.models.allocation import (
    AllocationRecommendation,
    AllocationSummary,
    AllocationTemplate,
    RecommendationPreview,
    RecommendedAllocation,
    RiskTier,
)
from yieldcurator.models.pool import CuratedPool, PoolCategory
from yieldcurator.services.catalog import ALLOCATION_TEMPLATES, DEFAULT_CATALOG

logger = get_logger(__name__)

SECONDARY_STABLECOIN_ALLOCATION = 15
SECONDARY_LST_ALLOCATION = 20
LP_ALLOCATION = 25
LARGE_DEPOSIT_THRESHOLD = 100_000
MARKET_AVERAGE_APY = 10

PRIMARY_EXPOSURE_CATEGORY = {
    RiskTier.CONSERVATIVE: PoolCategory.VOLATILE_LENDING,
    RiskTier.MODERATE: PoolCategory.LIQUID_STAKING_TOKEN,
    RiskTier.AGGRESSIVE: PoolCategory.LIQUID_STAKING_TOKEN,
}


class AllocationEngine:
    """Turns a capital amount and a risk tier into a multi-pool allocation.

    The engine is a fixed greedy sequence, not an optimizer:

    1. stablecoin anchor
    2. primary volatile exposure (SOL lending or liquid staking)
    3. second stablecoin (not for aggressive)
    4. second liquid staking position (not for conservative)
    5. liquidity pool position (aggressive only)
    6. leftover percentage goes to the first position
    """

    def __init__(
        self,
        catalog: Iterable[CuratedPool] = DEFAULT_CATALOG,
        templates: Iterable[AllocationTemplate] = ALLOCATION_TEMPLATES,
        min_amount: float = 100.0,
    ):
        self.catalog = tuple(catalog)
        self.templates = {t.risk_tier: t for t in templates}
        self.min_amount = min_amount
        missing = [tier.value for tier in RiskTier if tier not in self.templates]
        if missing:
            raise ValueError(f"Missing allocation templates for: {', '.join(missing)}")
        logger.info(f"AllocationEngine initialized with {len(self.catalog)} curated pools")

    def template_for(self, risk_tier: RiskTier | str) -> AllocationTemplate:
        return self.templates[RiskTier.from_label(risk_tier)]

    def eligible_pools(
        self, risk_tier: RiskTier | str, catalog: Sequence[CuratedPool] | None = None
    ) -> list[CuratedPool]:
        """Pools the tier is allowed to hold, in catalog order."""
        template = self.template_for(risk_tier)
        pools = self.catalog if catalog is None else catalog
        if template.eligibility_ceiling is None:
            return list(pools)
        return [p for p in pools if p.risk_score <= template.eligibility_ceiling]

    def recommend(
        self,
        amount: float,
        risk_tier: RiskTier | str,
        catalog: Sequence[CuratedPool] | None = None,
    ) -> AllocationRecommendation:
        """Build an allocation recommendation."""
        tier = RiskTier.from_label(risk_tier)
        template = self.templates[tier]
        logger.info(f"Generating {tier.value} allocation for amount={amount:,.2f}")

        if amount < self.min_amount:
            raise InvalidInputError(f"Amount must be at least {self.min_amount:,.0f}")

        eligible = self.eligible_pools(tier, catalog)
        logger.debug(f"{len(eligible)} eligible pools for {tier.value}")
        if not eligible:
            raise NoEligiblePoolsError()

        allocations = self._allocate(tier, template, eligible)
        if not allocations:
            raise NoEligiblePoolsError()

        summary = self._summarize(amount, allocations)
        logger.info(
            f"Allocation complete: {len(allocations)} positions, "
            f"apy={summary.expected_apy:.2f}%, risk={summary.overall_risk}"
        )

        return AllocationRecommendation(
            risk_tier=tier,
            allocations=allocations,
            summary=summary,
            insights=self._insights(allocations, summary),
            warnings=self._warnings(tier, amount, allocations),
        )

    def preview(self, risk_tier: RiskTier | str) -> RecommendationPreview:
        """Indicative APY range, pool count and risk label for a tier."""
        template = self.template_for(risk_tier)
        return RecommendationPreview(
            risk_tier=template.risk_tier,
            expected_apy=template.expected_apy_range,
            pool_count=template.pool_count,
            risk_level=template.risk_label,
        )

    def _allocate(
        self, tier: RiskTier, template: AllocationTemplate, eligible: list[CuratedPool]
    ) -> list[RecommendedAllocation]:
        allocations: list[RecommendedAllocation] = []
        remaining = 100

        def add(pool: CuratedPool, percent: int, step: str) -> None:
            nonlocal remaining
            allocations.append(_position(pool, percent))
            remaining -= percent
            logger.debug(f"{step}: {pool.id} -> {percent}% (remaining {remaining}%)")

        def first_unused(category: PoolCategory) -> CuratedPool | None:
            used = {a.pool_id for a in allocations}
            return next(
                (p for p in eligible if p.category == category and p.id not in used),
                None,
            )

        stablecoins = [p for p in eligible if p.category == PoolCategory.STABLECOIN_LENDING]

        # 1. Stablecoin anchor
        if stablecoins:
            add(stablecoins[0], min(template.anchor_allocation, remaining), "anchor")

        # 2. Primary volatile exposure
        if remaining > 0:
            primary = first_unused(PRIMARY_EXPOSURE_CATEGORY[tier])
            if primary:
                add(primary, min(template.primary_allocation, remaining), "primary")

        # 3. Secondary stablecoin
        if tier != RiskTier.AGGRESSIVE and remaining > 0:
            second_stable = first_unused(PoolCategory.STABLECOIN_LENDING)
            if second_stable:
                add(second_stable, min(SECONDARY_STABLECOIN_ALLOCATION, remaining), "secondary stablecoin")

        # 4. Secondary liquid staking
        if tier != RiskTier.CONSERVATIVE and remaining > 0:
            lst = first_unused(PoolCategory.LIQUID_STAKING_TOKEN)
            if lst:
                add(lst, min(SECONDARY_LST_ALLOCATION, remaining), "secondary lst")

        # 5. Liquidity pool
        if tier == RiskTier.AGGRESSIVE and remaining > 0:
            lp = first_unused(PoolCategory.LIQUIDITY_POOL)
            if lp:
                add(lp, min(LP_ALLOCATION, remaining), "liquidity pool")

        # 6. Residual goes to the first (safest) position
        if remaining > 0 and allocations:
            first = allocations[0]
            allocations[0] = first.model_copy(update={"allocation": first.allocation + remaining})
            logger.debug(f"Residual {remaining}% added to {first.pool_id}")

        return allocations

    def _summarize(self, amount: float, allocations: list[RecommendedAllocation]) -> AllocationSummary:
        weighted_apy = sum(a.apy * a.allocation / 100 for a in allocations)
        weighted_risk = sum(a.risk_score * a.allocation / 100 for a in allocations)

        if weighted_risk <= 20:
            overall_risk = "low"
        elif weighted_risk <= 40:
            overall_risk = "medium"
        else:
            overall_risk = "high"

        protocol_count = len({a.protocol for a in allocations})
        category_count = len({a.category for a in allocations})
        diversification = min(100, protocol_count * 15 + category_count * 20 + len(allocations) * 10)

        return AllocationSummary(
            total_amount=amount,
            expected_apy=weighted_apy,
            expected_yield=amount * weighted_apy / 100,
            weighted_risk_score=weighted_risk,
            overall_risk=overall_risk,
            diversification_score=diversification,
        )

    def _insights(self, allocations: list[RecommendedAllocation], summary: AllocationSummary) -> list[str]:
        insights = []

        stablecoin_percent = _share(allocations, PoolCategory.STABLECOIN_LENDING)
        if stablecoin_percent >= 50:
            insights.append(
                f"{stablecoin_percent}% in stablecoins provides a defensive anchor for your portfolio"
            )

        protocol_count = len({a.protocol for a in allocations})
        if protocol_count >= 3:
            insights.append(
                f"Spread across {protocol_count} protocols for smart contract risk diversification"
            )

        lst_percent = _share(allocations, PoolCategory.LIQUID_STAKING_TOKEN)
        if lst_percent > 0:
            insights.append(f"{lst_percent}% in liquid staking earns staking rewards plus lending yield")

        position = "above" if summary.expected_apy > MARKET_AVERAGE_APY else "at"
        insights.append(
            f"Expected {summary.expected_apy:.1f}% APY is {position} market average for this risk level"
        )
        return insights

    def _warnings(
        self, tier: RiskTier, amount: float, allocations: list[RecommendedAllocation]
    ) -> list[str]:
        warnings = []

        if tier == RiskTier.AGGRESSIVE:
            warnings.append("Higher yields come with higher risk - only invest what you can afford to lose")

        lp_percent = _share(allocations, PoolCategory.LIQUIDITY_POOL)
        if lp_percent > 0:
            warnings.append(f"LP positions ({lp_percent}%) are subject to impermanent loss if prices diverge")

        if amount >= LARGE_DEPOSIT_THRESHOLD:
            warnings.append("For large amounts, consider splitting deposits across multiple transactions")

        warnings.append("Past performance doesn't guarantee future results - yields can change")
        warnings.append("This is educational content, not financial advice - DYOR")
        return warnings


def _position(pool: CuratedPool, percent: int) -> RecommendedAllocation:
    return RecommendedAllocation(
        pool_id=pool.id,
        pool_name=pool.name,
        protocol=pool.protocol,
        asset=pool.asset,
        category=pool.category,
        allocation=percent,
        apy=pool.apy,
        risk_score=pool.risk_score,
        risk_level=pool.risk_level,
        reasoning=pool.reasoning,
    )


def _share(allocations: list[RecommendedAllocation], category: PoolCategory) -> int:
    return sum(a.allocation for a in allocations if a.category == category)
