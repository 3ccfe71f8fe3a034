"""Tests for template-driven allocation."""

import itertools

import pytest

from yieldcurator.errors import InvalidInputError, NoEligiblePoolsError
from yieldcurator.models.allocation import RiskTier
from yieldcurator.models.pool import CuratedPool, PoolCategory
from yieldcurator.services.allocation_engine import AllocationEngine
from yieldcurator.services.catalog import ALLOCATION_TEMPLATES, DEFAULT_CATALOG


def curated(pool_id, category, apy, risk_score, protocol="Kamino"):
    return CuratedPool(
        id=pool_id,
        name=pool_id,
        protocol=protocol,
        asset="X",
        apy=apy,
        risk_score=risk_score,
        category=category,
    )


STABLE = curated("usdc", PoolCategory.STABLECOIN_LENDING, 6.5, 12)
SOL = curated("sol", PoolCategory.VOLATILE_LENDING, 5.2, 18)


@pytest.fixture
def engine():
    return AllocationEngine()


def allocation_map(result):
    return {a.pool_id: a.allocation for a in result.allocations}


# ── default catalog ──


def test_conservative_allocation(engine):
    result = engine.recommend(10_000, "conservative")

    assert allocation_map(result) == {
        "kamino-usdc-lending": 60,
        "kamino-sol-lending": 25,
        "marginfi-usdc": 15,
    }
    assert result.allocations[0].pool_id == "kamino-usdc-lending"
    assert result.summary.expected_apy == pytest.approx(6.07)
    assert result.summary.expected_yield == pytest.approx(607)
    assert result.summary.weighted_risk_score == pytest.approx(13.95)
    assert result.summary.overall_risk == "low"
    assert result.summary.diversification_score == 100


def test_moderate_allocation(engine):
    result = engine.recommend(10_000, "moderate")

    assert allocation_map(result) == {
        "kamino-usdc-lending": 35,
        "jito-jitosol": 30,
        "marginfi-usdc": 15,
        "marinade-msol": 20,
    }
    assert result.summary.expected_apy == pytest.approx(6.925)
    assert result.summary.weighted_risk_score == pytest.approx(17.05)
    assert any("liquid staking" in i for i in result.insights)
    assert any("4 protocols" in i for i in result.insights)


def test_aggressive_allocation_includes_lp_and_warnings(engine):
    result = engine.recommend(10_000, "aggressive")

    assert allocation_map(result) == {
        "kamino-usdc-lending": 30,
        "jito-jitosol": 25,
        "marinade-msol": 20,
        "meteora-sol-usdc": 25,
    }
    assert result.summary.overall_risk == "medium"
    assert any("impermanent loss" in w for w in result.warnings)
    assert any("afford to lose" in w for w in result.warnings)


def test_two_pool_catalog_puts_residual_on_anchor(engine):
    result = engine.recommend(10_000, "conservative", catalog=[STABLE, SOL])

    assert allocation_map(result) == {"usdc": 75, "sol": 25}
    assert 5.2 <= result.summary.expected_apy <= 6.5
    assert result.summary.expected_apy == pytest.approx(6.175)


def test_single_position_takes_everything(engine):
    jito = curated("jito", PoolCategory.LIQUID_STAKING_TOKEN, 7.8, 22, protocol="Jito")
    result = engine.recommend(1_000, "moderate", catalog=[jito])
    assert allocation_map(result) == {"jito": 100}


# ── invariants ──


def test_allocations_sum_to_100_with_unique_eligible_pools(engine):
    subsets = [
        combo
        for size in range(1, 5)
        for combo in itertools.combinations(DEFAULT_CATALOG, size)
    ]
    for tier, combo in itertools.product(RiskTier, subsets):
        try:
            result = engine.recommend(5_000, tier, catalog=list(combo))
        except NoEligiblePoolsError:
            continue

        ids = [a.pool_id for a in result.allocations]
        assert sum(a.allocation for a in result.allocations) == 100
        assert len(ids) == len(set(ids))
        assert all(a.allocation > 0 for a in result.allocations)

        ceiling = engine.template_for(tier).eligibility_ceiling
        if ceiling is not None:
            assert all(a.risk_score <= ceiling for a in result.allocations)


def test_recommend_is_deterministic(engine):
    first = engine.recommend(25_000, "moderate")
    second = engine.recommend(25_000, "moderate")
    assert first.model_dump() == second.model_dump()


# ── errors ──


def test_amount_below_minimum_is_rejected(engine):
    with pytest.raises(InvalidInputError):
        engine.recommend(99, "moderate")


def test_minimum_amount_is_accepted(engine):
    result = engine.recommend(100, "moderate")
    assert sum(a.allocation for a in result.allocations) == 100


def test_unknown_tier_is_rejected(engine):
    with pytest.raises(InvalidInputError):
        engine.recommend(10_000, "yolo")


def test_no_eligible_pools(engine):
    risky = [curated("lp", PoolCategory.LIQUIDITY_POOL, 30, 70)]
    with pytest.raises(NoEligiblePoolsError):
        engine.recommend(10_000, "conservative", catalog=risky)


def test_eligible_but_unplaceable_pools(engine):
    vault_only = [curated("vault", PoolCategory.VAULT, 12, 20)]
    with pytest.raises(NoEligiblePoolsError):
        engine.recommend(10_000, "moderate", catalog=vault_only)


def test_no_eligible_pools_is_an_input_error():
    assert issubclass(NoEligiblePoolsError, InvalidInputError)
    assert issubclass(InvalidInputError, ValueError)


# ── tiers, insights, warnings ──


@pytest.mark.parametrize(
    "label, tier",
    [
        ("preserver", RiskTier.CONSERVATIVE),
        ("steady", RiskTier.CONSERVATIVE),
        ("balanced", RiskTier.MODERATE),
        ("growth", RiskTier.AGGRESSIVE),
        ("maximizer", RiskTier.AGGRESSIVE),
        (" Moderate ", RiskTier.MODERATE),
    ],
)
def test_product_tier_labels(engine, label, tier):
    assert engine.recommend(10_000, label).risk_tier == tier


def test_stablecoin_insight_and_standard_warnings(engine):
    result = engine.recommend(10_000, "conservative")

    assert result.insights[0].startswith("75% in stablecoins")
    assert result.insights[-1].startswith("Expected 6.1% APY is at market average")
    assert len(result.warnings) == 2
    assert "not financial advice" in result.warnings[-1]


def test_large_amount_warning(engine):
    result = engine.recommend(250_000, "conservative")
    assert any("splitting deposits" in w for w in result.warnings)


def test_preview(engine):
    preview = engine.preview("conservative")
    assert preview.expected_apy == "4-7%"
    assert preview.pool_count == 3
    assert preview.risk_level == "Low"
    assert engine.preview("growth").risk_tier == RiskTier.AGGRESSIVE


def test_engine_requires_every_template():
    with pytest.raises(ValueError):
        AllocationEngine(templates=ALLOCATION_TEMPLATES[:2])
