"""Static curation tables: the default pool catalog and allocation templates.

Catalog order matters. The allocation engine always takes the first pool of a
category, so safer or more established pools are listed first.
"""

from yieldcurator.models.allocation import AllocationTemplate, RiskTier
from yieldcurator.models.pool import CuratedPool, PoolCategory

DEFAULT_CATALOG: tuple[CuratedPool, ...] = (
    # Conservative / low risk
    CuratedPool(
        id="kamino-usdc-lending",
        name="USDC Lending",
        protocol="Kamino",
        asset="USDC",
        apy=6.5,
        risk_score=12,
        category=PoolCategory.STABLECOIN_LENDING,
        reasoning="Stable yield from the most liquid stablecoin lending market on Solana",
    ),
    CuratedPool(
        id="marginfi-usdc",
        name="USDC Supply",
        protocol="Marginfi",
        asset="USDC",
        apy=5.8,
        risk_score=15,
        category=PoolCategory.STABLECOIN_LENDING,
        reasoning="Diversified stablecoin exposure with battle-tested protocol",
    ),
    CuratedPool(
        id="kamino-sol-lending",
        name="SOL Lending",
        protocol="Kamino",
        asset="SOL",
        apy=5.2,
        risk_score=18,
        category=PoolCategory.VOLATILE_LENDING,
        reasoning="Earn yield on SOL with minimal smart contract risk",
    ),
    # Moderate risk
    CuratedPool(
        id="jito-jitosol",
        name="JitoSOL Staking",
        protocol="Jito",
        asset="JitoSOL",
        apy=7.8,
        risk_score=22,
        category=PoolCategory.LIQUID_STAKING_TOKEN,
        reasoning="Liquid staking with MEV rewards - enhanced SOL yield",
    ),
    CuratedPool(
        id="marinade-msol",
        name="mSOL Staking",
        protocol="Marinade",
        asset="mSOL",
        apy=7.2,
        risk_score=20,
        category=PoolCategory.LIQUID_STAKING_TOKEN,
        reasoning="Decentralized liquid staking with validator diversification",
    ),
    CuratedPool(
        id="kamino-usdt-lending",
        name="USDT Lending",
        protocol="Kamino",
        asset="USDT",
        apy=5.5,
        risk_score=16,
        category=PoolCategory.STABLECOIN_LENDING,
        reasoning="Stablecoin diversification from USDC exposure",
    ),
    # Aggressive / higher risk
    CuratedPool(
        id="meteora-sol-usdc",
        name="SOL-USDC LP",
        protocol="Meteora",
        asset="SOL-USDC",
        apy=15.5,
        risk_score=45,
        category=PoolCategory.LIQUIDITY_POOL,
        reasoning="High yield from the most liquid trading pair, with IL risk",
    ),
    CuratedPool(
        id="orca-sol-usdc-clmm",
        name="SOL-USDC CLMM",
        protocol="Orca",
        asset="SOL-USDC",
        apy=22.0,
        risk_score=55,
        category=PoolCategory.LIQUIDITY_POOL,
        reasoning="Concentrated liquidity for higher yields, requires active management",
    ),
    CuratedPool(
        id="drift-usdc-perp",
        name="USDC Insurance",
        protocol="Drift",
        asset="USDC",
        apy=12.0,
        risk_score=38,
        category=PoolCategory.VAULT,
        reasoning="Insurance fund yield with perp trading volume exposure",
    ),
)

ALLOCATION_TEMPLATES: tuple[AllocationTemplate, ...] = (
    AllocationTemplate(
        risk_tier=RiskTier.CONSERVATIVE,
        target_risk_score=15,
        max_risk_score=25,
        eligibility_ceiling=25,
        stablecoin_min=60,
        stablecoin_max=80,
        lst_max=30,
        lp_max=0,
        pool_count=3,
        anchor_allocation=50,
        primary_allocation=25,
        expected_apy_range="4-7%",
        risk_label="Low",
    ),
    AllocationTemplate(
        risk_tier=RiskTier.MODERATE,
        target_risk_score=25,
        max_risk_score=40,
        eligibility_ceiling=45,
        stablecoin_min=30,
        stablecoin_max=50,
        lst_max=40,
        lp_max=20,
        pool_count=4,
        anchor_allocation=35,
        primary_allocation=30,
        expected_apy_range="7-12%",
        risk_label="Medium",
    ),
    AllocationTemplate(
        risk_tier=RiskTier.AGGRESSIVE,
        target_risk_score=40,
        max_risk_score=60,
        eligibility_ceiling=None,
        stablecoin_min=15,
        stablecoin_max=30,
        lst_max=50,
        lp_max=40,
        pool_count=5,
        anchor_allocation=20,
        primary_allocation=25,
        expected_apy_range="12-25%+",
        risk_label="Higher",
    ),
)
