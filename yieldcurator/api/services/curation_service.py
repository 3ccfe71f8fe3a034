"""Orchestrate scoring, allocation and backtests for the API."""

import time
from datetime import date, datetime, timezone
from typing import List

from yieldcurator.api.schemas.response import PoolListResponse, ProtocolListResponse, ScoredPool
from yieldcurator.config import Settings
from yieldcurator.errors import InvalidInputError
from yieldcurator.logger import get_logger
from yieldcurator.models.allocation import AllocationRecommendation, RecommendationPreview
from yieldcurator.models.backtest import BacktestResponse
from yieldcurator.models.pool import PoolMetrics, RiskAssessment
from yieldcurator.services.allocation_engine import AllocationEngine
from yieldcurator.services.backtest_simulator import (
    BacktestSimulator,
    parse_compounding,
    validate_request,
)
from yieldcurator.services.cache import PoolCache
from yieldcurator.services.protocol_registry import ProtocolRegistry
from yieldcurator.services.risk_scorer import RiskScorer
from yieldcurator.services.yield_context import pool_yield_breakdown
from yieldcurator.services.yield_source import YieldSource

logger = get_logger(__name__)

MIN_LISTED_TVL = 100_000
MAX_LISTED_APY = 10_000
SORT_KEYS = {
    "tvl": lambda s: -s.pool.tvl_usd,
    "apy": lambda s: -s.pool.apy,
    "risk": lambda s: s.assessment.risk_score,
}


class CurationService:
    """Glue between the request surface and the curation core."""

    def __init__(
        self,
        settings: Settings,
        source: YieldSource | None = None,
        registry: ProtocolRegistry | None = None,
        engine: AllocationEngine | None = None,
        simulator: BacktestSimulator | None = None,
    ):
        self.settings = settings
        self._source = source
        self.registry = registry or ProtocolRegistry()
        self.scorer = RiskScorer(self.registry)
        self.engine = engine or AllocationEngine(min_amount=settings.min_amount)
        self.simulator = simulator or BacktestSimulator(max_pools=settings.max_backtest_pools)
        logger.info("CurationService initialized")

    @property
    def source(self) -> YieldSource:
        if self._source is None:
            cache = PoolCache(self.settings.pool_cache_path, self.settings.pool_cache_ttl_seconds)
            self._source = YieldSource(self.settings, cache=cache)
        return self._source

    def recommend(self, amount: float, risk_tolerance: str) -> AllocationRecommendation:
        return self.engine.recommend(amount, risk_tolerance)

    def preview(self, risk_tolerance: str) -> RecommendationPreview:
        return self.engine.preview(risk_tolerance)

    def score(self, pool: PoolMetrics) -> RiskAssessment:
        return self.scorer.assess(pool)

    def protocols(self, as_of: date | None = None) -> ProtocolListResponse:
        entries = self.registry.all(as_of)
        return ProtocolListResponse(protocols=entries, count=len(entries))

    async def backtest(
        self,
        pool_ids: List[str],
        initial_amount: float,
        days: int,
        compounding: str,
        now: datetime | None = None,
    ) -> BacktestResponse:
        """Fetch histories concurrently and run the simulator."""
        start_time = time.time()

        # Reject bad input before touching the network
        validate_request(pool_ids, days, self.settings.max_backtest_pools)
        mode = parse_compounding(compounding)
        if initial_amount < self.settings.min_amount:
            raise InvalidInputError(f"initialAmount must be at least {self.settings.min_amount:,.0f}")

        logger.info(f"Step 1: Fetching history for {len(pool_ids)} pools")
        histories = await self.source.fetch_histories(pool_ids)

        logger.info("Step 2: Simulating")
        response = self.simulator.run(
            histories,
            initial_amount=initial_amount,
            compounding=mode,
            window_days=days,
            now=now or datetime.now(timezone.utc),
            pool_ids=pool_ids,
        )

        logger.info(f"Backtest complete in {time.time() - start_time:.2f}s")
        return response

    async def list_pools(
        self,
        chain: str | None = None,
        stablecoin_only: bool = False,
        max_risk_score: int = 100,
        min_tvl: float = 0,
        sort_by: str = "tvl",
        limit: int = 100,
    ) -> PoolListResponse:
        """Score live pools and filter them."""
        if limit < 1:
            raise InvalidInputError("limit must be at least 1")
        if sort_by not in SORT_KEYS:
            raise InvalidInputError(f"sortBy must be one of: {', '.join(SORT_KEYS)}")

        pools = await self.source.fetch_pools()
        scored = []
        for pool in pools:
            if pool.tvl_usd < max(MIN_LISTED_TVL, min_tvl):
                continue
            if pool.apy <= 0 or pool.apy > MAX_LISTED_APY:
                continue
            if chain and (pool.chain or "").lower() != chain.lower():
                continue
            if stablecoin_only and not pool.stablecoin:
                continue
            assessment = self.scorer.assess(pool)
            if assessment.risk_score > max_risk_score:
                continue
            scored.append(
                ScoredPool(
                    pool=pool,
                    assessment=assessment,
                    yield_breakdown=pool_yield_breakdown(pool),
                )
            )

        scored.sort(key=SORT_KEYS[sort_by])
        logger.info(f"{len(scored)} of {len(pools)} pools match filters")
        return PoolListResponse(pools=scored[:limit], total_count=len(scored))

    async def aclose(self):
        """Clean up resources."""
        if self._source is not None:
            try:
                await self._source.aclose()
            except Exception as e:
                logger.warning(f"Error closing yield source: {e}")
