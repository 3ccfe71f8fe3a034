"""Yield pool data from the DefiLlama yields API."""

import asyncio
from typing import Sequence

import httpx

from yieldcurator.config import Settings
from yieldcurator.errors import UpstreamError
from yieldcurator.logger import get_logger
from yieldcurator.models.pool import HistoryPoint, PoolHistory, PoolMetrics
from yieldcurator.services.cache import PoolCache

logger = get_logger(__name__)


def parse_pool(item: dict) -> PoolMetrics:
    """Convert a raw /pools entry into PoolMetrics."""
    project = item.get("project") or ""
    return PoolMetrics(
        pool_id=item["pool"],
        tvl_usd=item.get("tvlUsd"),
        apy=item.get("apy"),
        apy_base=item.get("apyBase"),
        apy_reward=item.get("apyReward"),
        stablecoin=bool(item.get("stablecoin")),
        il_risk=item.get("ilRisk"),
        protocol="-".join(project.lower().split()),
        chain=item.get("chain"),
        symbol=item.get("symbol"),
    )


def _data_list(body) -> list:
    """The `data` array of a yields API response."""
    if not isinstance(body, dict):
        raise ValueError(f"Expected a JSON object, got {type(body).__name__}")
    data = body.get("data")
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError(f"Expected `data` to be a list, got {type(data).__name__}")
    return data


def parse_history_point(item: dict) -> HistoryPoint:
    return HistoryPoint(
        timestamp=item["timestamp"],
        apy=item.get("apy"),
        apy_base=item.get("apyBase"),
        apy_reward=item.get("apyReward"),
        tvl_usd=item.get("tvlUsd"),
    )


class YieldSource:
    """Fetches pool metrics and APY history for the curation core."""

    def __init__(
        self,
        settings: Settings,
        cache: PoolCache | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = settings.yields_api_base_url
        self.client = client or httpx.AsyncClient(base_url=self.base_url, timeout=settings.http_timeout)
        self.cache = cache
        logger.info(f"YieldSource initialized with base URL: {self.base_url}")

    async def fetch_pools(self) -> list[PoolMetrics]:
        """Fetch every pool in the yields index."""
        if self.cache:
            cached = self.cache.get_pools()
            if cached:
                return cached

        logger.info("Fetching pool index")
        try:
            response = await self.client.get("/pools")
            response.raise_for_status()
            raw = _data_list(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch pool index: {e}")
            raise UpstreamError(f"Failed to fetch yield pools: {e}") from e

        pools = []
        for item in raw:
            try:
                pools.append(parse_pool(item))
            except (KeyError, TypeError, AttributeError, ValueError) as e:
                logger.debug(f"Skipping malformed pool entry: {e}")
        logger.info(f"Fetched {len(pools)} pools")

        if self.cache and pools:
            self.cache.save_pools(pools)
        return pools

    async def fetch_history(
        self, pool_id: str, pool_index: dict[str, PoolMetrics] | None = None
    ) -> PoolHistory | None:
        """Fetch one pool's daily history, or None if it cannot be had.

        When a pool index is given, pools missing from it are treated as
        unknown and not fetched.
        """
        metadata = None
        if pool_index:
            metadata = pool_index.get(pool_id)
            if metadata is None:
                logger.warning(f"Pool {pool_id} not found in pool index")
                return None

        try:
            response = await self.client.get(f"/chart/{pool_id}")
            response.raise_for_status()
            points = [parse_history_point(item) for item in _data_list(response.json())]
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"Error fetching history for pool {pool_id}: {e}")
            return None

        logger.debug(f"Fetched {len(points)} history points for {pool_id}")
        return PoolHistory(
            pool_id=pool_id,
            project=metadata.protocol if metadata else "",
            symbol=(metadata.symbol or "") if metadata else "",
            points=points,
        )

    async def fetch_histories(self, pool_ids: Sequence[str]) -> list[PoolHistory | None]:
        """Fetch several histories concurrently; failures come back as None."""
        try:
            index = {p.pool_id: p for p in await self.fetch_pools()}
        except UpstreamError:
            logger.warning("Pool index unavailable, fetching histories without metadata")
            index = {}

        logger.info(f"Fetching history for {len(pool_ids)} pools")
        results = await asyncio.gather(
            *(self.fetch_history(pid, index) for pid in pool_ids), return_exceptions=True
        )

        histories = []
        for pool_id, result in zip(pool_ids, results):
            if isinstance(result, Exception):
                logger.error(f"Unexpected error fetching history for pool {pool_id}: {result}", exc_info=result)
                histories.append(None)
            else:
                histories.append(result)
        return histories

    async def aclose(self):
        """Close the HTTP client."""
        await self.client.aclose()
