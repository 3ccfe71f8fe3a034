import json
import sqlite3
import time
from pathlib import Path
from typing import List, Optional

from yieldcurator.logger import get_logger
from yieldcurator.models.pool import PoolMetrics

logger = get_logger(__name__)

DB_PATH = Path("yieldcurator.db")


class PoolCache:
    """SQLite snapshot of the yield pool index, one row per pool."""

    def __init__(self, db_path: Path | str = DB_PATH, ttl_seconds: float = 300):
        self.db_path = Path(db_path)
        self.ttl_seconds = ttl_seconds
        self._init_db()
        logger.debug(f"PoolCache initialized with db: {self.db_path} (ttl {ttl_seconds}s)")

    def _init_db(self):
        """Initialize the database table."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS pools (
                    id TEXT PRIMARY KEY,
                    protocol TEXT,
                    symbol TEXT,
                    chain TEXT,
                    tvl_usd REAL,
                    apy REAL,
                    data TEXT NOT NULL,
                    cached_at REAL NOT NULL
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_pools_tvl ON pools(tvl_usd)")
            conn.commit()
        logger.debug("Database table initialized")

    def get_pools(self) -> Optional[List[PoolMetrics]]:
        """Return cached pools, or None when the cache is empty or stale."""
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute("SELECT MIN(cached_at), COUNT(*) FROM pools").fetchone()
            cached_at, count = row
            if count == 0:
                logger.info("Cache miss: no cached pools found")
                return None

            cache_age = time.time() - cached_at
            if cache_age > self.ttl_seconds:
                logger.info(f"Cache stale: pools cached {cache_age:.0f}s ago")
                return None

            rows = conn.execute("SELECT data FROM pools").fetchall()

        try:
            pools = [PoolMetrics(**json.loads(r[0])) for r in rows]
        except (ValueError, TypeError) as e:
            logger.error(f"Cache parse error: {e}")
            return None

        logger.info(f"Cache hit: {len(pools)} pools (cached {cache_age:.0f}s ago)")
        return pools

    def save_pools(self, pools: List[PoolMetrics]):
        """Replace the cached snapshot."""
        logger.info(f"Saving {len(pools)} pools to cache...")
        start = time.time()
        cached_at = time.time()

        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM pools")
            conn.executemany(
                """
                INSERT OR REPLACE INTO pools
                (id, protocol, symbol, chain, tvl_usd, apy, data, cached_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        p.pool_id,
                        p.protocol,
                        p.symbol,
                        p.chain,
                        p.tvl_usd,
                        p.apy,
                        p.model_dump_json(),
                        cached_at,
                    )
                    for p in pools
                ],
            )
            conn.commit()

        logger.info(f"Cache save complete in {time.time() - start:.2f}s")

    def clear(self):
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM pools")
            conn.commit()
