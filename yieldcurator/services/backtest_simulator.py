"""Historical yield backtesting under different compounding regimes."""

from datetime import datetime, timedelta
from typing import Sequence

import numpy as np

from yieldcurator.errors import InvalidInputError, NoPoolResultsError
from yieldcurator.logger import get_logger
from yieldcurator.models.backtest import (
    BacktestDataPoint,
    BacktestPeriod,
    BacktestResponse,
    BacktestResult,
    BacktestSettings,
    CompoundingMode,
)
from yieldcurator.models.pool import HistoryPoint, PoolHistory
from yieldcurator.services.yield_context import as_utc, history_tvl_trend, volatility_metrics

logger = get_logger(__name__)

SUPPORTED_WINDOWS = (7, 30, 90)
MAX_POOLS = 5
DAYS_PER_YEAR = 365
WEEKS_PER_YEAR = 52


def parse_compounding(value: "str | CompoundingMode") -> CompoundingMode:
    try:
        return CompoundingMode(value)
    except ValueError:
        raise InvalidInputError("compounding must be daily, weekly, or none") from None


def validate_request(pool_ids: Sequence[str], window_days: int, max_pools: int = MAX_POOLS) -> None:
    """Batch-level checks shared by the simulator and the request surface."""
    if not pool_ids:
        raise InvalidInputError("poolIds must be a non-empty array")
    if len(pool_ids) > max_pools:
        raise InvalidInputError(f"Maximum {max_pools} pools allowed for backtest")
    if window_days not in SUPPORTED_WINDOWS:
        raise InvalidInputError("days must be 7, 30, or 90")


class BacktestSimulator:
    """Replays pool APY history to estimate what a deposit would have earned."""

    def __init__(self, max_pools: int = MAX_POOLS):
        self.max_pools = max_pools

    def run(
        self,
        pools: Sequence[PoolHistory | None],
        initial_amount: float,
        compounding: CompoundingMode | str,
        window_days: int,
        now: datetime,
        pool_ids: Sequence[str] | None = None,
    ) -> BacktestResponse:
        """Simulate every pool over the trailing window.

        Args:
            pools: One entry per requested pool; None marks a pool the data
                source could not provide.
            initial_amount: Capital deposited at the start of the window
            compounding: daily, weekly, or none
            window_days: 7, 30, or 90
            now: End of the window; results depend on nothing else time-related
            pool_ids: Requested ids, used to label unavailable pools. Defaults to
                the ids carried by the histories.
        """
        if pool_ids is None:
            pool_ids = [p.pool_id if p else "" for p in pools]
        if len(pool_ids) != len(pools):
            raise InvalidInputError("poolIds and histories must have the same length")

        validate_request(pool_ids, window_days, self.max_pools)
        mode = parse_compounding(compounding)
        if initial_amount <= 0:
            raise InvalidInputError("initialAmount must be positive")

        now = as_utc(now)
        cutoff = now - timedelta(days=window_days)
        logger.info(
            f"Running backtest: {len(pools)} pools, {window_days} days, "
            f"{mode.value} compounding, initial={initial_amount:,.2f}"
        )

        results = []
        for pool_id, history in zip(pool_ids, pools):
            if history is None:
                logger.warning(f"No history available for pool {pool_id}, using empty result")
                results.append(self._empty_result(pool_id, "", "", initial_amount))
                continue

            window = [p for p in history.points if as_utc(p.timestamp) >= cutoff]
            result = self.simulate(
                pool_id,
                window,
                initial_amount,
                mode,
                project=history.project,
                symbol=history.symbol,
            )
            if result.data_available:
                result = result.model_copy(
                    update={"tvl_trend": history_tvl_trend(history.points, now)}
                )
            results.append(result)

        if not any(r.data_available for r in results):
            raise NoPoolResultsError()

        # Pools without data are left out of the race, even against a negative return
        winner = self._winner(results)
        logger.info(f"Backtest complete, winner: {winner}")

        return BacktestResponse(
            results=results,
            winner=winner,
            period=BacktestPeriod(
                start=cutoff.date().isoformat(),
                end=now.date().isoformat(),
                days=window_days,
            ),
            settings=BacktestSettings(initial_amount=initial_amount, compounding=mode),
        )

    def simulate(
        self,
        pool_id: str,
        points: Sequence[HistoryPoint],
        initial_amount: float,
        compounding: CompoundingMode,
        project: str = "",
        symbol: str = "",
    ) -> BacktestResult:
        """Walk one pool's series day by day."""
        if not points:
            logger.debug(f"Empty series for pool {pool_id}")
            return self._empty_result(pool_id, project, symbol, initial_amount)

        series = sorted(points, key=lambda p: as_utc(p.timestamp))
        value = initial_amount
        # Yield that is earned but never reinvested
        accrued = 0.0
        data_points = []

        for i, point in enumerate(series):
            apy = point.apy
            daily_rate = apy / DAYS_PER_YEAR / 100

            if compounding == CompoundingMode.DAILY:
                value *= 1 + daily_rate
            elif compounding == CompoundingMode.WEEKLY:
                if i % 7 == 6:
                    value *= 1 + apy / WEEKS_PER_YEAR / 100
                else:
                    accrued += value * daily_rate
            else:
                accrued += initial_amount * daily_rate

            cumulative = initial_amount + accrued if compounding == CompoundingMode.NONE else value
            data_points.append(
                BacktestDataPoint(
                    date=as_utc(point.timestamp).date().isoformat(),
                    apy=round(apy, 2),
                    cumulative_value=round(cumulative, 2),
                )
            )

        final_amount = initial_amount + accrued if compounding == CompoundingMode.NONE else value
        total_return = final_amount - initial_amount
        apys = np.array([p.apy for p in series], dtype=float)
        avg_apy = float(np.mean(apys))
        # Population standard deviation (ddof=0)
        sigma = float(np.std(apys))

        logger.debug(
            f"Pool {pool_id}: final={final_amount:.2f}, "
            f"return={total_return / initial_amount:.3%}, days={len(series)}"
        )

        return BacktestResult(
            pool_id=pool_id,
            project=project,
            symbol=symbol,
            initial_amount=initial_amount,
            final_amount=round(final_amount, 2),
            total_return=round(total_return, 2),
            total_return_percent=round(total_return / initial_amount * 100, 3),
            avg_apy=round(avg_apy, 2),
            min_apy=round(float(np.min(apys)), 2),
            max_apy=round(float(np.max(apys)), 2),
            volatility=round(sigma, 2),
            volatility_metrics=volatility_metrics(avg_apy, sigma),
            data_points=data_points,
        )

    def _winner(self, results: list[BacktestResult]) -> str:
        best = None
        for result in results:
            if not result.data_available:
                continue
            if best is None or result.total_return_percent > best.total_return_percent:
                best = result
        return best.pool_id if best else ""

    def _empty_result(
        self, pool_id: str, project: str, symbol: str, initial_amount: float
    ) -> BacktestResult:
        return BacktestResult(
            pool_id=pool_id,
            project=project,
            symbol=symbol,
            initial_amount=initial_amount,
            final_amount=initial_amount,
            total_return=0,
            total_return_percent=0,
            data_available=False,
        )
