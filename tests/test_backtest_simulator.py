"""Tests for historical backtesting."""

from datetime import timedelta

import pytest

from yieldcurator.errors import InvalidInputError, NoPoolResultsError
from yieldcurator.models.backtest import CompoundingMode
from yieldcurator.models.pool import HistoryPoint, PoolHistory
from yieldcurator.services.backtest_simulator import BacktestSimulator

from conftest import NOW, make_history


@pytest.fixture
def simulator():
    return BacktestSimulator()


def run(simulator, pools, compounding="daily", window_days=30, initial_amount=10_000, **kwargs):
    return simulator.run(
        pools,
        initial_amount=initial_amount,
        compounding=compounding,
        window_days=window_days,
        now=NOW,
        **kwargs,
    )


# ── compounding ──


def test_flat_apy_daily_compounding(simulator):
    response = run(simulator, [make_history("a", [10.0] * 30)])
    result = response.results[0]

    assert result.final_amount == pytest.approx(10_082.5, abs=0.5)
    assert result.total_return_percent == pytest.approx(0.825, abs=0.01)
    assert result.volatility == 0
    assert result.avg_apy == result.min_apy == result.max_apy == 10
    assert response.winner == "a"


def test_zero_apy_keeps_principal(simulator):
    for mode in CompoundingMode:
        result = run(simulator, [make_history("a", [0.0] * 30)], compounding=mode).results[0]
        assert result.final_amount == 10_000
        assert result.total_return == 0


def test_simple_interest(simulator):
    result = run(simulator, [make_history("a", [10.0] * 30)], compounding="none").results[0]
    assert result.final_amount == pytest.approx(10_000 + 30 * 10_000 * 0.10 / 365, abs=0.01)


def test_weekly_compounding_applies_on_week_boundaries(simulator):
    result = run(
        simulator, [make_history("a", [36.5] * 14)], compounding="weekly"
    ).results[0]

    assert result.final_amount == pytest.approx(10_000 * (1 + 36.5 / 52 / 100) ** 2, abs=0.01)
    # Nothing is reinvested before the first boundary
    assert [p.cumulative_value for p in result.data_points[:6]] == [10_000] * 6
    assert result.data_points[6].cumulative_value > 10_000


def test_daily_beats_simple_interest(simulator):
    history = make_history("a", [12.0] * 90)
    daily = run(simulator, [history], compounding="daily", window_days=90).results[0]
    simple = run(simulator, [history], compounding="none", window_days=90).results[0]
    assert daily.final_amount > simple.final_amount


# ── statistics and series ──


def test_apy_statistics_use_population_std(simulator):
    result = run(simulator, [make_history("a", [5.0, 10.0, 15.0])]).results[0]

    assert result.avg_apy == 10
    assert result.min_apy == 5
    assert result.max_apy == 15
    assert result.volatility == pytest.approx(4.08)


def test_points_are_sorted_and_dated(simulator):
    history = make_history("a", [1.0, 2.0, 3.0] * 10)
    shuffled = PoolHistory(pool_id="a", points=list(reversed(history.points)))

    result = run(simulator, [shuffled]).results[0]
    dates = [p.date for p in result.data_points]

    assert dates == sorted(dates)
    assert dates[0] == "2025-06-01"
    assert dates[-1] == "2025-06-30"
    values = [p.cumulative_value for p in result.data_points]
    assert values == sorted(values)


def test_window_filters_old_points(simulator):
    points = [HistoryPoint(timestamp=NOW - timedelta(days=k), apy=5.0) for k in range(60)]
    history = PoolHistory(pool_id="a", points=points)

    result = run(simulator, [history], window_days=7).results[0]
    # Offsets 0 through 7; the cutoff itself is inside the window
    assert len(result.data_points) == 8


def test_naive_timestamps_are_treated_as_utc(simulator):
    naive_now = NOW.replace(tzinfo=None)
    points = [
        HistoryPoint(timestamp=naive_now - timedelta(days=k), apy=4.0) for k in range(7)
    ]
    result = simulator.run(
        [PoolHistory(pool_id="a", points=points)],
        initial_amount=1_000,
        compounding="daily",
        window_days=7,
        now=naive_now,
    ).results[0]
    assert len(result.data_points) == 7


def test_period_and_settings(simulator):
    response = run(simulator, [make_history("a", [5.0] * 30)], compounding="weekly")

    assert response.period.start == "2025-05-31"
    assert response.period.end == "2025-06-30"
    assert response.period.days == 30
    assert response.settings.compounding == CompoundingMode.WEEKLY
    assert response.settings.initial_amount == 10_000


def test_metadata_is_carried_through(simulator):
    history = make_history("a", [5.0] * 7, project="kamino-lend", symbol="USDC")
    result = run(simulator, [history], window_days=7).results[0]
    assert result.project == "kamino-lend"
    assert result.symbol == "USDC"


# ── winner and missing data ──


def test_winner_has_highest_return(simulator):
    response = run(
        simulator, [make_history("low", [5.0] * 30), make_history("high", [7.2] * 30)]
    )
    assert response.winner == "high"
    assert [r.pool_id for r in response.results] == ["low", "high"]


def test_tie_goes_to_first_pool(simulator):
    response = run(simulator, [make_history("a", [6.0] * 30), make_history("b", [6.0] * 30)])
    assert response.winner == "a"


def test_unavailable_pool_gets_degenerate_result(simulator):
    response = run(
        simulator,
        [None, make_history("ok", [-1.0] * 30)],
        pool_ids=["missing", "ok"],
    )
    missing = response.results[0]

    assert missing.pool_id == "missing"
    assert missing.data_available is False
    assert missing.final_amount == 10_000
    assert missing.data_points == []
    # A losing pool with data still beats a pool with none
    assert response.winner == "ok"


def test_pool_with_no_points_in_window(simulator):
    stale = make_history("stale", [5.0] * 10, end=NOW - timedelta(days=60))
    response = run(simulator, [stale, make_history("fresh", [5.0] * 30)])

    assert response.results[0].data_available is False
    assert response.winner == "fresh"


def test_no_pool_with_data(simulator):
    with pytest.raises(NoPoolResultsError):
        run(simulator, [None, None], pool_ids=["a", "b"])
    with pytest.raises(NoPoolResultsError):
        run(simulator, [PoolHistory(pool_id="a")])


def test_run_is_deterministic(simulator):
    pools = [make_history("a", [4.0, 6.0, 5.0] * 10), make_history("b", [3.0] * 30)]
    assert run(simulator, pools).model_dump() == run(simulator, pools).model_dump()


# ── validation ──


@pytest.mark.parametrize(
    "pools, kwargs",
    [
        ([], {}),
        ([make_history(str(i), [5.0]) for i in range(6)], {}),
        ([make_history("a", [5.0])], {"window_days": 15}),
        ([make_history("a", [5.0])], {"compounding": "monthly"}),
        ([make_history("a", [5.0])], {"initial_amount": 0}),
        ([make_history("a", [5.0])], {"pool_ids": ["a", "b"]}),
    ],
)
def test_invalid_requests_are_rejected(simulator, pools, kwargs):
    with pytest.raises(InvalidInputError):
        run(simulator, pools, **kwargs)


def test_max_pools_is_configurable():
    simulator = BacktestSimulator(max_pools=2)
    pools = [make_history(str(i), [5.0] * 7) for i in range(3)]
    with pytest.raises(InvalidInputError):
        run(simulator, pools, window_days=7)
