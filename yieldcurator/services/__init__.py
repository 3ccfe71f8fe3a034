"""Services for Yield Curator."""

from yieldcurator.services.risk_scorer import RiskScorer
from yieldcurator.services.allocation_engine import AllocationEngine
from yieldcurator.services.backtest_simulator import BacktestSimulator
from yieldcurator.services.protocol_registry import ProtocolRegistry
from yieldcurator.services.yield_source import YieldSource

__all__ = [
    "RiskScorer",
    "AllocationEngine",
    "BacktestSimulator",
    "ProtocolRegistry",
    "YieldSource",
]
