"""Signal simulation and portfolio accounting for rsicv."""

from .engine import EvaluationResult, InvalidCandleError, SignalSimulator, evaluate
from .portfolio import (
    INITIAL_INVESTMENT,
    OpenPosition,
    PortfolioResult,
    PositionState,
    PositionTracker,
    Trade,
    compound_trades,
)
from .signals import Signal, SignalKind

__all__ = [
    "INITIAL_INVESTMENT",
    "EvaluationResult",
    "InvalidCandleError",
    "OpenPosition",
    "PortfolioResult",
    "PositionState",
    "PositionTracker",
    "Signal",
    "SignalKind",
    "SignalSimulator",
    "Trade",
    "compound_trades",
    "evaluate",
]
