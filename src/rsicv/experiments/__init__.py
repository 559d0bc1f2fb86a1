"""Parameter search and run bookkeeping for the RSI / CV strategy."""

from .hill_climb import (
    HillClimbConfig,
    HillClimbOptimizer,
    OptimizationCandidate,
    OptimizationFailed,
    OptimizationRunState,
    run_hill_climb,
)
from .metrics import TradeMetrics, compute_trade_metrics
from .session import OptimizationSession, SessionHistory, SessionRun
from .throttle import CancellationToken, Throttle

__all__ = [
    "CancellationToken",
    "HillClimbConfig",
    "HillClimbOptimizer",
    "OptimizationCandidate",
    "OptimizationFailed",
    "OptimizationRunState",
    "OptimizationSession",
    "SessionHistory",
    "SessionRun",
    "Throttle",
    "TradeMetrics",
    "compute_trade_metrics",
    "run_hill_climb",
]
