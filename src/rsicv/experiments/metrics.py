"""Reusable helpers for summarising simulated trades."""

from __future__ import annotations

import statistics
from dataclasses import dataclass
from typing import Sequence

from ..backtest.engine import EvaluationResult


@dataclass(slots=True)
class TradeMetrics:
    """Container for trade analytics shown next to the chart."""

    initial_investment: float
    final_value: float
    total_percentage_change: float
    trade_count: int
    win_rate: float
    average_trade_pct: float
    best_trade_pct: float
    worst_trade_pct: float
    max_drawdown: float


def compute_trade_metrics(result: EvaluationResult) -> TradeMetrics:
    """Compute the canonical set of metrics for one evaluation."""

    portfolio = result.portfolio
    changes = [trade.percentage_change for trade in result.trades]
    if changes:
        wins = sum(1 for change in changes if change > 0)
        win_rate = wins / len(changes)
        average = statistics.fmean(changes)
        best = max(changes)
        worst = min(changes)
    else:
        win_rate = average = best = worst = 0.0
    return TradeMetrics(
        initial_investment=float(portfolio.initial_investment),
        final_value=float(portfolio.final_value),
        total_percentage_change=float(portfolio.total_percentage_change),
        trade_count=result.trade_count,
        win_rate=float(win_rate),
        average_trade_pct=float(average),
        best_trade_pct=float(best),
        worst_trade_pct=float(worst),
        max_drawdown=_max_drawdown(portfolio.equity_curve()),
    )


def _max_drawdown(curve: Sequence[float]) -> float:
    drawdown = 0.0
    peak = float("-inf")
    for value in curve:
        v = float(value)
        peak = max(peak, v)
        if peak <= 0:
            continue
        drawdown = min(drawdown, (v / peak) - 1.0)
    return abs(drawdown)


__all__ = [
    "TradeMetrics",
    "compute_trade_metrics",
]
