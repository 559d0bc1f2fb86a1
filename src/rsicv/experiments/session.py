"""Caller-side bookkeeping across optimization runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import List, Sequence

import pandas as pd

from ..backtest.engine import EvaluationResult
from ..data.schemas import Candle
from ..strategies.rsi_cv import DEFAULT_PARAMETERS, StrategyParameters
from .hill_climb import (
    DEFAULT_MIN_TRADE_COUNT,
    DEFAULT_TIME_BUDGET_SECONDS,
    HillClimbOptimizer,
    OptimizationCandidate,
    OptimizationRunState,
    ProgressCallback,
)
from .throttle import CancellationToken

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SessionRun:
    run: int
    best_candidate: OptimizationCandidate
    elapsed_seconds: float
    climbs: int
    cancelled: bool = False


@dataclass(slots=True)
class SessionHistory:
    runs: List[SessionRun] = field(default_factory=list)

    def to_frame(self) -> pd.DataFrame:
        records = []
        for entry in self.runs:
            record = {
                "run": entry.run,
                "elapsed_seconds": entry.elapsed_seconds,
                "climbs": entry.climbs,
                "cancelled": entry.cancelled,
            }
            record.update(entry.best_candidate.as_record())
            records.append(record)
        if not records:
            return pd.DataFrame(columns=["run", "params", "profit_percent", "trade_count"])
        return pd.DataFrame.from_records(records)


class OptimizationSession:
    """Remember the working parameters and the best result seen across runs.

    The optimizer itself forgets everything between runs; this object is the
    caller that keeps the highest profit and the parameters currently shown.
    Nothing is persisted beyond the process.
    """

    def __init__(self, optimizer: HillClimbOptimizer | None = None) -> None:
        self.optimizer = optimizer or HillClimbOptimizer()
        self.current_parameters = replace(DEFAULT_PARAMETERS)
        self.best_candidate = OptimizationCandidate.sentinel()
        self.highest_profit = OptimizationCandidate.sentinel()
        self.history = SessionHistory()

    @property
    def is_optimizing(self) -> bool:
        return self.optimizer.is_optimizing

    def set_parameters(self, params: StrategyParameters) -> None:
        params.validate(self.optimizer.config.bounds)
        self.current_parameters = replace(params)

    def evaluate_current(
        self, candles: Sequence[Candle], emit_all_triggers: bool = False
    ) -> EvaluationResult:
        return self.optimizer.simulator.evaluate(
            candles, self.current_parameters, emit_all_triggers)

    def optimize(
        self,
        candles: Sequence[Candle],
        time_budget_seconds: float = DEFAULT_TIME_BUDGET_SECONDS,
        on_progress: ProgressCallback | None = None,
        min_trade_count: int = DEFAULT_MIN_TRADE_COUNT,
        cancel_token: CancellationToken | None = None,
    ) -> OptimizationRunState:
        def track(candidate: OptimizationCandidate) -> None:
            if candidate.has_result:
                self.current_parameters = replace(candidate.parameters)
            if on_progress is not None:
                on_progress(candidate)

        state = self.optimizer.run(
            candles,
            time_budget_seconds=time_budget_seconds,
            on_progress=track,
            min_trade_count=min_trade_count,
            cancel_token=cancel_token,
        )
        best = state.best_candidate
        self.best_candidate = best
        if best.has_result and best.profit_percent > self.highest_profit.profit_percent:
            self.highest_profit = best
            logger.info("New session high: %.2f%% (%s)",
                        best.profit_percent, best.parameters.label())
        elif not best.has_result:
            logger.info("Run %d found no usable parameters", len(self.history.runs) + 1)

        self.history.runs.append(
            SessionRun(
                run=len(self.history.runs) + 1,
                best_candidate=best,
                elapsed_seconds=state.elapsed_seconds,
                climbs=state.iteration_count,
                cancelled=state.cancelled,
            )
        )
        return state

    def reset(self) -> None:
        self.current_parameters = replace(DEFAULT_PARAMETERS)
        self.best_candidate = OptimizationCandidate.sentinel()
        self.highest_profit = OptimizationCandidate.sentinel()

    def to_frame(self) -> pd.DataFrame:
        return self.history.to_frame()
