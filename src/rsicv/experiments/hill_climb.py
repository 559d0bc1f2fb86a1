"""Random-restart hill climbing over the RSI / CV strategy thresholds."""

from __future__ import annotations

import logging
import math
import random
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Sequence

import pandas as pd

from ..backtest.engine import EvaluationResult, SignalSimulator
from ..data.schemas import Candle
from ..strategies.rsi_cv import (
    DEFAULT_PARAMETERS,
    PARAMETER_FIELDS,
    ParameterBounds,
    ParameterRange,
    StrategyParameters,
)
from .throttle import DEFAULT_THROTTLE_INTERVAL, CancellationToken, Throttle

logger = logging.getLogger(__name__)

DEFAULT_TIME_BUDGET_SECONDS = 5.0
DEFAULT_MIN_TRADE_COUNT = 3
DEFAULT_MAX_ITERATIONS_PER_CLIMB = 300
DEFAULT_STEP_SIZE = 5.0
DEFAULT_YIELD_DELAY = 0.05


class OptimizationFailed(RuntimeError):
    """Raised when every attempted climb of a run failed to evaluate."""


@dataclass(slots=True)
class OptimizationCandidate:
    parameters: StrategyParameters
    profit_percent: float
    trade_count: int

    @classmethod
    def sentinel(cls, parameters: StrategyParameters | None = None) -> "OptimizationCandidate":
        """Placeholder best that any qualifying candidate replaces."""

        return cls(
            parameters=replace(parameters or DEFAULT_PARAMETERS),
            profit_percent=-math.inf,
            trade_count=0,
        )

    @property
    def has_result(self) -> bool:
        return self.profit_percent > -math.inf

    def as_record(self) -> Dict[str, float | int | str]:
        record: Dict[str, float | int | str] = {"params": self.parameters.label()}
        record.update(self.parameters.as_kwargs())
        record["profit_percent"] = float(self.profit_percent)
        record["trade_count"] = int(self.trade_count)
        return record


ProgressCallback = Callable[[OptimizationCandidate], None]


@dataclass(slots=True)
class OptimizationRunState:
    """Outcome and bookkeeping of a single optimization run."""

    best_candidate: OptimizationCandidate = field(default_factory=OptimizationCandidate.sentinel)
    elapsed_seconds: float = 0.0
    iteration_count: int = 0
    failed_climbs: int = 0
    emissions: int = 0
    cancelled: bool = False
    climbs: List[OptimizationCandidate] = field(default_factory=list)

    def to_frame(self) -> pd.DataFrame:
        records = []
        for idx, candidate in enumerate(self.climbs, start=1):
            entry: Dict[str, float | int | str] = {"climb": idx}
            entry.update(candidate.as_record())
            records.append(entry)
        if not records:
            return pd.DataFrame(columns=["climb", "params", "profit_percent", "trade_count"])
        return pd.DataFrame.from_records(records)


@dataclass(slots=True)
class HillClimbConfig:
    max_iterations_per_climb: int = DEFAULT_MAX_ITERATIONS_PER_CLIMB
    step_size: float = DEFAULT_STEP_SIZE
    bounds: ParameterBounds = field(default_factory=ParameterBounds)
    throttle_interval: float = DEFAULT_THROTTLE_INTERVAL
    yield_delay: float = DEFAULT_YIELD_DELAY
    seed: int | None = None

    def validate(self) -> None:
        if self.max_iterations_per_climb <= 0:
            raise ValueError("max_iterations_per_climb must be positive")
        if self.step_size <= 0:
            raise ValueError("step_size must be positive")
        if self.throttle_interval < 0:
            raise ValueError("throttle_interval cannot be negative")
        if self.yield_delay < 0:
            raise ValueError("yield_delay cannot be negative")
        self.bounds.validate()


class HillClimbOptimizer:
    """Time-boxed random-restart hill climbing using the simulator as objective.

    Only one run may be active per optimizer instance. The clock is checked
    between climbs, so a run can overrun its budget by one climb.
    """

    def __init__(
        self,
        config: HillClimbConfig | None = None,
        *,
        simulator: SignalSimulator | None = None,
        rng: random.Random | None = None,
        now: Callable[[], float] | None = None,
        sleeper: Callable[[float], None] | None = None,
    ) -> None:
        self.config = config or HillClimbConfig()
        self.config.validate()
        self.simulator = simulator or SignalSimulator()
        self._rng = rng or random.Random(self.config.seed)
        self._now = now or time.monotonic
        self._sleep = sleeper or time.sleep
        self._run_lock = threading.Lock()

    @property
    def is_optimizing(self) -> bool:
        return self._run_lock.locked()

    def run(
        self,
        candles: Sequence[Candle],
        time_budget_seconds: float = DEFAULT_TIME_BUDGET_SECONDS,
        on_progress: ProgressCallback | None = None,
        min_trade_count: int = DEFAULT_MIN_TRADE_COUNT,
        cancel_token: CancellationToken | None = None,
    ) -> OptimizationRunState:
        if not self._run_lock.acquire(blocking=False):
            raise RuntimeError("An optimization run is already in progress")
        try:
            return self._run(
                candles,
                time_budget_seconds,
                on_progress,
                min_trade_count,
                cancel_token,
            )
        finally:
            self._run_lock.release()

    def _run(
        self,
        candles: Sequence[Candle],
        time_budget_seconds: float,
        on_progress: ProgressCallback | None,
        min_trade_count: int,
        cancel_token: CancellationToken | None,
    ) -> OptimizationRunState:
        state = OptimizationRunState()
        throttle = Throttle(self.config.throttle_interval)
        started = self._now()
        attempted = 0
        logger.info(
            "Starting hill climb over %d candles (budget %.2fs, min trades %d)",
            len(candles),
            time_budget_seconds,
            min_trade_count,
        )

        while self._now() - started < time_budget_seconds:
            if cancel_token is not None and cancel_token.cancelled:
                state.cancelled = True
                logger.info("Optimization cancelled after %d climbs", state.iteration_count)
                break
            attempted += 1
            try:
                candidate = self.run_one_climb(candles, min_trade_count)
            except (ValueError, ArithmeticError, RuntimeError) as exc:
                state.failed_climbs += 1
                logger.warning("Climb %d failed: %s", attempted, exc)
            else:
                state.iteration_count += 1
                state.climbs.append(candidate)
                if candidate.profit_percent > state.best_candidate.profit_percent:
                    state.best_candidate = candidate
                    logger.debug(
                        "New best after climb %d: %.2f%% over %d trades (%s)",
                        attempted,
                        candidate.profit_percent,
                        candidate.trade_count,
                        candidate.parameters.label(),
                    )
                    if throttle.should_emit(self._now()):
                        self._emit(on_progress, candidate, state)
            self._sleep(self.config.yield_delay)

        state.elapsed_seconds = self._now() - started
        if attempted and not state.iteration_count and not state.cancelled:
            raise OptimizationFailed(
                f"All {attempted} climbs failed; no parameters could be evaluated")

        self._emit(on_progress, state.best_candidate, state)
        if state.best_candidate.has_result:
            logger.info(
                "Optimization finished: %d climbs in %.2fs, best %.2f%% (%s)",
                state.iteration_count,
                state.elapsed_seconds,
                state.best_candidate.profit_percent,
                state.best_candidate.parameters.label(),
            )
        else:
            logger.info(
                "Optimization finished: %d climbs in %.2fs, no parameters reached %d trades",
                state.iteration_count,
                state.elapsed_seconds,
                min_trade_count,
            )
        return state

    def run_one_climb(
        self,
        candles: Sequence[Candle],
        min_trade_count: int = DEFAULT_MIN_TRADE_COUNT,
    ) -> OptimizationCandidate:
        """Climb from a random start, accepting only strictly better neighbours."""

        start = self.sample_parameters()
        current = self._score(start, self.simulator.evaluate(candles, start), min_trade_count)
        for _ in range(self.config.max_iterations_per_climb):
            neighbor = self.neighbor(current.parameters)
            result = self.simulator.evaluate(candles, neighbor)
            if result.profit_percent > current.profit_percent and result.trade_count >= min_trade_count:
                current = OptimizationCandidate(
                    parameters=neighbor,
                    profit_percent=result.profit_percent,
                    trade_count=result.trade_count,
                )
        return current

    def sample_parameters(self) -> StrategyParameters:
        values = {
            name: self._sample(self.config.bounds.range_for(name))
            for name in PARAMETER_FIELDS
        }
        return StrategyParameters(**values)

    def neighbor(self, params: StrategyParameters) -> StrategyParameters:
        """Move one randomly chosen threshold by one step, clamped to its bounds."""

        name = self._rng.choice(PARAMETER_FIELDS)
        step = self.config.step_size
        delta = -step if self._rng.random() < 0.5 else step
        value = self.config.bounds.range_for(name).clamp(getattr(params, name) + delta)
        return replace(params, **{name: value})

    def _sample(self, value_range: ParameterRange) -> float:
        # Whole numbers when the range allows them, like the slider values.
        low = math.ceil(value_range.minimum)
        high = math.floor(value_range.maximum)
        if low <= high:
            return float(self._rng.randint(low, high))
        return self._rng.uniform(value_range.minimum, value_range.maximum)

    @staticmethod
    def _score(
        params: StrategyParameters,
        result: EvaluationResult,
        min_trade_count: int,
    ) -> OptimizationCandidate:
        profit = result.profit_percent if result.trade_count >= min_trade_count else -math.inf
        return OptimizationCandidate(
            parameters=params,
            profit_percent=profit,
            trade_count=result.trade_count,
        )

    @staticmethod
    def _emit(
        on_progress: ProgressCallback | None,
        candidate: OptimizationCandidate,
        state: OptimizationRunState,
    ) -> None:
        state.emissions += 1
        if on_progress is None:
            return
        try:
            on_progress(candidate)
        except Exception:
            logger.exception("Progress observer raised; optimization continues")


def run_hill_climb(
    candles: Sequence[Candle],
    *,
    time_budget_seconds: float = DEFAULT_TIME_BUDGET_SECONDS,
    on_progress: ProgressCallback | None = None,
    min_trade_count: int = DEFAULT_MIN_TRADE_COUNT,
    config: HillClimbConfig | None = None,
    cancel_token: CancellationToken | None = None,
) -> OptimizationCandidate:
    """Run a single optimization with a fresh optimizer and return its best candidate."""

    optimizer = HillClimbOptimizer(config)
    state = optimizer.run(
        candles,
        time_budget_seconds=time_budget_seconds,
        on_progress=on_progress,
        min_trade_count=min_trade_count,
        cancel_token=cancel_token,
    )
    return state.best_candidate
