import math

import pytest

from rsicv.backtest import EvaluationResult, PortfolioResult, SignalSimulator, Trade
from rsicv.experiments import HillClimbConfig, HillClimbOptimizer, OptimizationSession
from rsicv.strategies import DEFAULT_PARAMETERS, StrategyParameters


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds


class ConstantSimulator:
    def __init__(self, profit: float, trade_count: int = 5) -> None:
        self.profit = profit
        self.trade_count = trade_count

    def evaluate(self, candles, params, emit_all_triggers=False):
        trades = [
            Trade(buy_time=0, sell_time=1, buy_price=1.0, sell_price=1.0, percentage_change=0.0)
            for _ in range(self.trade_count)
        ]
        return EvaluationResult(
            trades=trades, portfolio=PortfolioResult(total_percentage_change=self.profit))


def _session(simulator) -> OptimizationSession:
    clock = FakeClock()
    optimizer = HillClimbOptimizer(
        HillClimbConfig(max_iterations_per_climb=5, seed=3, yield_delay=0.25),
        simulator=simulator,
        now=clock,
        sleeper=clock.sleep,
    )
    return OptimizationSession(optimizer)


def test_session_starts_from_default_parameters():
    session = _session(ConstantSimulator(1.0))

    assert session.current_parameters == DEFAULT_PARAMETERS
    assert session.current_parameters is not DEFAULT_PARAMETERS
    assert session.highest_profit.profit_percent == -math.inf
    assert not session.is_optimizing


def test_optimize_applies_best_parameters_and_tracks_highest_profit():
    simulator = ConstantSimulator(12.5)
    session = _session(simulator)
    progress = []

    first = session.optimize([], time_budget_seconds=1.0, on_progress=progress.append)

    assert first.best_candidate.profit_percent == 12.5
    assert session.current_parameters == first.best_candidate.parameters
    assert session.highest_profit is first.best_candidate
    assert progress[-1] is first.best_candidate

    simulator.profit = 3.0
    second = session.optimize([], time_budget_seconds=1.0)

    assert session.best_candidate is second.best_candidate
    assert session.highest_profit is first.best_candidate
    frame = session.to_frame()
    assert list(frame["run"]) == [1, 2]
    assert list(frame["profit_percent"]) == [12.5, 3.0]


def test_unusable_run_keeps_current_parameters():
    session = _session(ConstantSimulator(50.0, trade_count=1))
    chosen = StrategyParameters(30.0, -10.0, 70.0, 80.0)
    session.set_parameters(chosen)

    state = session.optimize([], time_budget_seconds=0.5, min_trade_count=3)

    assert not state.best_candidate.has_result
    assert session.current_parameters == chosen
    assert session.highest_profit.profit_percent == -math.inf
    assert len(session.history.runs) == 1


def test_set_parameters_validates_bounds():
    session = _session(ConstantSimulator(1.0))

    with pytest.raises(ValueError, match="buy_cv_threshold"):
        session.set_parameters(StrategyParameters(30.0, 10.0, 70.0, 80.0))


def test_reset_restores_defaults():
    session = _session(ConstantSimulator(9.0))
    session.optimize([], time_budget_seconds=0.5)

    session.reset()

    assert session.current_parameters == DEFAULT_PARAMETERS
    assert not session.best_candidate.has_result
    assert not session.highest_profit.has_result


def test_evaluate_current_uses_session_parameters():
    session = OptimizationSession(HillClimbOptimizer(simulator=SignalSimulator()))

    result = session.evaluate_current([])

    assert result.trade_count == 0
    assert result.profit_percent == 0
