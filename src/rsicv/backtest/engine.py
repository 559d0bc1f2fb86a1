"""Signal simulation over a candle series."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Sequence

import pandas as pd

from ..data.schemas import Candle
from ..strategies.indicators import (
    DEFAULT_CV_PERIOD,
    DEFAULT_RSI_PERIOD,
    IndicatorSeries,
    compute_indicators,
)
from ..strategies.rsi_cv import RsiCvStrategy, StrategyParameters
from .portfolio import (
    INITIAL_INVESTMENT,
    PortfolioResult,
    PositionState,
    PositionTracker,
    Trade,
    compound_trades,
)
from .signals import Signal, SignalKind

TRADE_COLUMNS: tuple[str, ...] = (
    "buy_time",
    "sell_time",
    "buy_price",
    "sell_price",
    "percentage_change",
)


class InvalidCandleError(ValueError):
    """Raised when a candle carries a non-finite price or a non-positive close."""


@dataclass(slots=True)
class EvaluationResult:
    signals: List[Signal] = field(default_factory=list)
    trades: List[Trade] = field(default_factory=list)
    portfolio: PortfolioResult = field(default_factory=PortfolioResult)

    @property
    def profit_percent(self) -> float:
        return self.portfolio.total_percentage_change

    @property
    def trade_count(self) -> int:
        return len(self.trades)

    def to_frame(self) -> pd.DataFrame:
        if not self.trades:
            return pd.DataFrame(columns=list(TRADE_COLUMNS))
        return pd.DataFrame.from_records(
            [
                {name: getattr(trade, name) for name in TRADE_COLUMNS}
                for trade in self.trades
            ],
            columns=list(TRADE_COLUMNS),
        )


class SignalSimulator:
    """Scan indicator values left to right and trade a single position.

    Thresholds are not validated or clamped here; the optimizer and callers
    keep them inside their bounds.
    """

    def __init__(
        self,
        *,
        rsi_period: int = DEFAULT_RSI_PERIOD,
        cv_period: int = DEFAULT_CV_PERIOD,
        initial_investment: float = INITIAL_INVESTMENT,
    ) -> None:
        if rsi_period <= 0 or cv_period <= 0:
            raise ValueError("Indicator periods must be positive")
        if initial_investment <= 0:
            raise ValueError("initial_investment must be positive")
        self.rsi_period = rsi_period
        self.cv_period = cv_period
        self.initial_investment = float(initial_investment)

    def evaluate(
        self,
        candles: Sequence[Candle],
        params: StrategyParameters,
        emit_all_triggers: bool = False,
    ) -> EvaluationResult:
        _ensure_valid_prices(candles)
        indicators = compute_indicators(
            candles, rsi_period=self.rsi_period, cv_period=self.cv_period)
        if indicators.is_empty:
            return EvaluationResult(
                portfolio=PortfolioResult(
                    initial_investment=self.initial_investment,
                    final_value=self.initial_investment,
                )
            )
        return self._scan(candles, indicators, RsiCvStrategy(params), emit_all_triggers)

    def _scan(
        self,
        candles: Sequence[Candle],
        indicators: IndicatorSeries,
        strategy: RsiCvStrategy,
        emit_all_triggers: bool,
    ) -> EvaluationResult:
        tracker = PositionTracker()
        signals: List[Signal] = []
        triggers: List[Signal] = []
        trades: List[Trade] = []

        # The first RSI value is never acted upon.
        for idx in range(1, len(indicators.rsi)):
            cv_idx = indicators.cv_index(idx)
            candle_idx = indicators.candle_index(idx)
            if cv_idx < 0 or candle_idx >= len(candles):
                continue
            rsi = indicators.rsi[idx]
            cv = indicators.cv[cv_idx]
            candle = candles[candle_idx]
            wants_buy = strategy.buy_triggered(rsi, cv)
            wants_sell = strategy.sell_triggered(rsi, cv)

            if tracker.state is PositionState.FLAT and wants_buy:
                tracker.open(candle.time, candle.close)
                signals.append(Signal(time=candle.time, kind=SignalKind.BUY, price=candle.close))
            elif tracker.state is PositionState.HOLDING and wants_sell:
                trade = tracker.close(candle.time, candle.close)
                trades.append(trade)
                signals.append(
                    Signal(
                        time=candle.time,
                        kind=SignalKind.SELL,
                        price=candle.close,
                        label=trade.label(),
                    )
                )

            if emit_all_triggers:
                if wants_buy:
                    triggers.append(
                        Signal(time=candle.time, kind=SignalKind.BUY,
                               price=candle.close, is_trigger=True))
                if wants_sell:
                    triggers.append(
                        Signal(time=candle.time, kind=SignalKind.SELL,
                               price=candle.close, is_trigger=True))

        if triggers:
            signals = sorted(signals + triggers, key=lambda signal: signal.time)

        return EvaluationResult(
            signals=signals,
            trades=trades,
            portfolio=compound_trades(trades, self.initial_investment),
        )


def evaluate(
    candles: Sequence[Candle],
    params: StrategyParameters,
    emit_all_triggers: bool = False,
    *,
    rsi_period: int = DEFAULT_RSI_PERIOD,
    cv_period: int = DEFAULT_CV_PERIOD,
) -> EvaluationResult:
    """Simulate ``params`` over ``candles`` with a fresh :class:`SignalSimulator`."""

    simulator = SignalSimulator(rsi_period=rsi_period, cv_period=cv_period)
    return simulator.evaluate(candles, params, emit_all_triggers)


def _ensure_valid_prices(candles: Sequence[Candle]) -> None:
    """Reject non-finite prices and non-positive closes before scanning.

    ``Candle`` validation already refuses NaN and infinity, so the finite check
    only fires for ``Candle.model_construct`` or duck-typed candles. A zero
    close passes validation but cannot be a trade price.
    """

    for idx, candle in enumerate(candles):
        for name in ("high", "low", "close"):
            value = getattr(candle, name)
            if not math.isfinite(value):
                raise InvalidCandleError(
                    f"Candle {idx} (time={candle.time}) has non-finite {name}: {value!r}")
        if candle.close <= 0:
            raise InvalidCandleError(
                f"Candle {idx} (time={candle.time}) has non-positive close: {candle.close!r}")
