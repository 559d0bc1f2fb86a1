"""Position tracking and compounded portfolio accounting."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence

INITIAL_INVESTMENT = 1000.0


class PositionState(str, Enum):
    FLAT = "flat"
    HOLDING = "holding"


@dataclass(slots=True, frozen=True)
class OpenPosition:
    time: int
    price: float


@dataclass(slots=True)
class Trade:
    buy_time: int
    sell_time: int
    buy_price: float
    sell_price: float
    percentage_change: float

    def label(self) -> str:
        sign = "+" if self.percentage_change >= 0 else ""
        return f"{sign}{self.percentage_change:.2f}%"


def percentage_change(buy_price: float, sell_price: float) -> float:
    return (sell_price - buy_price) / buy_price * 100.0


class PositionTracker:
    """Two-state machine allowing at most one open position."""

    def __init__(self) -> None:
        self._position: OpenPosition | None = None

    @property
    def state(self) -> PositionState:
        return PositionState.FLAT if self._position is None else PositionState.HOLDING

    @property
    def position(self) -> OpenPosition | None:
        return self._position

    def open(self, time: int, price: float) -> OpenPosition:
        if self._position is not None:
            raise RuntimeError("Cannot open a position while already holding one")
        self._position = OpenPosition(time=time, price=price)
        return self._position

    def close(self, time: int, price: float) -> Trade:
        if self._position is None:
            raise RuntimeError("Cannot close a position while flat")
        if time <= self._position.time:
            raise RuntimeError(
                f"Sell time {time} must be after buy time {self._position.time}")
        trade = Trade(
            buy_time=self._position.time,
            sell_time=time,
            buy_price=self._position.price,
            sell_price=price,
            percentage_change=percentage_change(self._position.price, price),
        )
        self._position = None
        return trade


@dataclass(slots=True)
class PortfolioResult:
    initial_investment: float = INITIAL_INVESTMENT
    final_value: float = INITIAL_INVESTMENT
    total_percentage_change: float = 0.0
    trades: List[Trade] = field(default_factory=list)

    def equity_curve(self) -> List[float]:
        """Portfolio value after the start and after each closed trade."""

        values = [self.initial_investment]
        for trade in self.trades:
            values.append(values[-1] * (1.0 + trade.percentage_change / 100.0))
        return values


def compound_trades(
    trades: Sequence[Trade], initial_investment: float = INITIAL_INVESTMENT
) -> PortfolioResult:
    """Reinvest the full balance into every trade in order."""

    balance = float(initial_investment)
    for trade in trades:
        balance *= 1.0 + trade.percentage_change / 100.0
    total = (balance / initial_investment - 1.0) * 100.0 if initial_investment else 0.0
    return PortfolioResult(
        initial_investment=float(initial_investment),
        final_value=balance,
        total_percentage_change=total,
        trades=list(trades),
    )
