"""RSI and Chaikin Volatility indicator calculations."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Sequence

from ..data.schemas import Candle

DEFAULT_RSI_PERIOD = 14
DEFAULT_CV_PERIOD = 10


def compute_rsi(closes: Sequence[float], period: int = DEFAULT_RSI_PERIOD) -> List[float]:
    """Wilder-smoothed RSI for every bar after the seeding window.

    The first ``period`` price differences seed the average gain and loss;
    each later bar contributes one value, so the result holds
    ``len(closes) - period - 1`` entries.
    """

    if period <= 0:
        raise ValueError("RSI period must be positive")
    if len(closes) < period + 1:
        return []

    avg_gain = 0.0
    avg_loss = 0.0
    for idx in range(1, period + 1):
        change = closes[idx] - closes[idx - 1]
        if change > 0:
            avg_gain += change
        else:
            avg_loss -= change
    avg_gain /= period
    avg_loss /= period

    values: List[float] = []
    for idx in range(period + 1, len(closes)):
        change = closes[idx] - closes[idx - 1]
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        rs = math.inf if avg_loss == 0 else avg_gain / avg_loss
        values.append(100.0 - (100.0 / (1.0 + rs)))
    return values


def compute_chaikin_volatility(
    highs: Sequence[float],
    lows: Sequence[float],
    period: int = DEFAULT_CV_PERIOD,
) -> List[float]:
    """Percent rate of change of the EMA-smoothed high-low range.

    The EMA is seeded with the simple average of the first ``period`` ranges
    and ``CV[k]`` compares EMA entry ``k + period`` against entry ``k``.
    """

    if period <= 0:
        raise ValueError("Chaikin Volatility period must be positive")
    if len(highs) != len(lows):
        raise ValueError(
            f"highs and lows must have the same length ({len(highs)} != {len(lows)})")
    if len(highs) < period:
        return []

    ranges = [high - low for high, low in zip(highs, lows)]
    multiplier = 2.0 / (period + 1)
    ema = [sum(ranges[:period]) / period]
    for value in ranges[period:]:
        ema.append((value - ema[-1]) * multiplier + ema[-1])

    return [
        _percent_change(ema[idx], ema[idx - period])
        for idx in range(period, len(ema))
    ]


def _percent_change(current: float, baseline: float) -> float:
    if baseline == 0:
        delta = current - baseline
        if delta == 0:
            return 0.0
        return math.copysign(math.inf, delta)
    return (current - baseline) / baseline * 100.0


@dataclass(slots=True)
class IndicatorSeries:
    """RSI and CV arrays computed for one candle series.

    RSI index ``i`` is acted upon at candle ``i + offset``. The CV array is
    shorter and right-aligned with the RSI array.
    """

    rsi: List[float] = field(default_factory=list)
    cv: List[float] = field(default_factory=list)
    offset: int = DEFAULT_RSI_PERIOD

    @property
    def is_empty(self) -> bool:
        return not self.rsi or not self.cv

    def cv_index(self, rsi_index: int) -> int:
        """Return the CV index paired with ``rsi_index`` (negative when unavailable)."""

        return len(self.cv) - len(self.rsi) + rsi_index

    def candle_index(self, rsi_index: int) -> int:
        return rsi_index + self.offset


def compute_indicators(
    candles: Sequence[Candle],
    *,
    rsi_period: int = DEFAULT_RSI_PERIOD,
    cv_period: int = DEFAULT_CV_PERIOD,
) -> IndicatorSeries:
    closes = [candle.close for candle in candles]
    highs = [candle.high for candle in candles]
    lows = [candle.low for candle in candles]
    return IndicatorSeries(
        rsi=compute_rsi(closes, rsi_period),
        cv=compute_chaikin_volatility(highs, lows, cv_period),
        offset=rsi_period,
    )
