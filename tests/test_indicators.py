import math
import random

import pytest

from rsicv.data.schemas import Candle
from rsicv.strategies import compute_chaikin_volatility, compute_indicators, compute_rsi


def test_rsi_matches_hand_computed_wilder_values():
    # diffs +1, -1 seed the averages at 0.5 / 0.5, then two +1 moves follow.
    values = compute_rsi([1.0, 2.0, 1.0, 2.0, 3.0], period=2)

    assert values == pytest.approx([75.0, 87.5])


def test_rsi_length_and_insufficient_data():
    closes = [float(value) for value in range(40)]

    assert len(compute_rsi(closes, 14)) == 40 - 14 - 1
    assert compute_rsi(closes[:14], 14) == []
    assert compute_rsi(closes[:15], 14) == []


def test_rsi_handles_flat_and_one_sided_series():
    assert compute_rsi([5.0] * 20, 14) == [100.0] * 5
    assert compute_rsi([float(v) for v in range(20, 0, -1)], 14) == [0.0] * 5


def test_rsi_stays_within_bounds_on_random_walk():
    rng = random.Random(7)
    closes = [100.0]
    for _ in range(300):
        closes.append(max(1.0, closes[-1] + rng.uniform(-3, 3)))

    values = compute_rsi(closes, 14)

    assert values
    assert all(0.0 <= value <= 100.0 for value in values)


def test_rsi_rejects_non_positive_period():
    with pytest.raises(ValueError):
        compute_rsi([1.0, 2.0], 0)


def test_chaikin_volatility_matches_hand_computed_values():
    highs = [3.0, 3.0, 5.0, 5.0, 9.0]
    lows = [1.0] * 5

    values = compute_chaikin_volatility(highs, lows, period=2)

    # EMA of ranges [2, 2, 4, 4, 8]: 2, 10/3, 34/9, 178/27
    assert values == pytest.approx([800.0 / 9.0, 880.0 / 9.0])


def test_chaikin_volatility_length_and_short_input():
    highs = [float(v % 7 + 10) for v in range(40)]
    lows = [float(v % 5) for v in range(40)]

    assert len(compute_chaikin_volatility(highs, lows, 10)) == 40 - 2 * 10 + 1
    assert compute_chaikin_volatility(highs[:9], lows[:9], 10) == []


def test_chaikin_volatility_with_zero_ranges():
    flat = [10.0] * 30

    values = compute_chaikin_volatility(flat, flat, 10)

    assert values == [0.0] * 11


def test_chaikin_volatility_zero_baseline_expansion_is_infinite():
    highs = [10.0] * 10 + [12.0] * 15
    lows = [10.0] * 25

    values = compute_chaikin_volatility(highs, lows, 10)

    assert values[0] == math.inf
    assert all(math.isfinite(value) for value in values[1:])


def test_chaikin_volatility_rejects_mismatched_inputs():
    with pytest.raises(ValueError):
        compute_chaikin_volatility([1.0, 2.0], [1.0], 1)


def test_compute_indicators_maps_rsi_index_to_candle_offset():
    candles = [
        Candle(time=idx * 60, open=100.0 + idx, high=101.0 + idx,
               low=99.0 + idx, close=100.0 + idx)
        for idx in range(40)
    ]

    series = compute_indicators(candles)

    assert series.offset == 14
    assert series.candle_index(0) == 14
    assert len(series.rsi) == 40 - 15
    assert len(series.cv) == 40 - 19
    assert series.cv_index(len(series.rsi) - 1) == len(series.cv) - 1
    assert series.cv_index(0) < 0
    assert not series.is_empty
