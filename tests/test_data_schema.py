import math

import pandas as pd
import pytest
from pydantic import ValidationError

from rsicv.data.schemas import Candle, CandleFrame


def test_candle_to_dataframe_roundtrip() -> None:
    candle = Candle(time=1_700_000_000, open=100.0, high=101.0,
                    low=99.5, close=100.5, volume=1_000)

    df = CandleFrame.from_candles([candle])
    assert list(df.columns) == list(CandleFrame.columns)
    assert len(df) == 1
    loaded = CandleFrame.ensure_schema(df)
    assert isinstance(loaded, pd.DataFrame)
    assert loaded.iloc[0]["close"] == 100.5
    assert CandleFrame.to_candles(loaded) == [candle]


def test_candle_rejects_non_finite_and_negative_prices() -> None:
    with pytest.raises(ValidationError):
        Candle(time=1, open=1.0, high=1.0, low=1.0, close=math.nan)
    with pytest.raises(ValidationError):
        Candle(time=1, open=1.0, high=math.inf, low=1.0, close=1.0)
    with pytest.raises(ValidationError):
        Candle(time=1, open=1.0, high=1.0, low=-1.0, close=1.0)


def test_to_candles_sorts_by_time_and_defaults_volume() -> None:
    frame = pd.DataFrame(
        {
            "time": [20, 10],
            "open": [2.0, 1.0],
            "high": [2.5, 1.5],
            "low": [1.5, 0.5],
            "close": [2.2, 1.2],
        }
    )

    candles = CandleFrame.to_candles(frame)

    assert [candle.time for candle in candles] == [10, 20]
    assert candles[0].volume == 0.0
    assert candles[1].close == pytest.approx(2.2)


def test_ensure_schema_reports_missing_columns() -> None:
    with pytest.raises(ValueError, match="close"):
        CandleFrame.ensure_schema(pd.DataFrame({"time": [1], "open": [1.0], "high": [1.0], "low": [1.0]}))


def test_from_ohlcv_row_parses_string_values() -> None:
    candle = Candle.from_ohlcv_row(["1700000000", "1.0", "2.0", "0.5", "1.5", "42"])
    assert candle.time == 1_700_000_000
    assert candle.high == 2.0
    assert candle.volume == 42.0
