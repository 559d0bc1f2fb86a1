"""Candle schema shared by the simulator and the optimizer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Iterable, List

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

CANDLE_COLUMNS: tuple[str, ...] = (
    "time",
    "open",
    "high",
    "low",
    "close",
    "volume",
)


class Candle(BaseModel):
    """One time-bucketed OHLCV price bar."""

    time: int = Field(..., description="Bucket start as Unix seconds.")
    open: float = Field(..., ge=0)
    high: float = Field(..., ge=0)
    low: float = Field(..., ge=0)
    close: float = Field(..., ge=0)
    volume: float = Field(0.0, ge=0)

    model_config = ConfigDict(
        frozen=True,
        allow_inf_nan=False,
        populate_by_name=True,
    )

    @classmethod
    def from_ohlcv_row(cls, row: Iterable[object]) -> "Candle":
        """Create a :class:`Candle` from a ``[time, open, high, low, close, volume]`` row."""

        time, open_, high, low, close, volume = list(row)
        return cls(
            time=int(float(time)),
            open=float(open_),
            high=float(high),
            low=float(low),
            close=float(close),
            volume=float(volume),
        )

    def to_row(self) -> dict[str, float | int]:
        """Return the candle as a dictionary matching :data:`CANDLE_COLUMNS`."""

        return {
            "time": self.time,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }


@dataclass(slots=True)
class CandleFrame:
    """Helper to move candle series in and out of :class:`pandas.DataFrame` objects."""

    columns: ClassVar[tuple[str, ...]] = CANDLE_COLUMNS

    @classmethod
    def from_candles(cls, candles: Iterable[Candle]) -> pd.DataFrame:
        """Convert an iterable of candles to a DataFrame sorted by time."""

        df = pd.DataFrame([candle.to_row() for candle in candles], columns=cls.columns)
        if df.empty:
            return df
        df.sort_values("time", inplace=True)
        df.reset_index(drop=True, inplace=True)
        return df

    @classmethod
    def ensure_schema(cls, df: pd.DataFrame) -> pd.DataFrame:
        """Ensure the DataFrame contains the expected columns in correct order."""

        missing = set(cls.columns) - set(df.columns)
        if "volume" in missing:
            df = df.assign(volume=0.0)
            missing.discard("volume")
        if missing:
            raise ValueError(
                f"DataFrame missing required columns: {sorted(missing)}")
        return df.loc[:, cls.columns].copy()

    @classmethod
    def to_candles(cls, df: pd.DataFrame) -> List[Candle]:
        """Validate a DataFrame and return its rows as ascending candles.

        Rows are sorted by ``time``; duplicate timestamps are left in place
        because deduplication is the data provider's job.
        """

        frame = cls.ensure_schema(df)
        if frame.empty:
            return []
        frame.sort_values("time", inplace=True, kind="stable")
        return [
            Candle.from_ohlcv_row(row)
            for row in frame.itertuples(index=False, name=None)
        ]
