"""Data utilities for candle series."""

from .schemas import CANDLE_COLUMNS, Candle, CandleFrame

__all__ = [
    "CANDLE_COLUMNS",
    "Candle",
    "CandleFrame",
]
