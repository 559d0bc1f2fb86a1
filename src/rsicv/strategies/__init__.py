"""Strategy and indicator implementations for the rsicv stack."""

from .indicators import (
    DEFAULT_CV_PERIOD,
    DEFAULT_RSI_PERIOD,
    IndicatorSeries,
    compute_chaikin_volatility,
    compute_indicators,
    compute_rsi,
)
from .rsi_cv import (
    DEFAULT_PARAMETERS,
    PARAMETER_FIELDS,
    ParameterBounds,
    ParameterRange,
    RsiCvStrategy,
    StrategyParameters,
)

__all__ = [
    "DEFAULT_CV_PERIOD",
    "DEFAULT_PARAMETERS",
    "DEFAULT_RSI_PERIOD",
    "IndicatorSeries",
    "PARAMETER_FIELDS",
    "ParameterBounds",
    "ParameterRange",
    "RsiCvStrategy",
    "StrategyParameters",
    "compute_chaikin_volatility",
    "compute_indicators",
    "compute_rsi",
]
