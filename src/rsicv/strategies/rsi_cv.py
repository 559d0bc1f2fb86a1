"""Two-indicator threshold strategy combining RSI and Chaikin Volatility."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

PARAMETER_FIELDS: Tuple[str, ...] = (
    "buy_rsi_threshold",
    "buy_cv_threshold",
    "sell_rsi_threshold",
    "sell_cv_threshold",
)


@dataclass(slots=True)
class StrategyParameters:
    """Buy and sell thresholds for :class:`RsiCvStrategy`."""

    buy_rsi_threshold: float
    buy_cv_threshold: float
    sell_rsi_threshold: float
    sell_cv_threshold: float

    def as_kwargs(self) -> Dict[str, float]:
        return {name: float(getattr(self, name)) for name in PARAMETER_FIELDS}

    def label(self) -> str:
        return (
            f"buy_rsi={self.buy_rsi_threshold:g}|buy_cv={self.buy_cv_threshold:g}|"
            f"sell_rsi={self.sell_rsi_threshold:g}|sell_cv={self.sell_cv_threshold:g}"
        )

    def validate(self, bounds: "ParameterBounds | None" = None) -> None:
        """Raise ``ValueError`` when a threshold falls outside ``bounds``."""

        bounds = bounds or ParameterBounds()
        for name in PARAMETER_FIELDS:
            value = getattr(self, name)
            value_range = bounds.range_for(name)
            if not value_range.contains(value):
                raise ValueError(
                    f"{name} must be within [{value_range.minimum:g}, {value_range.maximum:g}], got {value!r}"
                )


DEFAULT_PARAMETERS = StrategyParameters(
    buy_rsi_threshold=40.0,
    buy_cv_threshold=-19.9,
    sell_rsi_threshold=72.0,
    sell_cv_threshold=65.0,
)


@dataclass(slots=True, frozen=True)
class ParameterRange:
    """Inclusive numeric range for one threshold."""

    minimum: float
    maximum: float

    def validate(self) -> None:
        if self.maximum < self.minimum:
            raise ValueError("Range maximum must be >= minimum")

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum

    def clamp(self, value: float) -> float:
        return max(self.minimum, min(value, self.maximum))


@dataclass(slots=True)
class ParameterBounds:
    """Search bounds for each strategy threshold."""

    buy_rsi: ParameterRange = field(default_factory=lambda: ParameterRange(0.0, 100.0))
    buy_cv: ParameterRange = field(default_factory=lambda: ParameterRange(-50.0, 0.0))
    sell_rsi: ParameterRange = field(default_factory=lambda: ParameterRange(0.0, 100.0))
    sell_cv: ParameterRange = field(default_factory=lambda: ParameterRange(0.0, 400.0))

    def range_for(self, parameter: str) -> ParameterRange:
        if parameter not in PARAMETER_FIELDS:
            raise KeyError(f"Unknown strategy parameter '{parameter}'")
        return getattr(self, parameter.removesuffix("_threshold"))

    def contains(self, params: StrategyParameters) -> bool:
        return all(
            self.range_for(name).contains(getattr(params, name))
            for name in PARAMETER_FIELDS
        )

    def validate(self) -> None:
        for name in PARAMETER_FIELDS:
            self.range_for(name).validate()


class RsiCvStrategy:
    """Buy oversold, contracting-range bars and sell overbought, expanding ones.

    Thresholds are used as given; keeping them inside their bounds is the
    caller's job.
    """

    def __init__(self, params: StrategyParameters) -> None:
        self.params = params

    def buy_triggered(self, rsi: float, cv: float) -> bool:
        return rsi < self.params.buy_rsi_threshold and cv < self.params.buy_cv_threshold

    def sell_triggered(self, rsi: float, cv: float) -> bool:
        return rsi > self.params.sell_rsi_threshold and cv > self.params.sell_cv_threshold
