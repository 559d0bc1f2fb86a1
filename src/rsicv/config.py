"""Application configuration helpers."""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .backtest.engine import SignalSimulator
from .experiments.hill_climb import HillClimbConfig, HillClimbOptimizer
from .strategies.rsi_cv import ParameterBounds, ParameterRange


class OptimizerSettings(BaseSettings):
    """Optimizer hyperparameters and bounds loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    time_budget_seconds: float = Field(
        default=5.0, ge=0, alias="RSICV_TIME_BUDGET_SECONDS")
    min_trade_count: int = Field(default=3, ge=0, alias="RSICV_MIN_TRADE_COUNT")
    max_iterations_per_climb: int = Field(
        default=300, gt=0, alias="RSICV_MAX_ITERATIONS_PER_CLIMB")
    step_size: float = Field(default=5.0, gt=0, alias="RSICV_STEP_SIZE")
    throttle_interval: float = Field(
        default=0.2, ge=0, alias="RSICV_THROTTLE_INTERVAL")
    yield_delay: float = Field(default=0.05, ge=0, alias="RSICV_YIELD_DELAY")
    seed: int | None = Field(default=None, alias="RSICV_SEED")
    rsi_period: int = Field(default=14, gt=0, alias="RSICV_RSI_PERIOD")
    cv_period: int = Field(default=10, gt=0, alias="RSICV_CV_PERIOD")
    buy_rsi_min: float = Field(default=0.0, alias="RSICV_BUY_RSI_MIN")
    buy_rsi_max: float = Field(default=100.0, alias="RSICV_BUY_RSI_MAX")
    buy_cv_min: float = Field(default=-50.0, alias="RSICV_BUY_CV_MIN")
    buy_cv_max: float = Field(default=0.0, alias="RSICV_BUY_CV_MAX")
    sell_rsi_min: float = Field(default=0.0, alias="RSICV_SELL_RSI_MIN")
    sell_rsi_max: float = Field(default=100.0, alias="RSICV_SELL_RSI_MAX")
    sell_cv_min: float = Field(default=0.0, alias="RSICV_SELL_CV_MIN")
    sell_cv_max: float = Field(default=400.0, alias="RSICV_SELL_CV_MAX")

    @model_validator(mode="after")
    def _check_bounds(self) -> "OptimizerSettings":
        for name in ("buy_rsi", "buy_cv", "sell_rsi", "sell_cv"):
            if getattr(self, f"{name}_max") < getattr(self, f"{name}_min"):
                raise ValueError(f"{name} maximum must be >= minimum")
        return self

    def bounds(self) -> ParameterBounds:
        return ParameterBounds(
            buy_rsi=ParameterRange(self.buy_rsi_min, self.buy_rsi_max),
            buy_cv=ParameterRange(self.buy_cv_min, self.buy_cv_max),
            sell_rsi=ParameterRange(self.sell_rsi_min, self.sell_rsi_max),
            sell_cv=ParameterRange(self.sell_cv_min, self.sell_cv_max),
        )

    def hill_climb_config(self) -> HillClimbConfig:
        return HillClimbConfig(
            max_iterations_per_climb=self.max_iterations_per_climb,
            step_size=self.step_size,
            bounds=self.bounds(),
            throttle_interval=self.throttle_interval,
            yield_delay=self.yield_delay,
            seed=self.seed,
        )

    def build_simulator(self) -> SignalSimulator:
        return SignalSimulator(rsi_period=self.rsi_period, cv_period=self.cv_period)

    def build_optimizer(self) -> HillClimbOptimizer:
        return HillClimbOptimizer(
            self.hill_climb_config(), simulator=self.build_simulator())
