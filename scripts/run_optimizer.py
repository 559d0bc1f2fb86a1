"""CLI entry point for optimizing RSI / Chaikin Volatility thresholds on a candle CSV."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from rsicv.config import OptimizerSettings
from rsicv.data import Candle, CandleFrame
from rsicv.experiments import OptimizationCandidate, compute_trade_metrics


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "candles", type=Path, help="CSV file with time, open, high, low, close[, volume] columns.")
    parser.add_argument(
        "--budget",
        type=float,
        default=None,
        help="Time budget in seconds (defaults to RSICV_TIME_BUDGET_SECONDS or 5).",
    )
    parser.add_argument(
        "--min-trades",
        type=int,
        default=None,
        help="Minimum number of trades a candidate needs to be accepted.",
    )
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for reproducible runs.")
    parser.add_argument("--verbose", action="store_true",
                        help="Log every throttled progress update.")
    return parser.parse_args(argv)


def load_candles(path: Path) -> List[Candle]:
    frame = pd.read_csv(path.expanduser())
    return CandleFrame.to_candles(frame)


def build_settings(args: argparse.Namespace) -> OptimizerSettings:
    overrides: Dict[str, Any] = {}
    if args.budget is not None:
        overrides["time_budget_seconds"] = args.budget
    if args.min_trades is not None:
        overrides["min_trade_count"] = args.min_trades
    if args.seed is not None:
        overrides["seed"] = args.seed
    return OptimizerSettings(**overrides)


def summarize(candidate: OptimizationCandidate, metrics: Dict[str, Any] | None) -> Dict[str, Any]:
    return {
        "usable": candidate.has_result,
        "parameters": candidate.parameters.as_kwargs(),
        "profit_percent": candidate.profit_percent if candidate.has_result else None,
        "trade_count": candidate.trade_count,
        "metrics": metrics,
    }


def main(argv: List[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = build_settings(args)
    candles = load_candles(args.candles)
    optimizer = settings.build_optimizer()

    def report(candidate: OptimizationCandidate) -> None:
        if candidate.has_result:
            logging.getLogger("rsicv.progress").debug(
                "%.2f%% over %d trades: %s",
                candidate.profit_percent,
                candidate.trade_count,
                candidate.parameters.label(),
            )

    state = optimizer.run(
        candles,
        time_budget_seconds=settings.time_budget_seconds,
        on_progress=report,
        min_trade_count=settings.min_trade_count,
    )
    best = state.best_candidate
    metrics = None
    if best.has_result:
        result = optimizer.simulator.evaluate(candles, best.parameters)
        metrics = asdict(compute_trade_metrics(result))
    print(json.dumps(summarize(best, metrics), indent=2))


if __name__ == "__main__":
    main()
