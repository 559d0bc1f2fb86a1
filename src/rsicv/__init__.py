"""Core package for the RSI / Chaikin Volatility strategy simulator and optimizer."""

from importlib.metadata import version

__all__ = ["__version__"]

try:
    __version__ = version("rsicv")
except Exception:  # pragma: no cover - package not installed in dev mode yet.
    __version__ = "0.0.0"
