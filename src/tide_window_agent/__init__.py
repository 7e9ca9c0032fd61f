"""Tide window safety checks backed by NOAA predictions."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("tide-window-agent")
except PackageNotFoundError:  # pragma: no cover - fallback during local dev
    __version__ = "0.0.0"

__all__ = ["__version__"]
