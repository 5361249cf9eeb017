"""Octonius workplace collaboration API."""

from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError, version
from typing import Any

__all__ = ["__version__", "create_app", "Settings"]

try:  # pragma: no cover - fallback for editable installs
    __version__ = version("octonius-api")
except PackageNotFoundError:  # pragma: no cover - local development
    __version__ = "0.0.0"


def __getattr__(name: str) -> Any:  # pragma: no cover - thin import shim
    if name == "create_app":
        return import_module(".api", __name__).create_app
    if name == "Settings":
        return import_module(".config", __name__).Settings
    raise AttributeError(name)
