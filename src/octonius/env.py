"""Locate and load `.env` files before settings are read."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import structlog
from dotenv import find_dotenv, load_dotenv

__all__ = ["ENV_FILE_VAR", "env_files", "load_env"]

logger = structlog.get_logger(__name__)

ENV_FILE_VAR = "OCTONIUS_ENV_FILE"
_loaded: set[Path] = set()


def env_files(environment: Optional[str] = None) -> list[Path]:
    """Return the `.env` files that apply, most specific first.

    ``OCTONIUS_ENV_FILE`` wins outright. Otherwise ``.env.<environment>`` and
    then ``.env`` are looked up from the working directory upwards.
    """
    explicit = os.getenv(ENV_FILE_VAR)
    if explicit:
        path = Path(explicit).expanduser()
        return [path.resolve()] if path.is_file() else []

    environment = environment or os.getenv("ENVIRONMENT") or os.getenv("NODE_ENV")
    names = [f".env.{environment}", ".env"] if environment else [".env"]
    found = []
    for name in names:
        path = find_dotenv(name, usecwd=True)
        if path:
            found.append(Path(path).resolve())
    return found


def load_env(environment: Optional[str] = None) -> list[Path]:
    """Load each applicable file once; variables already set are never replaced."""
    loaded = []
    for path in env_files(environment):
        if path in _loaded:
            continue
        load_dotenv(path, override=False)
        _loaded.add(path)
        loaded.append(path)
        logger.debug("env.loaded", path=str(path))
    return loaded
