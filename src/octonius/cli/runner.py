"""Command-line entry point for the Octonius API."""

from __future__ import annotations

import argparse
import os
from typing import Callable, List, Optional

from ..config import Settings
from ..logs import configure_logging
from . import commands

CommandHandler = Callable[[argparse.Namespace, Settings], None]


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (CRITICAL, ERROR, WARNING, INFO, DEBUG). Default: INFO",
    )
    parser = argparse.ArgumentParser(
        prog="octonius",
        description="Run and provision the Octonius workplace API.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    commands.register(subparsers, common)
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    level_name = str(getattr(args, "log_level", "INFO")).upper()
    configure_logging(level_name)

    handler: CommandHandler = getattr(args, "handler", None)
    if not callable(handler):
        parser.error("Command handler missing")

    settings = Settings.from_env()
    settings.log_level = level_name
    handler(args, settings)


if __name__ == "__main__":  # pragma: no cover
    main()
