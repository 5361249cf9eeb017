"""Command registrations for the octonius CLI."""

from __future__ import annotations

from argparse import ArgumentParser, _SubParsersAction

from . import database, serve

__all__ = ["register"]


def register(subparsers: _SubParsersAction, common: ArgumentParser) -> None:
    """Register all CLI commands with *subparsers*."""

    serve.register(subparsers, common)
    database.register(subparsers, common)
