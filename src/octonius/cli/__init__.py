"""Command-line tools for running and provisioning the Octonius API."""

from .runner import build_parser, main

__all__ = ["build_parser", "main"]
