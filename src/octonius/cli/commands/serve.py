"""CLI command for the API server."""

from __future__ import annotations

from argparse import ArgumentParser, Namespace, _SubParsersAction

import uvicorn

from ...config import Settings

__all__ = ["register", "run"]


def run(args: Namespace, settings: Settings) -> None:
    """Start the API server."""
    from ...api import create_app

    app = create_app(settings)

    print(f"🚀 Starting Octonius API on http://{args.host}:{args.port}")
    print(f"📚 API docs at http://{args.host}:{args.port}/docs")

    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


def register(subparsers: _SubParsersAction, common: ArgumentParser) -> None:
    parser = subparsers.add_parser("serve", parents=[common], help="Start the API server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")
    parser.set_defaults(handler=run)
