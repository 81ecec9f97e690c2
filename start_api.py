#!/usr/bin/env python3
"""
Startup script for the event listing API server.

Usage:
    python start_api.py              # Development mode
    python start_api.py --prod       # Production mode
    python start_api.py --port 8080  # Custom port (default: $PORT or 5000)
"""

import argparse
import os

import uvicorn
from dotenv import load_dotenv

DEFAULT_PORT = 5000


def default_port() -> int:
    """Return the port from ``$PORT``, falling back to 5000.

    Raises ``ValueError`` when ``$PORT`` is set but not an integer.
    """
    value = os.getenv("PORT")
    if not value:
        return DEFAULT_PORT
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"PORT must be an integer, got {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Start the event listing API")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    parser.add_argument(
        "--port",
        type=int,
        help=f"Port to bind to (default: $PORT or {DEFAULT_PORT})"
    )
    parser.add_argument(
        "--prod",
        action="store_true",
        help="Run in production mode (no auto-reload)"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of worker processes, each with its own event list (default: 1)"
    )
    parser.add_argument(
        "--no-reload",
        action="store_true",
        help="Disable auto-reload in development mode"
    )
    return parser


def parse_args(argv=None) -> argparse.Namespace:
    """Parse ``argv``, filling ``--port`` from ``$PORT`` when not given."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.port is None:
        try:
            args.port = default_port()
        except ValueError as exc:
            parser.error(str(exc))
    return args


def main(argv=None):
    """Start the FastAPI server with configurable options."""
    load_dotenv()
    args = parse_args(argv)

    mode = "PRODUCTION" if args.prod else "DEVELOPMENT"
    print(f"🚀 Starting event API in {mode} mode on http://{args.host}:{args.port}")

    uvicorn_config = {
        "app": "api.main:app",
        "host": args.host,
        "port": args.port,
    }
    if args.prod:
        uvicorn_config.update({"workers": args.workers, "log_level": "info"})
    else:
        uvicorn_config.update({"log_level": "debug", "reload": not args.no_reload})
        if uvicorn_config["reload"]:
            uvicorn_config["reload_dirs"] = ["api"]

    uvicorn.run(**uvicorn_config)


if __name__ == "__main__":
    main()
