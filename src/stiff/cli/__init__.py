"""Stiff CLI — build the file map and serve a directory.

Entry point registered as ``stiff`` in ``pyproject.toml``::

    [project.scripts]
    stiff = "stiff.cli:main"
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stiff.app import FileServer

DEFAULT_PORT = 1717
DEFAULT_DIRECTORY = "public"


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``stiff`` command."""
    parser = argparse.ArgumentParser(
        prog="stiff",
        description="Stiff — serve a directory of pre-built static files.",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=DEFAULT_DIRECTORY,
        help=f"Directory to serve (default: {DEFAULT_DIRECTORY})",
    )
    parser.add_argument("--config", default="stiff.json", help="Path to stiff.json")
    parser.add_argument("--host", default="0.0.0.0", help="Bind host address")
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help=f"Bind port number (default: $PORT or {DEFAULT_PORT})",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Worker count (0=auto-detect)",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=("debug", "info", "warning", "error", "critical"),
        help="Log level",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    port = args.port if args.port is not None else _port_from_env()
    app = _build_app(args.directory, args.config)
    app.run(args.host, port, workers=args.workers, log_level=args.log_level)


def _port_from_env() -> int:
    value = os.environ.get("PORT", "")
    if not value:
        return DEFAULT_PORT
    try:
        return int(value)
    except ValueError:
        print(f"Error: PORT must be a number, got {value!r}", file=sys.stderr)
        raise SystemExit(1) from None


def _build_app(directory: str, config_path: str) -> FileServer:
    from stiff.app import FileServer
    from stiff.config import load_config
    from stiff.errors import StiffError

    try:
        app = FileServer(directory, load_config(config_path))
    except StiffError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    return app
