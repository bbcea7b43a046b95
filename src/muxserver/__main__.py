"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    python -m muxserver                    # regex router on 0.0.0.0:9000
    python -m muxserver servemux           # stage 1
    python -m muxserver response -p 3000   # stage 2 on port 3000
    python -m muxserver handler -H 127.0.0.1
    python -m muxserver --list-stages

Settings come from, highest priority first: command-line flags, MUX_*
environment variables (see ServerConfig.from_env), defaults.

Startup failures end the process with status 1 after a CRITICAL log line:
an invalid route table (nothing is bound) or an address that cannot be
bound.

=============================================================================
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from . import __version__
from .config import LOG_FORMATS, LOG_LEVELS, ServerConfig
from .http import RouteConfigError, Router
from .server import configure_logging, listen_and_serve
from .stages import STAGES, build_stage


logger = logging.getLogger("muxserver")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="muxserver",
        description="Tiny HTTP servers showing custom request routing, one stage at a time",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Stages:
  servemux   built-in style multiplexer, raw writer calls
  response   multiplexer + Response.text() helper
  handler    one handler object for every request
  router     regex router with request context (default)
        """,
    )

    parser.add_argument(
        "stage",
        nargs="?",
        default="router",
        choices=sorted(STAGES),
        help="Which example server to run (default: router)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────
    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: $MUX_HOST or 0.0.0.0)",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: $MUX_PORT or 9000)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────
    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: $MUX_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Access log format (default: $MUX_LOG_FORMAT or text)",
    )
    parser.add_argument(
        "--no-access-log",
        action="store_true",
        help="Do not log one line per request",
    )

    # ─────────────────────────────────────────────────────────────────────
    # META
    # ─────────────────────────────────────────────────────────────────────
    parser.add_argument(
        "--list-stages",
        action="store_true",
        help="List the example servers and exit",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"muxserver {__version__}",
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment first, then whatever was given on the command line."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format
    if args.no_access_log:
        config.access_log = False

    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list_stages:
        for name, factory in STAGES.items():
            summary = (factory.__doc__ or "").strip().splitlines()
            print(f"{name:<10} {summary[0] if summary else factory.__name__}")
        return 0

    try:
        config = config_from_args(args)
        config.validate()
    except ValueError as e:
        parser.error(str(e))

    configure_logging(config.log_level)

    # The route table is built before anything is bound
    try:
        app = build_stage(args.stage)
    except RouteConfigError as e:
        logger.critical(f"Invalid route table: {e}")
        return 1

    if isinstance(app, Router):
        app.print_routes()

    listen_and_serve(app, config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
