"""
=============================================================================
FILE RESPONDER CLI ENTRY POINT
=============================================================================

    # IPv4 on port 8080, serving ./www
    python -m fileresponder 4 8080 ./www

    # IPv6, bound to loopback only
    python -m fileresponder 6 8080 ./www --host ::1

    # With a Content-Length header on every 200
    fileresponder 4 8080 ./www --content-length

    # Anything left off the command line comes from HTTP_* variables
    HTTP_PORT=3000 HTTP_WEB_ROOT=./www python -m fileresponder

Positionals fill left to right, so a port on the command line needs the
protocol before it.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import PROTOCOLS, ResponderConfig
from .server import FileServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fileresponder",
        description="Minimal HTTP/1.0 static file server using sendfile()",
    )

    # ─────────────────────────────────────────────────────────────────────
    # POSITIONAL ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "protocol",
        type=int,
        nargs="?",
        choices=PROTOCOLS,
        help="IP version to listen on: 4 or 6 (default: $HTTP_PROTOCOL or 4)",
    )

    parser.add_argument(
        "port",
        nargs="?",
        type=int,
        help="Port to listen on (default: $HTTP_PORT or 8080)",
    )

    parser.add_argument(
        "web_root",
        nargs="?",
        help="Directory to serve files from (default: $HTTP_WEB_ROOT or .)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # OPTIONS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Address to bind to (default: $HTTP_HOST or all interfaces)",
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Client socket timeout in seconds (default: $HTTP_TIMEOUT or none)",
    )

    parser.add_argument(
        "--content-length",
        action="store_true",
        help="Send a Content-Length header with every 200 response",
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: $HTTP_LOG_LEVEL or INFO)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"fileresponder {__version__}",
    )

    return parser


def main(argv=None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)

    try:
        env = ResponderConfig.from_env()
    except ValueError as e:
        print(f"Error: bad HTTP_* environment variable: {e}", file=sys.stderr)
        return 2

    # Command line wins over the environment
    config = ResponderConfig(
        protocol=_pick(args.protocol, env.protocol),
        host=_pick(args.host, env.host),
        port=_pick(args.port, env.port),
        web_root=_pick(args.web_root, env.web_root),
        timeout=_pick(args.timeout, env.timeout),
        send_content_length=args.content_length,
        log_level=_pick(args.log_level, env.log_level),
    )

    try:
        server = FileServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


def _pick(value, fallback):
    return fallback if value is None else value


if __name__ == "__main__":
    sys.exit(main())
