"""
=============================================================================
FILE SERVER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on 0.0.0.0:8080
    python -m fileserver

    # Serve ./public on localhost:3000
    python -m fileserver -b 127.0.0.1 -p 3000 -d ./public

    # JSON access logs, debug output
    python -m fileserver --log-format json -l DEBUG

Flags override FILESERVER_* environment variables, which override the
built-in defaults (see config.py).

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ServerConfig, LOG_FORMATS
from .server import FileServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    """Command-line parser whose defaults come from `defaults`."""
    parser = argparse.ArgumentParser(
        prog="fileserver",
        description="Serve a directory over HTTP/1.1 with directory listings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m fileserver                          # Current directory, port 8080
  python -m fileserver -d ./public -p 3000      # Custom root and port
  python -m fileserver -b 127.0.0.1             # Localhost only
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--bind", "-b",
        default=defaults.host,
        help=f"Address to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory", "-d",
        default=defaults.root_dir,
        help=f"Directory to serve (default: {defaults.root_dir})"
    )

    parser.add_argument(
        "--no-follow-symlinks",
        action="store_true",
        help="Refuse symlinks that point outside the served directory"
    )

    parser.add_argument(
        "--unsorted",
        action="store_true",
        help="List directory entries in filesystem order"
    )

    # ─────────────────────────────────────────────────────────────────────
    # PERFORMANCE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=defaults.max_workers,
        help=f"Maximum worker threads (default: {defaults.max_workers})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help="Logging level (default: %(default)s)"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=defaults.log_format,
        help="Access log format (default: %(default)s)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"fileserver {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace, defaults: ServerConfig) -> ServerConfig:
    """Translate parsed arguments into a ServerConfig."""
    return ServerConfig(
        host=args.bind,
        port=args.port,
        root_dir=args.directory,
        backlog=defaults.backlog,
        timeout=defaults.timeout,
        chunk_size=defaults.chunk_size,
        max_line_length=defaults.max_line_length,
        max_headers=defaults.max_headers,
        min_workers=min(defaults.min_workers, args.workers),
        max_workers=args.workers,
        queue_size=defaults.queue_size,
        follow_symlinks=not args.no_follow_symlinks,
        sort_listings=not args.unsorted,
        log_level=args.log_level,
        log_format=args.log_format,
    )


def main(argv=None):
    """Main CLI entry point."""
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid environment setting: {e}", file=sys.stderr)
        sys.exit(2)

    parser = build_parser(defaults)
    args = parser.parse_args(argv)
    config = config_from_args(args, defaults)

    try:
        server = FileServer(config)
    except ValueError as e:
        parser.error(str(e))

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


# =============================================================================
# ENTRY POINT
# =============================================================================

if __name__ == "__main__":
    main()
