"""Command line entry point for the iPhone SSH MCP server."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Iterable

from dotenv import find_dotenv, load_dotenv

from .config import ServerConfig
from .security import GatewayError, check_read_command, check_write_command

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    # stdout carries the MCP stdio protocol, so logs go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


def _serve(args: argparse.Namespace, config: ServerConfig) -> int:
    """Start the MCP server."""
    from .mcp.server import create_server

    server = create_server(config)
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logger.info("Shutting down server")
    return 0


def _show_config(args: argparse.Namespace, config: ServerConfig) -> int:
    print(config.summarize())
    return 0


def _check(args: argparse.Namespace, config: ServerConfig) -> int:
    """Evaluate a command against the gateway without contacting the device."""
    try:
        if args.write_paths:
            paths = check_write_command(args.command, args.write_paths, config.allowed_write_roots)
            print(f"allowed (write): {', '.join(paths)}")
        else:
            check_read_command(args.command)
            print("allowed (read-only)")
    except GatewayError as e:
        print(f"refused: {e}")
        return 1
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="iphone-ssh-mcp", description=__doc__)
    parser.add_argument(
        "--env-file",
        help="Load IPHONE_* settings from this file (defaults to ./.env when present)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command_name", required=True)

    serve_parser = subparsers.add_parser("serve", help="Start the MCP server on stdio")
    serve_parser.set_defaults(func=_serve)

    config_parser = subparsers.add_parser("config", help="Print the effective configuration")
    config_parser.set_defaults(func=_show_config)

    check_parser = subparsers.add_parser(
        "check", help="Check a command against the denylist and write allowlist"
    )
    check_parser.add_argument("command", help="Shell command to evaluate")
    check_parser.add_argument(
        "--write-path",
        dest="write_paths",
        action="append",
        default=[],
        help="Remote path the command will modify (repeatable); selects the write entry point",
    )
    check_parser.set_defaults(func=_check)

    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    _configure_logging(args.verbose)
    load_dotenv(args.env_file or find_dotenv(usecwd=True))
    config = ServerConfig.from_env()
    return args.func(args, config)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
