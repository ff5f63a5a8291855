"""Command-line parsing: ``yavs [flags] DOMAIN DATA_URL``.

Only flags given on the command line are passed on to ``Settings``, so
anything omitted falls through to the environment, yavs.yaml, or the
defaults.
"""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING, Any

from yavs.config import Settings

if TYPE_CHECKING:
    from collections.abc import Sequence


def _split_addr(value: str) -> tuple[str, int]:
    host, sep, port = value.rpartition(":")
    if not sep or not port.isdigit():
        raise argparse.ArgumentTypeError(f"address must be HOST:PORT, got {value!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    # ":8080" listens on every interface.
    return host or "0.0.0.0", int(port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="yavs",
        usage="yavs [flags] domain dataUrl",
        description="Serve vanity import pages for the packages listed in a remote feed.",
    )
    parser.add_argument("domain", help="domain the vanity packages live under")
    parser.add_argument(
        "data_url",
        metavar="dataUrl",
        help="URL of the feed of '<name> <vcs> <repo-url>' entries",
    )
    parser.add_argument(
        "--refresh-interval",
        help="how often to re-fetch the feed (e.g. 90s, 5m, 1h30m); 0 disables "
        "automatic refresh, use the refresh endpoint instead",
    )
    parser.add_argument(
        "--refresh-path",
        help="refresh endpoint, with a leading '/' (default /refresh); a package with the "
        "same name cannot be served. Empty disables the endpoint",
    )
    parser.add_argument(
        "--addr",
        type=_split_addr,
        help="address to listen on (default localhost:8080)",
    )
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-format", choices=["json", "text"])
    return parser


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse *argv* into ``Settings``. Exits with status 2 on bad usage."""
    args = build_parser().parse_args(argv)

    feed: dict[str, Any] = {"url": args.data_url}
    if args.refresh_interval is not None:
        feed["refresh_interval"] = args.refresh_interval
    if args.refresh_path is not None:
        feed["refresh_path"] = args.refresh_path

    overrides: dict[str, Any] = {"domain": args.domain, "feed": feed}
    if args.addr is not None:
        host, port = args.addr
        overrides["server"] = {"host": host, "port": port}
    logging: dict[str, Any] = {}
    if args.log_level is not None:
        logging["level"] = args.log_level
    if args.log_format is not None:
        logging["format"] = args.log_format
    if logging:
        overrides["logging"] = logging

    return Settings(**overrides)
