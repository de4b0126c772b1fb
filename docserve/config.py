from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

from .domain.errors import ConfigError


DEFAULT_ADDR = "localhost:9090"
DEFAULT_DIR = "."


def split_address(address: str) -> Tuple[str, int]:
    """
    Split "host:port" into its parts.

    "[::1]:8080" is accepted for IPv6, an empty host means every interface
    and an empty port means 0, letting the OS pick one.
    """
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ConfigError(f"address {address}: missing port in address")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ConfigError(f"address {address}: too many colons in address")
    if port == "":
        return host, 0
    # isdigit alone admits digits such as "²" that int() rejects
    if not (port.isascii() and port.isdigit()) or int(port) > 65535:
        raise ConfigError(f"address {address}: invalid port {port!r}")
    return host, int(port)


@dataclass(frozen=True)
class ServerConfig:
    bind_address: str = DEFAULT_ADDR
    root_directory: Path = Path(DEFAULT_DIR)
    spa_fallback: bool = False

    @classmethod
    def from_args(cls, argv: Optional[Sequence[str]] = None) -> "ServerConfig":
        parser = build_parser()
        args = parser.parse_args(argv)
        try:
            split_address(args.addr)
        except ConfigError as e:
            parser.error(str(e))
        return cls(
            bind_address=args.addr,
            root_directory=Path(args.dir),
            spa_fallback=args.spa,
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docserve",
        description="Serve your local files over HTTP until interrupted.",
    )
    parser.add_argument("-addr", "--addr", default=DEFAULT_ADDR, help=f"serve address (default: {DEFAULT_ADDR})")
    parser.add_argument("-dir", "--dir", default=DEFAULT_DIR, help="root path (default: current directory)")
    parser.add_argument(
        "-spa",
        "--spa",
        action="store_true",
        help="answer unknown extensionless paths with the root index.html",
    )
    return parser
