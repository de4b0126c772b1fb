from __future__ import annotations

import sys
from typing import Optional, Sequence

from .adapters.filesystem import StaticContentResolver
from .adapters.listener import acquire
from .app.handlers import build_handler
from .app.lifecycle import ShutdownCoordinator
from .config import ServerConfig
from .domain.errors import BindFailure


def fail(msg: str) -> int:
    print(f"[server] {msg}", file=sys.stderr, flush=True)
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    cfg = ServerConfig.from_args(argv)
    if not cfg.root_directory.is_dir():
        return fail(f"root path {cfg.root_directory}: not a directory")

    resolver = StaticContentResolver(cfg.root_directory, spa_fallback=cfg.spa_fallback)
    handler = build_handler(resolver)
    try:
        listener = acquire(cfg.bind_address)
    except BindFailure as e:
        return fail(str(e))
    except KeyboardInterrupt:
        return 0

    try:
        with listener:
            coordinator = ShutdownCoordinator(listener, handler, log=lambda msg: print(msg, flush=True))
            result = coordinator.run()
    except KeyboardInterrupt:
        # interrupted outside the window where the coordinator handles SIGINT
        print("[server] Closing server...", flush=True)
        return 0
    if result.fatal:
        return fail(f"serve: {result.cause}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
