from __future__ import annotations

"""
Serving loop on top of the standard library (`http.server.ThreadingHTTPServer`).

The server is built around a listener acquired beforehand instead of binding
its own socket. `serve` blocks until the server is closed or fails and always
returns a `RunResult`; `close` is safe to call from another thread while
`serve` is running, before it started, or after it stopped.
"""

import json
import sys
import threading
import time
import traceback
from http.server import ThreadingHTTPServer
from typing import Callable, Optional, Type

from ..adapters.listener import Listener
from ..domain.errors import ServerClosed
from ..domain.models import RunResult


class StaticServer(ThreadingHTTPServer):
    # request threads are joined by server_close so in-flight responses finish
    daemon_threads = False
    block_on_close = True

    def __init__(self, listener: Listener, handler_cls: Type, poll_interval: float = 0.5):
        super().__init__(listener.address[:2], handler_cls, bind_and_activate=False)
        # drop the unbound socket TCPServer created and use the acquired one
        self.socket.close()
        self.socket = listener
        self.listener = listener
        self.server_address = listener.address
        self.server_name = listener.host
        self.server_port = listener.port
        self.poll_interval = poll_interval
        self._lock = threading.Lock()
        self._serving = False
        self._stopped = False
        self._closing = False

    def serve(self, on_start: Optional[Callable[[], None]] = None) -> RunResult:
        with self._lock:
            if self._closing:
                return RunResult.failed(ServerClosed())
            self._serving = True
        try:
            if on_start is not None:
                on_start()
            self.serve_forever(poll_interval=self.poll_interval)
        except Exception as e:  # noqa: BLE001
            self._mark_stopped()
            if self._closing:
                return RunResult.failed(ServerClosed(f"server closed: {e}"))
            return RunResult.failed(e)
        self._mark_stopped()
        # serve_forever only returns once shutdown was requested
        return RunResult.closed()

    def _mark_stopped(self) -> None:
        with self._lock:
            self._stopped = True

    def close(self) -> bool:
        """
        Stop accepting, wait for in-flight requests and release the listener.

        Returns False when the server was already closed.
        """
        with self._lock:
            if self._closing:
                return False
            self._closing = True
            serving = self._serving and not self._stopped
        if serving:
            # returns at once when the loop already exited on its own
            self.shutdown()
        self.server_close()
        return True

    def handle_error(self, request, client_address):
        entry = {
            "ts": int(time.time() * 1000),
            "error": "request failed",
            "remote": client_address[0] if client_address else None,
            "trace": traceback.format_exc(),
        }
        print(json.dumps(entry, separators=(",", ":")), file=sys.stderr, flush=True)
