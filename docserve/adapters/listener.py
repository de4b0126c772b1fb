from __future__ import annotations

"""
Listener acquisition.

`acquire` opens the TCP listening socket before any server object exists so
that a bind failure stops the process before serving starts. The returned
`Listener` is handed to the HTTP server in place of the socket it would
normally create itself.
"""

import socket
import threading
from typing import Tuple

from ..config import split_address
from ..domain.errors import BindFailure


class Listener:
    """Exclusively owned listening socket whose close is idempotent."""

    def __init__(self, sock: socket.socket):
        self._sock = sock
        self._lock = threading.Lock()
        self._closed = False
        self.close_count = 0
        self.address: Tuple = sock.getsockname()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def host(self) -> str:
        return self.address[0]

    @property
    def port(self) -> int:
        return self.address[1]

    def url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"http://{host}:{self.port}"

    # socket-like surface used by socketserver
    def fileno(self) -> int:
        return self._sock.fileno()

    def accept(self):
        return self._sock.accept()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self.close_count += 1
        self._sock.close()

    def __enter__(self) -> "Listener":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def acquire(address: str, backlog: int = 128) -> Listener:
    host, port = split_address(address)
    try:
        infos = socket.getaddrinfo(host or None, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE)
        # prefer IPv4 when a name resolves to both families
        infos.sort(key=lambda info: info[0] != socket.AF_INET)
        family = infos[0][0]
        bind_host = infos[0][4][0] if host else ""
        # create_server sets SO_REUSEADDR on POSIX and closes the socket if bind fails
        sock = socket.create_server((bind_host, port), family=family, backlog=backlog)
    except OSError as e:
        raise BindFailure(address, e) from e
    return Listener(sock)
