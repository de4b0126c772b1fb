from __future__ import annotations

"""
Lifecycle of one serving run: Starting -> Serving -> Closing -> Terminated.

Two threads are started and joined:

- the serving task runs `StaticServer.serve` until it is closed or fails;
- the signal watcher waits on the shutdown token and then closes the server
  exactly once.

The token fires on SIGINT, or when the serving task stops on its own, so the
watcher always wakes up and the join below always completes.
"""

import signal
import threading
from typing import Callable, Iterable, List, Optional, Type

from ..adapters.listener import Listener
from ..domain.models import LifecycleState, RunResult
from .server import StaticServer


_ORDER = list(LifecycleState)


class ShutdownToken:
    """One-shot shutdown notification. Only the first trigger counts."""

    SIGNAL = "signal"
    SERVE = "serve"

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self.origin: Optional[str] = None

    def trigger(self, origin: str) -> bool:
        with self._lock:
            if self._event.is_set():
                return False
            self.origin = origin
            self._event.set()
        return True

    @property
    def triggered(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)


class ShutdownCoordinator:
    def __init__(
        self,
        listener: Listener,
        handler_cls: Type,
        token: Optional[ShutdownToken] = None,
        signals: Iterable[int] = (signal.SIGINT,),
        poll_interval: float = 0.5,
        log: Callable[[str], None] = print,
    ):
        self.listener = listener
        self.token = token or ShutdownToken()
        self.signals = tuple(signals)
        self.log = log
        self.state = LifecycleState.STARTING
        self.server = StaticServer(listener, handler_cls, poll_interval=poll_interval)
        self.result: Optional[RunResult] = None
        self.close_requests = 0
        self._tasks: List[threading.Thread] = []
        self._state_lock = threading.Lock()

    def _set_state(self, state: LifecycleState) -> None:
        # states only move forward; a very early signal may beat the serving task
        with self._state_lock:
            if _ORDER.index(state) > _ORDER.index(self.state):
                self.state = state

    def _on_signal(self, signum, frame) -> None:
        self.token.trigger(ShutdownToken.SIGNAL)

    def _install_signal_handlers(self) -> dict:
        previous = {}
        if threading.current_thread() is not threading.main_thread():
            # signal handlers can only be installed from the main thread
            return previous
        for signum in self.signals:
            previous[signum] = signal.signal(signum, self._on_signal)
        return previous

    def _on_serving(self) -> None:
        self._set_state(LifecycleState.SERVING)
        self.log(f"[server] Serve at {self.listener.url()}")

    def _serving_task(self) -> None:
        try:
            self.result = self.server.serve(on_start=self._on_serving)
        finally:
            self.token.trigger(ShutdownToken.SERVE)

    def _watch_signal(self) -> None:
        self.token.wait()
        self._set_state(LifecycleState.CLOSING)
        if self.token.origin == ShutdownToken.SIGNAL:
            self.log("[server] Closing server...")
        self.close_requests += 1
        self.server.close()

    def run(self) -> RunResult:
        """Serve until interrupted or failed; returns once both tasks exited."""
        previous = self._install_signal_handlers()
        try:
            self._tasks = [
                threading.Thread(target=self._serving_task, name="docserve-serve"),
                threading.Thread(target=self._watch_signal, name="docserve-signal"),
            ]
            for task in self._tasks:
                task.start()
            for task in self._tasks:
                task.join()
        finally:
            for signum, handler in previous.items():
                signal.signal(signum, handler)
            self.listener.close()
        self._set_state(LifecycleState.TERMINATED)
        if self.result is None:
            # the serving task died before producing a result
            self.result = RunResult.failed(RuntimeError("serving task exited without a result"))
        return self.result
