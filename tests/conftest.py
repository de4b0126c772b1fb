from __future__ import annotations

import threading
import urllib.error
import urllib.request
from pathlib import Path

import pytest

from docserve.adapters.filesystem import StaticContentResolver
from docserve.adapters.listener import acquire
from docserve.app.handlers import build_handler
from docserve.app.server import StaticServer


FIXTURES = Path(__file__).parent / "fixtures"


def request(url, method="GET", timeout=5):
    """Return (status, headers, body) without raising on HTTP errors."""
    req = urllib.request.Request(url, method=method)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as r:
            return r.status, r.headers, r.read()
    except urllib.error.HTTPError as e:
        return e.code, e.headers, e.read()


@pytest.fixture
def fixtures_dir():
    return FIXTURES


@pytest.fixture
def listener():
    lst = acquire("127.0.0.1:0")
    yield lst
    lst.close()


@pytest.fixture
def serve_with():
    """Start a StaticServer for a resolver on a background thread."""
    started = []

    def _start(resolver):
        server = StaticServer(acquire("127.0.0.1:0"), build_handler(resolver), poll_interval=0.05)
        results = []
        thread = threading.Thread(target=lambda: results.append(server.serve()))
        thread.start()
        started.append((server, thread))
        return server, thread, results

    yield _start
    for server, thread in started:
        server.close()
        thread.join(timeout=5)


@pytest.fixture
def static_server(serve_with):
    server, _, _ = serve_with(StaticContentResolver(FIXTURES))
    return server
