import socket

import pytest

from docserve.adapters.listener import Listener, acquire
from docserve.domain.errors import BindFailure


def test_acquire_os_assigned_port(listener):
    assert listener.host == "127.0.0.1"
    assert listener.port > 0
    assert listener.url() == f"http://127.0.0.1:{listener.port}"


def test_acquired_socket_accepts_connections(listener):
    with socket.create_connection(("127.0.0.1", listener.port), timeout=2):
        conn, _ = listener.accept()
        conn.close()


def test_close_releases_socket_once(listener):
    listener.close()
    listener.close()
    assert listener.closed
    assert listener.close_count == 1
    with pytest.raises(OSError):
        socket.create_connection(("127.0.0.1", listener.port), timeout=1)


def test_context_manager_closes():
    with acquire("127.0.0.1:0") as lst:
        assert not lst.closed
    assert lst.closed
    assert lst.close_count == 1


def test_bind_failure_when_address_in_use(listener):
    address = f"127.0.0.1:{listener.port}"
    with pytest.raises(BindFailure) as exc:
        acquire(address)
    assert exc.value.address == address
    assert str(exc.value).startswith(f"listen tcp {address}: ")
    assert isinstance(exc.value.cause, OSError)


def test_bind_failure_on_unresolvable_host():
    with pytest.raises(BindFailure):
        acquire("no-such-host.invalid:0")


def test_ipv6_url_is_bracketed():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        lst = Listener(sock)
        lst.address = ("::1", 8080, 0, 0)
        assert lst.url() == "http://[::1]:8080"
    finally:
        sock.close()
