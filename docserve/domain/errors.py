from __future__ import annotations


class DocserveError(Exception):
    pass


class ConfigError(DocserveError):
    pass


class BindFailure(DocserveError):
    """The listening socket could not be opened. Never retried."""

    def __init__(self, address: str, cause: BaseException):
        self.address = address
        self.cause = cause
        reason = getattr(cause, "strerror", None) or str(cause)
        super().__init__(f"listen tcp {address}: {reason}")


class ServerClosed(DocserveError):
    """The server was closed during an orderly shutdown."""

    def __init__(self, msg: str = "server closed"):
        super().__init__(msg)
