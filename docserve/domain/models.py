from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from .errors import ServerClosed


class LifecycleState(str, enum.Enum):
    STARTING = "starting"
    SERVING = "serving"
    CLOSING = "closing"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class RunResult:
    """
    Terminal outcome of the serving loop.

    - cause is None  -> closed normally (shutdown was requested)
    - cause is set   -> the loop stopped because of `cause`
    """

    cause: Optional[BaseException] = None

    @classmethod
    def closed(cls) -> "RunResult":
        return cls()

    @classmethod
    def failed(cls, cause: BaseException) -> "RunResult":
        return cls(cause)

    @property
    def closed_normally(self) -> bool:
        return self.cause is None

    @property
    def fatal(self) -> bool:
        # a close-type cause is what a graceful shutdown leaves behind
        return self.cause is not None and not isinstance(self.cause, ServerClosed)


@dataclass(frozen=True)
class StaticFile:
    """A resolved file. The body is read on demand unless given up front."""

    path: str
    content_type: str
    modified: float
    size: int
    body: Optional[bytes] = None

    def read(self) -> bytes:
        if self.body is not None:
            return self.body
        with open(self.path, "rb") as f:
            return f.read()


@dataclass(frozen=True)
class Redirect:
    """A directory was requested without its trailing slash."""

    location: str
