from __future__ import annotations

from typing import Optional, Protocol, Tuple, Union

from ..domain.models import Redirect, StaticFile


class ContentResolver(Protocol):
    def resolve(self, request_path: str) -> Tuple[Optional[Union[StaticFile, Redirect]], bool]:
        ...
