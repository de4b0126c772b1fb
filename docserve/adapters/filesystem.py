from __future__ import annotations

import mimetypes
import os
import posixpath
from pathlib import Path
from typing import Optional, Tuple, Union
from urllib.parse import unquote, urlsplit, urlunsplit

from ..domain.models import Redirect, StaticFile


class StaticContentResolver:
    """Maps request paths to files under a root directory."""

    index_file = "index.html"
    default_type = "application/octet-stream"

    def __init__(self, root: Path | str, spa_fallback: bool = False):
        self.root = Path(root).resolve()
        self.spa_fallback = spa_fallback

    def resolve(self, request_path: str) -> Tuple[Optional[Union[StaticFile, Redirect]], bool]:
        rel = self._relative(request_path)
        if rel and self._needs_slash(request_path, rel):
            return Redirect(self._with_slash(request_path)), True
        target = self._locate(rel)
        if target is None and self.spa_fallback and self._is_route(request_path):
            target = self._existing_file(self.root / self.index_file)
        if target is None:
            return None, False
        return self._describe(target), True

    def _locate(self, rel: Optional[list[str]]) -> Optional[Path]:
        if rel is None:
            return None
        candidate = self.root.joinpath(*rel) if rel else self.root
        if candidate.is_dir():
            candidate = candidate / self.index_file
        return self._existing_file(candidate)

    def _relative(self, request_path: str) -> Optional[list[str]]:
        path = unquote(urlsplit(request_path).path)
        if "\x00" in path:
            return None
        normalized = posixpath.normpath("/" + path.lstrip("/"))
        parts = [p for p in normalized.split("/") if p and p != "."]
        if any(p == ".." or os.sep in p or (os.altsep and os.altsep in p) for p in parts):
            return None
        return parts

    def _needs_slash(self, request_path: str, rel: list[str]) -> bool:
        if urlsplit(request_path).path.endswith("/"):
            return False
        directory = self._inside_root(self.root.joinpath(*rel))
        return directory is not None and directory.is_dir()

    def _with_slash(self, request_path: str) -> str:
        parts = urlsplit(request_path)
        return urlunsplit(("", "", parts.path + "/", parts.query, ""))

    def _inside_root(self, candidate: Path) -> Optional[Path]:
        try:
            real = candidate.resolve()
        except OSError:
            return None
        # symlinks pointing outside the root are treated as missing
        if real != self.root and self.root not in real.parents:
            return None
        return real

    def _existing_file(self, candidate: Path) -> Optional[Path]:
        real = self._inside_root(candidate)
        return real if real is not None and real.is_file() else None

    def _is_route(self, request_path: str) -> bool:
        path = urlsplit(request_path).path
        return posixpath.splitext(path)[1] == ""

    def _describe(self, target: Path) -> StaticFile:
        content_type, encoding = mimetypes.guess_type(target.name)
        if encoding:
            content_type = None
        st = target.stat()
        return StaticFile(
            path=str(target),
            content_type=content_type or self.default_type,
            modified=st.st_mtime,
            size=st.st_size,
        )
