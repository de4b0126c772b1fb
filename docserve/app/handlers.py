from __future__ import annotations

import html
import json
import time
from email.utils import formatdate
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler
from typing import Optional

from .. import __version__
from ..domain.models import Redirect, StaticFile
from ..ports.resolver import ContentResolver


ALLOWED_METHODS = {"GET", "HEAD"}


def build_handler(resolver: ContentResolver):

    class Handler(BaseHTTPRequestHandler):
        server_version = f"docserve/{__version__}"

        def _send_file(self, file: StaticFile, body: Optional[bytes]):
            # HEAD passes no body and only needs the size
            with_body = body is not None
            self._resp_code = HTTPStatus.OK
            self.send_response(HTTPStatus.OK)
            self.send_header("Content-Type", file.content_type)
            self.send_header("Content-Length", str(len(body) if with_body else file.size))
            self.send_header("Last-Modified", formatdate(file.modified, usegmt=True))
            self.end_headers()
            if with_body:
                self.wfile.write(body)

        def _redirect(self, redirect: Redirect, with_body: bool = True):
            self._resp_code = HTTPStatus.MOVED_PERMANENTLY
            body = f"<a href=\"{html.escape(redirect.location)}\">Moved Permanently</a>.\n".encode()
            self.send_response(HTTPStatus.MOVED_PERMANENTLY)
            self.send_header("Location", redirect.location)
            self.send_header("Content-Type", "text/html; charset=utf-8")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            if with_body:
                self.wfile.write(body)

        def _text(self, code: int, msg: str, with_body: bool = True, allowed: Optional[set[str]] = None):
            self._resp_code = code
            body = (msg + "\n").encode()
            self.send_response(code)
            self.send_header("Content-Type", "text/plain; charset=utf-8")
            self.send_header("Content-Length", str(len(body)))
            if allowed:
                self.send_header("Allow", ", ".join(sorted(allowed)))
            self.end_headers()
            if with_body:
                self.wfile.write(body)

        def _not_found(self, with_body: bool = True):
            self._text(HTTPStatus.NOT_FOUND, "404 page not found", with_body)

        def _error(self, with_body: bool = True):
            self._text(HTTPStatus.INTERNAL_SERVER_ERROR, "500 internal server error", with_body)

        def _method_not_allowed(self):
            self._text(HTTPStatus.METHOD_NOT_ALLOWED, "405 method not allowed", allowed=ALLOWED_METHODS)

        def _log(self, start: float, code: int):
            dur_ms = round((time.time() - start) * 1000, 1)
            entry = {
                "ts": int(time.time() * 1000),
                "method": self.command,
                "path": self.path,
                "status": int(code),
                "ms": dur_ms,
                "remote": self.client_address[0] if self.client_address else None,
            }
            print(json.dumps(entry, separators=(",", ":")), flush=True)

        def _serve(self, with_body: bool):
            start = time.time()
            self._resp_code = 500
            try:
                try:
                    file, found = resolver.resolve(self.path)
                    body = file.read() if with_body and isinstance(file, StaticFile) else None
                except Exception:  # noqa: BLE001
                    self._error(with_body)
                    return
                if not found or file is None:
                    self._not_found(with_body)
                    return
                if isinstance(file, Redirect):
                    self._redirect(file, with_body)
                    return
                self._send_file(file, body)
            finally:
                self._log(start, getattr(self, "_resp_code", 500))

        def do_GET(self):  # noqa: N802
            self._serve(with_body=True)

        def do_HEAD(self):  # noqa: N802
            self._serve(with_body=False)

        def _reject(self):
            start = time.time()
            try:
                self._method_not_allowed()
            finally:
                self._log(start, getattr(self, "_resp_code", 405))

        do_POST = do_PUT = do_DELETE = do_PATCH = do_OPTIONS = _reject

        # Quiet default logging
        def log_message(self, format, *args):  # noqa: A003 - http.server API
            return

    return Handler
