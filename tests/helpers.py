"""Shared test helpers for dropbox_backup tests."""

from __future__ import annotations

import json
import threading
from collections.abc import Callable
from itertools import count
from urllib.parse import parse_qs

import httpx

UPLOAD_URL = "https://content.example.test/2/files/upload"
TOKEN_URL = "https://api.example.test/oauth2/token"


class FakeDropbox:
    """Scripted stand-in for the upload and token endpoints.

    upload_statuses are returned in order, then 200 for every further upload.
    upload_status, if given, decides the status per request instead.
    """

    def __init__(
        self,
        upload_statuses: list[int] | None = None,
        *,
        upload_status: Callable[[httpx.Request], int] | None = None,
        token_status: int = 200,
        token_body: dict | None = None,
    ) -> None:
        self.upload_statuses = list(upload_statuses or [])
        self.upload_status = upload_status
        self.token_status = token_status
        self.token_body = token_body
        self.uploads: list[dict] = []
        self.refreshes: list[dict[str, str]] = []
        self._token_ids = count(1)
        self._lock = threading.Lock()

    def handler(self, request: httpx.Request) -> httpx.Response:
        if str(request.url) == TOKEN_URL:
            return self._token(request)
        if str(request.url) == UPLOAD_URL:
            return self._upload(request)
        return httpx.Response(404, text="unknown endpoint")

    def _token(self, request: httpx.Request) -> httpx.Response:
        form = {key: values[0] for key, values in parse_qs(request.content.decode()).items()}
        with self._lock:
            self.refreshes.append(form)
            token = f"fresh-token-{next(self._token_ids)}"
        if self.token_status != 200:
            return httpx.Response(self.token_status, json={"error": "invalid_grant"})
        body = self.token_body if self.token_body is not None else {"access_token": token}
        return httpx.Response(200, json=body)

    def _upload(self, request: httpx.Request) -> httpx.Response:
        record = {
            "token": request.headers["Authorization"].removeprefix("Bearer "),
            "arg": json.loads(request.headers["Dropbox-API-Arg"]),
            "content_type": request.headers["Content-Type"],
            "content": request.content,
        }
        with self._lock:
            self.uploads.append(record)
            if self.upload_status is None:
                status = self.upload_statuses.pop(0) if self.upload_statuses else 200
        if self.upload_status is not None:
            status = self.upload_status(request)
        if status == 200:
            return httpx.Response(200, json={"path_display": record["arg"]["path"]})
        return httpx.Response(status, text=f"error {status}")

    @property
    def uploaded_paths(self) -> list[str]:
        return [upload["arg"]["path"] for upload in self.uploads]

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))
