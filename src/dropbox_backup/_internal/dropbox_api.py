"""Thin wrapper over the Dropbox content upload and OAuth token endpoints."""

from __future__ import annotations

import json
from pathlib import Path

import httpx

from dropbox_backup.exceptions import AuthError, TransferError

MAX_ERROR_BODY = 500


def remote_path_for(remote_dir: str, file_name: str) -> str:
    """Join the remote destination folder and a file name."""
    return f"{remote_dir.rstrip('/')}/{file_name}"


def upload_arg(remote_path: str) -> str:
    """Build the Dropbox-API-Arg header value for a plain add upload."""
    return json.dumps(
        {
            "autorename": False,
            "mode": "add",
            "mute": False,
            "path": remote_path,
            "strict_conflict": False,
        }
    )


class DropboxAPI:
    """Raw calls against the configured upload and token endpoints."""

    def __init__(self, client: httpx.Client, upload_url: str, token_url: str) -> None:
        self._client = client
        self.upload_url = upload_url
        self.token_url = token_url

    def upload(self, file_path: Path, remote_path: str, access_token: str) -> httpx.Response:
        """Send the whole file in one request.

        The response is returned for any HTTP status; the caller decides
        what the status means.

        Raises:
            TransferError: If the file can't be read or the request fails
                before a response arrives
        """
        try:
            content = file_path.read_bytes()
        except OSError as e:
            raise TransferError(f"Could not read {file_path}: {e}") from e

        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/octet-stream",
            "Dropbox-API-Arg": upload_arg(remote_path),
        }
        try:
            return self._client.post(self.upload_url, content=content, headers=headers)
        except httpx.HTTPError as e:
            raise TransferError(f"Upload request failed: {e}") from e

    def exchange_refresh_token(self, refresh_token: str, app_key: str, app_secret: str) -> str:
        """Trade the long-lived refresh token for a new access token.

        Raises:
            AuthError: If the endpoint rejects the exchange or returns no token
        """
        form = {
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
            "client_id": app_key,
            "client_secret": app_secret,
        }
        try:
            response = self._client.post(self.token_url, data=form)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise AuthError(
                f"Token refresh HTTP {e.response.status_code}: "
                f"{e.response.text[:MAX_ERROR_BODY]}"
            ) from e
        except httpx.HTTPError as e:
            raise AuthError(f"Token refresh request failed: {e}") from e
        except ValueError as e:
            raise AuthError(f"Token refresh returned invalid JSON: {e}") from e

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise AuthError("Token refresh response did not contain an access_token")
        return str(token)
