"""Access token handling: cache file, refresh exchange and single-flight locking."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from dropbox_backup._internal.dropbox_api import DropboxAPI
from dropbox_backup.exceptions import AuthError

logger = logging.getLogger(__name__)


class CredentialManager:
    """Holds the short-lived access token and renews it from the refresh token.

    The current token is cached on disk so that later runs can reuse it.
    Refreshes are serialized: a caller that waited on another thread's
    refresh gets that thread's token instead of issuing its own exchange.

    Example:
        credentials = CredentialManager(api, "refresh", "key", "secret", Path("token.txt"))
        token = credentials.current_access_token()
        ...
        token = credentials.refresh(expired_token=token)
    """

    def __init__(
        self,
        api: DropboxAPI,
        refresh_token: str,
        app_key: str,
        app_secret: str,
        token_cache_path: Path | str,
    ) -> None:
        self._api = api
        self._refresh_token = refresh_token
        self._app_key = app_key
        self._app_secret = app_secret
        self._token_cache_path = Path(token_cache_path)
        self._access_token: str | None = None
        self._lock = threading.Lock()
        self._failed_refresh: tuple[str | None, AuthError] | None = None
        self.refresh_count = 0

    def _load_token_cache(self) -> str | None:
        """Read the cached access token, if any."""
        if not self._token_cache_path.exists():
            return None
        try:
            token = self._token_cache_path.read_text().strip()
        except OSError as e:
            logger.warning(f"Failed to read token cache {self._token_cache_path}: {e}")
            return None
        return token or None

    def _save_token_cache(self, token: str) -> None:
        """Overwrite the token cache file."""
        try:
            self._token_cache_path.parent.mkdir(parents=True, exist_ok=True)
            self._token_cache_path.write_text(token)
        except OSError as e:
            logger.warning(f"Failed to save token cache {self._token_cache_path}: {e}")

    def current_access_token(self) -> str:
        """Return the current access token, loading or requesting one if needed.

        Raises:
            AuthError: If no cached token exists and the refresh is rejected
        """
        with self._lock:
            if self._access_token is None:
                self._access_token = self._load_token_cache()
                if self._access_token is not None:
                    logger.debug(f"Loaded access token from {self._token_cache_path}")
            if self._access_token is not None:
                return self._access_token
            logger.warning(f"No cached token in {self._token_cache_path}, requesting new token...")
            return self._refresh_locked()

    def refresh(self, expired_token: str | None = None) -> str:
        """Exchange the refresh token for a new access token.

        Args:
            expired_token: The token that was just rejected. If another caller
                has already replaced it, that replacement is returned and no
                new exchange happens. If another caller's exchange for the
                same token was rejected, that rejection is raised again.

        Returns:
            The new current access token

        Raises:
            AuthError: If the token endpoint rejects the exchange
        """
        with self._lock:
            if expired_token is not None:
                if self._access_token is not None and self._access_token != expired_token:
                    logger.debug("Access token already refreshed by another upload")
                    return self._access_token
                if self._failed_refresh is not None and self._failed_refresh[0] == expired_token:
                    error = self._failed_refresh[1]
                    raise AuthError(str(error)) from error
            return self._refresh_locked()

    def _refresh_locked(self) -> str:
        logger.info("Requesting new short-lived access token...")
        try:
            token = self._api.exchange_refresh_token(
                self._refresh_token, self._app_key, self._app_secret
            )
        except AuthError as e:
            self._failed_refresh = (self._access_token, e)
            raise
        self._failed_refresh = None
        self.refresh_count += 1
        self._access_token = token
        self._save_token_cache(token)
        return token
