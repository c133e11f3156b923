"""DropboxBackup: wires settings, credentials, ledger and orchestrator together."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import httpx

from dropbox_backup._internal.dropbox_api import DropboxAPI
from dropbox_backup.config import Settings
from dropbox_backup.credentials import CredentialManager
from dropbox_backup.exceptions import ConfigError
from dropbox_backup.ledger import TransferLedger
from dropbox_backup.models import FileCandidate, RunReport
from dropbox_backup.orchestrator import UploadOrchestrator
from dropbox_backup.sources import discover

logger = logging.getLogger(__name__)


class DropboxBackup:
    """One backup run against a Dropbox account.

    Supports both context manager and manual session patterns.

    Example (context manager - recommended):
        with DropboxBackup(Settings.from_env()) as backup:
            backup.prepare()
            report = backup.run()

    Example (manual session):
        backup = DropboxBackup(settings)
        backup.prepare()
        backup.run(workers=4)
        backup.close()
    """

    def __init__(self, settings: Settings, *, http_client: httpx.Client | None = None) -> None:
        """Initialize the backup.

        Args:
            settings: Validated configuration
            http_client: Optional preconfigured client; one is created if omitted
                and closed again by close()
        """
        self.settings = settings
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client()
        self.api = DropboxAPI(self._http, settings.api_address, settings.api_refresh_address)
        self.credentials = CredentialManager(
            self.api,
            refresh_token=settings.refresh_token,
            app_key=settings.app_key,
            app_secret=settings.app_secret,
            token_cache_path=settings.short_token_file,
        )
        self.ledger = TransferLedger(settings.uploaded_files_log)
        self.orchestrator = UploadOrchestrator(
            self.api,
            self.credentials,
            self.ledger,
            remote_dir=settings.dropbox_dir,
            uploaded_directory=settings.uploaded_directory,
        )

    def __enter__(self) -> DropboxBackup:
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Exit context manager."""
        self.close()

    def prepare(self) -> None:
        """Run the setup phase; any failure here aborts before uploading.

        Raises:
            ConfigError: If the upload directory can't be created
            StorageError: If the upload log can't be created or read
            AuthError: If no cached token exists and the refresh is rejected
        """
        try:
            self.settings.uploaded_directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError(
                f"Could not create upload directory {self.settings.uploaded_directory}: {e}"
            ) from e
        self.ledger.load()
        self.credentials.current_access_token()

    def discover(self) -> Iterator[FileCandidate]:
        """Find candidates under the configured scan directory.

        The upload directory is never scanned, even when it sits inside
        the scan directory, so moved files are not picked up again.
        """
        return discover(
            self.settings.current_directory,
            self.settings.file_extensions,
            recurse=self.settings.recurse,
            skip_dirs=self.settings.skip_dirs,
            skip_paths=[self.settings.uploaded_directory],
        )

    def run(self, workers: int = 1) -> RunReport:
        """Discover and upload every candidate."""
        candidates = self.discover()
        return self.orchestrator.run(candidates, workers=workers)

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self._http.close()
