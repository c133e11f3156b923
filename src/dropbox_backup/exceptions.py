"""Exception hierarchy for the dropbox_backup package."""

from __future__ import annotations


class BackupError(Exception):
    """Base exception for all dropbox_backup errors."""

    pass


class ConfigError(BackupError):
    """Raised when a required setting is missing or invalid."""

    pass


class AuthError(BackupError):
    """Raised when the refresh token exchange is rejected."""

    pass


class StorageError(BackupError):
    """Raised when the transfer ledger cannot be read or written."""

    pass


class TransferError(BackupError):
    """Raised when an upload fails for a reason other than authorization.

    status_code is None when the request never produced a response.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MoveError(BackupError):
    """Raised when an uploaded file cannot be moved out of the scan root."""

    pass
