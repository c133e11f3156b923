"""Dropbox Backup - upload local files to Dropbox and move them out of the way.

Example usage:
    from dropbox_backup import DropboxBackup, Settings

    with DropboxBackup(Settings.from_env()) as backup:
        backup.prepare()
        report = backup.run()
        print(f"{len(report)} file(s) processed, ok={report.ok}")
"""

from dropbox_backup.client import DropboxBackup
from dropbox_backup.config import Settings
from dropbox_backup.credentials import CredentialManager
from dropbox_backup.exceptions import (
    AuthError,
    BackupError,
    ConfigError,
    MoveError,
    StorageError,
    TransferError,
)
from dropbox_backup.ledger import TransferLedger
from dropbox_backup.models import (
    CandidateResult,
    CandidateState,
    FileCandidate,
    OutcomeKind,
    RunReport,
    TransferOutcome,
)
from dropbox_backup.orchestrator import UploadOrchestrator
from dropbox_backup.sources import discover

__version__ = "0.1.0"

__all__ = [
    # Main entry points
    "DropboxBackup",
    "Settings",
    # Pipeline components
    "CredentialManager",
    "TransferLedger",
    "UploadOrchestrator",
    "discover",
    # Models
    "CandidateResult",
    "CandidateState",
    "FileCandidate",
    "OutcomeKind",
    "RunReport",
    "TransferOutcome",
    # Exceptions
    "BackupError",
    "ConfigError",
    "AuthError",
    "StorageError",
    "TransferError",
    "MoveError",
]
