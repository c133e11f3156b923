"""Per-file upload pipeline: skip-check, upload with one refresh retry, record, move."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import httpx

from dropbox_backup._internal.dropbox_api import MAX_ERROR_BODY, DropboxAPI, remote_path_for
from dropbox_backup.credentials import CredentialManager
from dropbox_backup.exceptions import MoveError, TransferError
from dropbox_backup.ledger import TransferLedger
from dropbox_backup.models import (
    CandidateResult,
    CandidateState,
    FileCandidate,
    RunReport,
    TransferOutcome,
)

logger = logging.getLogger(__name__)


def move_file(source: Path, destination_dir: Path) -> Path:
    """Move source into destination_dir, keeping its base name.

    Returns:
        The new location of the file

    Raises:
        MoveError: If the directory can't be created or the move fails
    """
    destination = destination_dir / source.name
    try:
        destination_dir.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(destination))
    except OSError as e:
        raise MoveError(f"Failed to move {source} to {destination}: {e}") from e
    return destination


def classify_response(response: httpx.Response) -> TransferOutcome:
    """Map an upload response to a transfer outcome."""
    if response.is_success:
        return TransferOutcome.ok(response.status_code)
    if response.status_code == 401:
        return TransferOutcome.unauthorized()
    return TransferOutcome.failed(
        f"Upload failed: HTTP {response.status_code} - {response.text[:MAX_ERROR_BODY]}",
        status_code=response.status_code,
    )


class UploadOrchestrator:
    """Drives each candidate to a terminal state.

    Example:
        orchestrator = UploadOrchestrator(api, credentials, ledger, "/Backups", Path("done"))
        report = orchestrator.run(discover(root, [".epub"]))
    """

    def __init__(
        self,
        api: DropboxAPI,
        credentials: CredentialManager,
        ledger: TransferLedger,
        remote_dir: str,
        uploaded_directory: Path | str,
    ) -> None:
        self._api = api
        self._credentials = credentials
        self._ledger = ledger
        self.remote_dir = remote_dir
        self.uploaded_directory = Path(uploaded_directory)

    def remote_path(self, candidate: FileCandidate) -> str:
        """Destination path of the candidate in Dropbox."""
        return remote_path_for(self.remote_dir, candidate.display_name)

    def _attempt(self, candidate: FileCandidate, remote_path: str, token: str) -> TransferOutcome:
        try:
            response = self._api.upload(candidate.path, remote_path, token)
        except TransferError as e:
            return TransferOutcome.failed(str(e), status_code=e.status_code)
        return classify_response(response)

    def process(self, candidate: FileCandidate) -> CandidateResult:
        """Run one candidate through the pipeline.

        Raises:
            AuthError: If a token refresh is rejected
            StorageError: If the ledger can't be written
        """
        remote_path = self.remote_path(candidate)

        if self._ledger.contains(candidate.path):
            logger.info(f"Already uploaded, skipping: {candidate.path}")
            return CandidateResult(candidate, CandidateState.SKIPPED, remote_path)

        token = self._credentials.current_access_token()
        outcome = self._attempt(candidate, remote_path, token)
        refreshed = False

        if outcome.auth_expired:
            logger.warning(
                f"Token expired/unauthorized while uploading {candidate.path}. Refreshing..."
            )
            token = self._credentials.refresh(expired_token=token)
            refreshed = True
            outcome = self._attempt(candidate, remote_path, token)
            if outcome.auth_expired:
                outcome = TransferOutcome.failed(
                    "Upload still unauthorized after refreshing the access token",
                    status_code=401,
                )

        if not outcome.success:
            logger.error(f"Failed to upload {candidate.path}: {outcome.reason}")
            return CandidateResult(
                candidate,
                CandidateState.PERMANENT_FAILURE,
                remote_path,
                error=outcome.reason,
                refreshed=refreshed,
            )

        logger.info(f"Uploaded {candidate.path} to {remote_path} (HTTP {outcome.status_code})")
        self._ledger.record(candidate.path)

        try:
            destination = move_file(candidate.path, self.uploaded_directory)
        except MoveError as e:
            logger.error(f"Uploaded and logged but left in place: {e}")
            return CandidateResult(
                candidate,
                CandidateState.PARTIAL_SUCCESS,
                remote_path,
                error=str(e),
                refreshed=refreshed,
            )

        logger.info(f"Moved {candidate.path} to {destination}")
        return CandidateResult(
            candidate, CandidateState.SUCCEEDED, remote_path, refreshed=refreshed
        )

    def run(self, candidates: Iterable[FileCandidate], workers: int = 1) -> RunReport:
        """Process every candidate and collect the results in input order.

        A failed candidate doesn't stop the batch; AuthError and StorageError
        propagate.
        """
        if workers < 1:
            raise ValueError("workers must be at least 1")

        report = RunReport()
        if workers == 1:
            for candidate in candidates:
                report.results.append(self.process(candidate))
            return report

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self.process, candidate) for candidate in candidates]
            try:
                for future in futures:
                    report.results.append(future.result())
            except Exception:
                for future in futures:
                    future.cancel()
                raise
        return report
