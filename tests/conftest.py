"""Pytest fixtures for dropbox_backup tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from helpers import TOKEN_URL, UPLOAD_URL, FakeDropbox

from dropbox_backup import (
    CredentialManager,
    DropboxBackup,
    Settings,
    TransferLedger,
    UploadOrchestrator,
)
from dropbox_backup._internal.dropbox_api import DropboxAPI


@pytest.fixture
def env(tmp_path: Path) -> dict[str, str]:
    """Environment variables for a complete configuration under tmp_path."""
    scan_dir = tmp_path / "inbox"
    scan_dir.mkdir()
    return {
        "API_ADDRESS": UPLOAD_URL,
        "API_REFRESH_ADDRESS": TOKEN_URL,
        "DROPBOX_DIR": "/Backups/books",
        "APP_KEY": "app-key",
        "APP_SECRET": "app-secret",
        "REFRESH_TOKEN": "long-lived-refresh",
        "UPLOADED_FILES_LOG": str(tmp_path / "state" / "uploaded_files.log"),
        "UPLOADED_DIRECTORY": str(tmp_path / "uploaded"),
        "CURRENT_DIRECTORY": str(scan_dir),
        "FILE_EXTENSIONS": ".epub,.pdf",
        "SHORT_TOKEN_FILE": str(tmp_path / "state" / "short_token.txt"),
        "RECURSE": "false",
        "SKIP_DIRS": "",
    }


@pytest.fixture
def settings(env: dict[str, str]) -> Settings:
    return Settings.from_mapping(env)


@pytest.fixture
def scan_dir(settings: Settings) -> Path:
    return settings.current_directory


@pytest.fixture
def cached_token(settings: Settings) -> str:
    """Write a cached access token so runs start without a refresh."""
    settings.short_token_file.parent.mkdir(parents=True, exist_ok=True)
    settings.short_token_file.write_text("cached-token\n")
    return "cached-token"


@pytest.fixture
def fake_dropbox() -> FakeDropbox:
    return FakeDropbox()


@pytest.fixture
def api(fake_dropbox: FakeDropbox):
    client = fake_dropbox.client()
    yield DropboxAPI(client, UPLOAD_URL, TOKEN_URL)
    client.close()


@pytest.fixture
def credentials(api: DropboxAPI, settings: Settings) -> CredentialManager:
    return CredentialManager(
        api,
        refresh_token=settings.refresh_token,
        app_key=settings.app_key,
        app_secret=settings.app_secret,
        token_cache_path=settings.short_token_file,
    )


@pytest.fixture
def ledger(settings: Settings) -> TransferLedger:
    return TransferLedger(settings.uploaded_files_log)


@pytest.fixture
def orchestrator(
    api: DropboxAPI,
    credentials: CredentialManager,
    ledger: TransferLedger,
    settings: Settings,
) -> UploadOrchestrator:
    return UploadOrchestrator(
        api,
        credentials,
        ledger,
        remote_dir=settings.dropbox_dir,
        uploaded_directory=settings.uploaded_directory,
    )


@pytest.fixture
def backup(settings: Settings, fake_dropbox: FakeDropbox):
    client = fake_dropbox.client()
    with DropboxBackup(settings, http_client=client) as backup:
        yield backup
    client.close()
