"""Append-only record of files that have already been uploaded."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from dropbox_backup.exceptions import StorageError

logger = logging.getLogger(__name__)


class TransferLedger:
    """Newline-delimited list of uploaded file paths, mirrored in memory.

    The file is read once; afterwards lookups hit the in-memory set and
    record() appends to both under a lock.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._entries: set[str] = set()
        self._loaded = False
        self._lock = threading.Lock()

    def load(self) -> None:
        """Create the ledger file if needed and read it into memory.

        Raises:
            StorageError: If the file can't be created or read
        """
        with self._lock:
            self._load_locked()

    def _load_locked(self) -> None:
        if self._loaded:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch(exist_ok=True)
            with open(self.path, encoding="utf-8") as f:
                self._entries = {line.rstrip("\n") for line in f if line.strip()}
        except OSError as e:
            raise StorageError(f"Could not read upload log {self.path}: {e}") from e
        self._loaded = True
        logger.info(f"Loaded {len(self._entries)} entries from upload log: {self.path}")

    def contains(self, file_path: Path | str) -> bool:
        """Check whether file_path has been uploaded before."""
        with self._lock:
            self._load_locked()
            return str(file_path) in self._entries

    def record(self, file_path: Path | str) -> None:
        """Append file_path to the ledger and sync it to disk.

        Raises:
            StorageError: If the file can't be appended to
        """
        entry = str(file_path)
        with self._lock:
            self._load_locked()
            try:
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(entry + "\n")
                    f.flush()
                    os.fsync(f.fileno())
            except OSError as e:
                raise StorageError(f"Could not append to upload log {self.path}: {e}") from e
            self._entries.add(entry)
        logger.debug(f"Appended to upload log: {entry}")

    def __contains__(self, file_path: object) -> bool:
        if not isinstance(file_path, (str, Path)):
            return False
        return self.contains(file_path)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
