"""Discovery of local files eligible for upload."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from dropbox_backup.exceptions import ConfigError
from dropbox_backup.models import FileCandidate

logger = logging.getLogger(__name__)


def normalize_extensions(extensions: Iterable[str]) -> tuple[str, ...]:
    """Return extensions with a leading dot, e.g. ``epub`` -> ``.epub``."""
    normalized = []
    for ext in extensions:
        ext = ext.strip()
        if not ext:
            continue
        normalized.append(ext if ext.startswith(".") else f".{ext}")
    return tuple(normalized)


def discover(
    root: Path | str,
    extensions: Iterable[str],
    recurse: bool = False,
    skip_dirs: Iterable[str] = (),
    skip_paths: Iterable[Path | str] = (),
) -> Iterator[FileCandidate]:
    """Find files under root whose names end with one of the extensions.

    Matching is case-sensitive. Directories named in skip_dirs are pruned
    at any depth, as are the exact directories listed in skip_paths.
    Without recurse, only files directly inside root are considered.
    Entries are visited in lexicographic order, files before subdirectories.
    Unreadable subdirectories are logged and skipped.

    Args:
        root: Directory to scan
        extensions: Suffixes to accept, with or without the leading dot
        recurse: Descend into subdirectories
        skip_dirs: Directory names to exclude from traversal
        skip_paths: Directories to exclude from traversal, matched by
            resolved path rather than by name

    Returns:
        A single-use iterator of FileCandidate

    Raises:
        ConfigError: If root is not an existing directory
    """
    root = Path(root)
    if not root.is_dir():
        raise ConfigError(f"Scan directory does not exist: {root}")
    return _walk(
        root.absolute(),
        normalize_extensions(extensions),
        recurse,
        frozenset(skip_dirs),
        frozenset(Path(p).resolve() for p in skip_paths),
    )


def _log_walk_error(error: OSError) -> None:
    logger.warning(f"Could not read directory {error.filename}: {error.strerror or error}")


def _walk(
    root: Path,
    extensions: tuple[str, ...],
    recurse: bool,
    skip_dirs: frozenset[str],
    skip_paths: frozenset[Path],
) -> Iterator[FileCandidate]:
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        if recurse:
            pruned = sorted(
                name
                for name in dirnames
                if name in skip_dirs or (Path(dirpath) / name).resolve() in skip_paths
            )
            if pruned:
                logger.debug(f"Skipping directories under {dirpath}: {', '.join(pruned)}")
            dirnames[:] = sorted(name for name in dirnames if name not in pruned)
        else:
            dirnames[:] = []

        for name in sorted(filenames):
            if name.endswith(extensions):
                yield FileCandidate.from_path(Path(dirpath) / name)
