"""Configuration loading for dropbox_backup.

Settings are read from the process environment after loading an optional
``.env`` file, and validated up front so a bad setup fails before any
file is touched.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from dropbox_backup.exceptions import ConfigError

REQUIRED_VARIABLES = (
    "API_ADDRESS",
    "API_REFRESH_ADDRESS",
    "DROPBOX_DIR",
    "APP_KEY",
    "APP_SECRET",
    "REFRESH_TOKEN",
    "UPLOADED_FILES_LOG",
    "UPLOADED_DIRECTORY",
    "CURRENT_DIRECTORY",
    "FILE_EXTENSIONS",
    "SHORT_TOKEN_FILE",
)

TRUE_VALUES = {"true", "1", "t", "yes", "y"}


def split_list(value: str | None) -> list[str]:
    """Split a comma-separated setting, dropping blank entries."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_bool(value: str | None) -> bool:
    if not value:
        return False
    return value.strip().lower() in TRUE_VALUES


@dataclass(frozen=True)
class Settings:
    """Validated configuration for one backup run."""

    api_address: str
    api_refresh_address: str
    dropbox_dir: str
    app_key: str
    app_secret: str
    refresh_token: str
    uploaded_files_log: Path
    uploaded_directory: Path
    current_directory: Path
    file_extensions: list[str]
    short_token_file: Path
    recurse: bool = False
    skip_dirs: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_mapping(cls, env: Mapping[str, str]) -> Settings:
        """Build settings from a mapping of environment variables.

        Raises:
            ConfigError: If required variables are missing or invalid
        """
        missing = [key for key in REQUIRED_VARIABLES if not env.get(key, "").strip()]
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

        file_extensions = split_list(env["FILE_EXTENSIONS"])
        if not file_extensions:
            raise ConfigError("FILE_EXTENSIONS must list at least one extension")

        return cls(
            api_address=env["API_ADDRESS"].strip(),
            api_refresh_address=env["API_REFRESH_ADDRESS"].strip(),
            dropbox_dir=env["DROPBOX_DIR"].strip(),
            app_key=env["APP_KEY"].strip(),
            app_secret=env["APP_SECRET"].strip(),
            refresh_token=env["REFRESH_TOKEN"].strip(),
            uploaded_files_log=Path(env["UPLOADED_FILES_LOG"].strip()),
            uploaded_directory=Path(env["UPLOADED_DIRECTORY"].strip()),
            current_directory=Path(env["CURRENT_DIRECTORY"].strip()),
            file_extensions=file_extensions,
            short_token_file=Path(env["SHORT_TOKEN_FILE"].strip()),
            recurse=parse_bool(env.get("RECURSE")),
            skip_dirs=frozenset(split_list(env.get("SKIP_DIRS"))),
        )

    @classmethod
    def from_env(cls, env_file: Path | str | None = None) -> Settings:
        """Load settings from the environment, reading a .env file first.

        Variables already set in the environment take precedence over the
        file.
        """
        if env_file is not None:
            load_dotenv(env_file)
        else:
            load_dotenv()
        return cls.from_mapping(os.environ)
