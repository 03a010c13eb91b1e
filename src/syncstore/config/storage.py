"""Where the catalog database and raw marketplace imports live on disk."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_path, optional_env_str

APP_DIR_NAME: Final[str] = "syncstore"
DEFAULT_DB_FILENAME: Final[str] = "syncstore.db"
RAW_IMPORTS_DIRNAME: Final[str] = "raw-imports"


def _platform_data_home() -> Path:
    if os.name == "nt":
        local = optional_env_path("LOCALAPPDATA")
        return local or Path.home() / "AppData" / "Local"
    return optional_env_path("XDG_DATA_HOME") or Path.home() / ".local" / "share"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Local layout: ``<data_dir>/syncstore.db`` and ``<data_dir>/raw-imports/``.

    ``raw_imports_dir`` points the raw batch store somewhere else, e.g. a directory
    shared with the marketplace import jobs.
    """

    data_dir: Path
    raw_imports_dir: Path | None = None
    database_filename: str = DEFAULT_DB_FILENAME

    @property
    def root(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def database_path(self, *, ensure: bool = True) -> Path:
        if ensure:
            self.root.mkdir(parents=True, exist_ok=True)
        return self.root / self.database_filename

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"

    def raw_imports_path(self) -> Path:
        if self.raw_imports_dir is None:
            return self.root / RAW_IMPORTS_DIRNAME
        return self.raw_imports_dir.expanduser().resolve()


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_storage_config() -> StorageConfig:
    return StorageConfig(
        data_dir=optional_env_path("SYNCSTORE_DATA_DIR") or _platform_data_home() / APP_DIR_NAME,
        raw_imports_dir=optional_env_path("SYNCSTORE_RAW_IMPORTS_DIR"),
    )


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise a SQLite file under the data directory."""

    uri = optional_env_str("DATABASE_URI", "")
    if uri:
        return DatabaseConfig(uri=uri)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri())


def get_database_uri() -> str:
    return get_database_config().uri
