"""Where jobsync keeps its database and HTTP cache."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_str

APP_DIR_NAME: Final[str] = "jobsync"
DEFAULT_DB_FILENAME: Final[str] = "jobsync.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"

# The engine is always async; sync SQLite URIs are pointed at the aiosqlite driver.
_SYNC_SQLITE_PREFIXES: Final[tuple[str, ...]] = ("sqlite+pysqlite://", "sqlite://")
ASYNC_SQLITE_PREFIX: Final[str] = "sqlite+aiosqlite://"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def file_path(self, filename: str, *, ensure: bool = True) -> Path:
        data_dir = self.resolve_data_dir()
        if ensure:
            data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir / filename

    def database_path(self, *, ensure: bool = True) -> Path:
        return self.file_path(DEFAULT_DB_FILENAME, ensure=ensure)

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        return self.file_path(HTTP_CACHE_FILENAME, ensure=ensure)


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False


def as_async_uri(uri: str) -> str:
    for prefix in _SYNC_SQLITE_PREFIXES:
        if uri.startswith(prefix):
            return ASYNC_SQLITE_PREFIX + uri.removeprefix(prefix)
    return uri


def _platform_data_home() -> Path:
    if os.name == "nt":
        local = os.getenv("LOCALAPPDATA")
        return Path(local) if local else Path.home() / "AppData" / "Local"
    xdg = os.getenv("XDG_DATA_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    override = os.getenv("JOBSYNC_DATA_DIR")
    data_dir = Path(override) if override else _platform_data_home() / APP_DIR_NAME
    return StorageConfig(data_dir=data_dir)


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    echo = optional_env_str("JOBSYNC_DB_ECHO", "").lower() in {"1", "true", "yes"}
    explicit = os.getenv("DATABASE_URI")
    if explicit:
        return DatabaseConfig(uri=as_async_uri(explicit), echo=echo)
    database_path = (storage or get_storage_config()).database_path()
    return DatabaseConfig(uri=f"{ASYNC_SQLITE_PREFIX}/{database_path}", echo=echo)
