"""Durable key-value storage backing the watchlist store.

The store only needs a synchronous string-keyed get/set/remove surface.
``JsonFileStorage`` keeps one file per key under the platform user data
directory; ``InMemoryStorage`` backs tests and ephemeral sessions.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from platformdirs import user_data_dir

from movie_browser.models import CONFIG_APP_NAME

logger = logging.getLogger(__name__)

_VALID_KEY = re.compile(r"^[A-Za-z0-9_-]+$")


class StorageError(OSError):
    """Raised when a storage key cannot be read or written."""


@runtime_checkable
class KeyValueStorage(Protocol):
    """Synchronous string key-value surface."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...

    def remove(self, key: str) -> None:
        """Delete key. Removing an absent key is a no-op."""
        ...


def get_default_storage_dir() -> Path:
    """Get the default storage directory.

    Uses platformdirs for cross-platform placement:
    - Linux: ~/.local/share/movie-browser/
    - macOS: ~/Library/Application Support/movie-browser/
    - Windows: %LOCALAPPDATA%/movie-browser/
    """
    return Path(user_data_dir(CONFIG_APP_NAME))


def _check_key(key: str) -> None:
    if not _VALID_KEY.match(key):
        raise ValueError(f"Invalid storage key: {key!r}")


class InMemoryStorage:
    """Dict-backed storage. Nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        _check_key(key)
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        _check_key(key)
        self._data[key] = value

    def remove(self, key: str) -> None:
        _check_key(key)
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileStorage:
    """One ``<key>.json`` file per key inside ``directory``.

    Writes go to a temp file in the same directory followed by
    ``os.replace()`` so an interrupted write never leaves a truncated value.
    """

    def __init__(self, directory: Path | None = None) -> None:
        self._directory = directory if directory is not None else get_default_storage_dir()

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        _check_key(key)
        return self._directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Could not read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self._directory, suffix=".tmp", prefix=f".{key}-")
            closed = False
            try:
                os.write(fd, value.encode("utf-8"))
                os.close(fd)
                closed = True
                os.replace(tmp_path, path)
            except BaseException:
                if not closed:
                    os.close(fd)
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
                raise
        except OSError as e:
            raise StorageError(f"Could not write {path}: {e}") from e
        logger.debug("Wrote %d bytes to %s", len(value), path)

    def remove(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Could not remove {path}: {e}") from e


__all__ = [
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorage",
    "StorageError",
    "get_default_storage_dir",
]
