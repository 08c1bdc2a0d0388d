"""Configuration persistence, plus watchlist export and import."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from movie_browser.models import (
    CONFIG_APP_NAME,
    DEFAULT_API_BASE_URL,
    DEFAULT_LIST_KEY,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    MAX_REQUEST_TIMEOUT_SECONDS,
    UserConfig,
    WatchlistSnapshot,
)
from movie_browser.parsing import movie_to_dict, parse_list_key, parse_movie
from movie_browser.watchlist import WatchlistStore

logger = logging.getLogger(__name__)

# ============================================================================
# Configuration Persistence
# ============================================================================
#
# Validation contract: _dict_to_config() guarantees valid output for any input:
#
#   Field                    Rule                          Handler
#   ───────────────────────  ────────────────────────────  ─────────────────────
#   api_base_url             non-empty http(s) URL         _coerce_api_base_url
#   request_timeout_seconds  1 ≤ x ≤ 120                   _coerce_timeout
#   default_list             parseable list key            _coerce_default_list
#   scalar fields            type-checked via _safe_get()  _dict_to_config
#
CONFIG_FILENAME = "config.json"
EXPORT_FORMAT = "movie-browser-watchlist"


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Uses platformdirs for cross-platform config directory:
    - Linux: ~/.config/movie-browser/config.json
    - macOS: ~/Library/Application Support/movie-browser/config.json
    - Windows: %APPDATA%/movie-browser/config.json
    """
    config_dir = Path(user_config_dir(CONFIG_APP_NAME))
    return config_dir / CONFIG_FILENAME


def _config_to_dict(config: UserConfig) -> dict[str, Any]:
    """Serialize UserConfig to a JSON-compatible dictionary."""
    return {
        "version": config.version,
        "api_base_url": config.api_base_url,
        "request_timeout_seconds": _coerce_timeout(config.request_timeout_seconds),
        "default_list": config.default_list,
        "storage_dir": config.storage_dir,
        "ascii_icons": config.ascii_icons,
    }


def _safe_get(data: dict, key: str, default: Any, expected_type: type) -> Any:
    """Safely get a value from dict with type validation.

    Returns the default if key is missing or value has wrong type.
    """
    value = data.get(key, default)
    if not isinstance(value, expected_type):
        return default
    return value


def _coerce_timeout(value: Any) -> int:
    """Validate and clamp the request timeout."""
    if isinstance(value, bool) or not isinstance(value, int):
        return DEFAULT_REQUEST_TIMEOUT_SECONDS
    return max(1, min(value, MAX_REQUEST_TIMEOUT_SECONDS))


def _coerce_api_base_url(value: Any) -> str:
    if not isinstance(value, str) or not value.startswith(("http://", "https://")):
        return DEFAULT_API_BASE_URL
    return value.rstrip("/")


def _coerce_default_list(value: Any) -> str:
    if not isinstance(value, str):
        return DEFAULT_LIST_KEY
    try:
        parse_list_key(value)
    except ValueError:
        logger.warning("Invalid default_list %r, defaulting to %r", value, DEFAULT_LIST_KEY)
        return DEFAULT_LIST_KEY
    return value


def _dict_to_config(data: dict[str, Any]) -> UserConfig:
    """Deserialize a dictionary to UserConfig with type validation."""
    return UserConfig(
        api_base_url=_coerce_api_base_url(data.get("api_base_url")),
        request_timeout_seconds=_coerce_timeout(data.get("request_timeout_seconds")),
        default_list=_coerce_default_list(data.get("default_list")),
        storage_dir=_safe_get(data, "storage_dir", "", str),
        ascii_icons=_safe_get(data, "ascii_icons", False, bool),
        version=_safe_get(data, "version", 1, int),
    )


def _backup_corrupt_config(config_path: Path) -> None:
    """Move an unusable config aside so the next save does not clobber it."""
    backup = config_path.with_name(config_path.name + ".corrupt")
    try:
        os.replace(config_path, backup)
    except OSError as e:
        logger.warning("Could not back up corrupt config: %s", e)


def load_config() -> UserConfig:
    """Load configuration from disk.

    Returns default config if file doesn't exist or is corrupted. A corrupted
    file is renamed to ``config.json.corrupt`` and the returned config has
    ``config_defaulted`` set so the UI can warn.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return UserConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.warning("Config file has invalid JSON, using defaults: %s", e)
        _backup_corrupt_config(config_path)
        return UserConfig(config_defaulted=True)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read config file, using defaults: %s", e)
        return UserConfig()

    if not isinstance(data, dict):
        logger.warning("Config file root is %s, using defaults", type(data).__name__)
        _backup_corrupt_config(config_path)
        return UserConfig(config_defaulted=True)
    return _dict_to_config(data)


def save_config(config: UserConfig) -> bool:
    """Save configuration to disk atomically.

    Uses write-to-tempfile + os.replace() to prevent partial writes
    on crash/interrupt from corrupting the config file.

    Returns True on success, False on failure.
    """
    config_path = get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        json_str = json.dumps(_config_to_dict(config), indent=2, ensure_ascii=False)
        fd, tmp_path = tempfile.mkstemp(dir=config_path.parent, suffix=".tmp", prefix=".config-")
        closed = False
        try:
            os.write(fd, json_str.encode("utf-8"))
            os.close(fd)
            closed = True
            os.replace(tmp_path, config_path)
        except BaseException:
            if not closed:
                os.close(fd)
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        return True
    except OSError as e:
        logger.error("Failed to save config: %s", e)
        return False


# ============================================================================
# Watchlist export / import
# ============================================================================


def export_watchlist(snapshot: WatchlistSnapshot) -> dict[str, Any]:
    """Export the watchlist and watched flags as a portable dict.

    The exported data can be loaded on another machine via import_watchlist().
    """
    return {
        "format": EXPORT_FORMAT,
        "version": 1,
        "exported_at": datetime.now().isoformat(),
        "watchlist": [movie_to_dict(movie) for movie in snapshot.watchlist],
        "watched": list(snapshot.watched),
    }


def import_watchlist(
    data: dict[str, Any], store: WatchlistStore, merge: bool = True
) -> tuple[int, int]:
    """Import a previously exported watchlist into store.

    When merge=True (default), existing entries are kept and new ones added.
    When merge=False, the store is cleared first. Watched ids are applied
    only to movies that end up in the watchlist.

    Returns (movies_imported, watched_imported).

    Raises:
        ValueError: If data is not a movie-browser watchlist export.
    """
    if not isinstance(data, dict) or data.get("format") != EXPORT_FORMAT:
        raise ValueError("Not a valid movie-browser watchlist export")

    if not merge:
        store.clear()

    movies_imported = 0
    raw_movies = data.get("watchlist", [])
    if isinstance(raw_movies, list):
        for raw in raw_movies:
            movie = parse_movie(raw)
            if movie is None or store.is_movie_in_watchlist(movie.id):
                continue
            store.add_movie(movie)
            movies_imported += 1

    watched_imported = 0
    raw_watched = data.get("watched", [])
    if isinstance(raw_watched, list):
        for movie_id in raw_watched:
            if isinstance(movie_id, bool) or not isinstance(movie_id, int):
                continue
            if not store.is_movie_in_watchlist(movie_id) or store.is_movie_watched(movie_id):
                continue
            store.mark_as_watched(movie_id)
            watched_imported += 1

    return movies_imported, watched_imported


__all__ = [
    "CONFIG_APP_NAME",
    "CONFIG_FILENAME",
    "EXPORT_FORMAT",
    "export_watchlist",
    "get_config_path",
    "import_watchlist",
    "load_config",
    "save_config",
]
