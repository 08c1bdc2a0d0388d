"""Persistent watchlist and watched-flag store.

A single ``WatchlistStore`` instance is the source of truth for watchlist
membership and watched status. It is constructed and loaded at startup,
injected into whatever needs it, and closed at shutdown.

Collections, both persisted as JSON under their own storage key:

    watchlist   full Movie records, insertion ordered
    watched     movie ids, insertion ordered, always a subset of the watchlist

Every mutating call writes each touched key once and notifies every
subscriber once with a fresh ``WatchlistSnapshot``, even when the call
leaves the state as it was (adding a member, unmarking an unwatched id).
N calls produce N writes.

When the stored watchlist is unreadable, the watched ids read next to it
are held back instead of being pruned: they stay on disk with every
watched write and get their flag back when the movie is added again.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from movie_browser.models import (
    WATCHED_STORAGE_KEY,
    WATCHLIST_STORAGE_KEY,
    Movie,
    WatchlistSnapshot,
)
from movie_browser.parsing import movie_to_dict, parse_movie
from movie_browser.storage import KeyValueStorage

logger = logging.getLogger(__name__)

WatchlistListener = Callable[[WatchlistSnapshot], None]


class WatchlistError(Exception):
    """Base class for watchlist contract violations."""


class NotInWatchlistError(WatchlistError):
    """Raised when marking a movie watched that is not in the watchlist."""

    def __init__(self, movie_id: int) -> None:
        super().__init__(f"Movie {movie_id} is not in the watchlist")
        self.movie_id = movie_id


class WatchlistStore:
    """Watchlist membership plus watched flags, written through to storage."""

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage
        self._watchlist: dict[int, Movie] = {}
        self._watched: dict[int, None] = {}  # Ordered set
        # Watched ids whose watchlist entries could not be read
        self._held_watched: dict[int, None] = {}
        self._listeners: list[WatchlistListener] = []
        self._loaded = False
        self.load_errors: list[str] = []
        self.persist_error: str | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self) -> WatchlistSnapshot:
        """Read both collections from storage.

        Each collection is recovered independently: a corrupt watchlist
        entry does not blank the watched set and vice versa.
        """
        self.load_errors = []
        self._held_watched = {}
        self._watchlist = self._load_watchlist()
        watchlist_lost = bool(self.load_errors)
        self._watched = self._load_watched()

        orphans = [movie_id for movie_id in self._watched if movie_id not in self._watchlist]
        if orphans and watchlist_lost:
            # The watchlist is gone, not the flags: keep them for re-added movies.
            logger.warning("Holding %d watched ids whose watchlist was unreadable", len(orphans))
            self.load_errors.append(
                f"{WATCHED_STORAGE_KEY}: kept {len(orphans)} watched ids until their movies "
                "are added again"
            )
            for movie_id in orphans:
                self._held_watched[movie_id] = None
                del self._watched[movie_id]
        elif orphans:
            logger.warning("Dropping %d watched ids missing from the watchlist", len(orphans))
            for movie_id in orphans:
                del self._watched[movie_id]

        self._loaded = True
        logger.debug(
            "Watchlist loaded: %d movies, %d watched",
            len(self._watchlist),
            len(self._watched),
        )
        snapshot = self.snapshot()
        self._notify(snapshot)
        return snapshot

    def close(self) -> None:
        """Drop all subscribers. State and storage are left untouched."""
        self._listeners.clear()

    def _read_json(self, key: str) -> Any | None:
        """Read and decode one storage key; None when absent or unusable."""
        try:
            raw = self._storage.get(key)
        except OSError as e:
            logger.warning("Could not read %r from storage, starting empty: %s", key, e)
            self.load_errors.append(f"{key}: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            self._discard_corrupt(key, f"invalid JSON ({e})")
            return None

    def _discard_corrupt(self, key: str, why: str) -> None:
        logger.warning("Stored %r is corrupt, discarding it: %s", key, why)
        self.load_errors.append(f"{key}: {why}")
        try:
            self._storage.remove(key)
        except OSError as e:
            logger.error("Could not remove corrupt %r from storage: %s", key, e)

    def _load_watchlist(self) -> dict[int, Movie]:
        data = self._read_json(WATCHLIST_STORAGE_KEY)
        if data is None:
            return {}
        if not isinstance(data, list):
            self._discard_corrupt(WATCHLIST_STORAGE_KEY, f"expected a list, got {type(data).__name__}")
            return {}
        result: dict[int, Movie] = {}
        for raw in data:
            movie = parse_movie(raw)
            if movie is None:
                logger.warning("Skipping invalid watchlist entry: %r", raw)
                continue
            if movie.id in result:
                continue
            result[movie.id] = movie
        return result

    def _load_watched(self) -> dict[int, None]:
        data = self._read_json(WATCHED_STORAGE_KEY)
        if data is None:
            return {}
        if not isinstance(data, list):
            self._discard_corrupt(WATCHED_STORAGE_KEY, f"expected a list, got {type(data).__name__}")
            return {}
        result: dict[int, None] = {}
        for raw in data:
            if isinstance(raw, bool) or not isinstance(raw, int):
                logger.warning("Skipping invalid watched id: %r", raw)
                continue
            result[raw] = None
        return result

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def watchlist(self) -> tuple[Movie, ...]:
        return tuple(self._watchlist.values())

    @property
    def watched(self) -> tuple[int, ...]:
        return tuple(self._watched)

    def snapshot(self) -> WatchlistSnapshot:
        return WatchlistSnapshot(watchlist=self.watchlist, watched=self.watched)

    def subscribe(self, listener: WatchlistListener) -> Callable[[], None]:
        """Register listener for state changes. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, snapshot: WatchlistSnapshot) -> None:
        for listener in list(self._listeners):
            listener(snapshot)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _persist(self, key: str, payload: Any) -> str | None:
        """Write one key. Returns an error message on failure, else None."""
        try:
            self._storage.set(key, json.dumps(payload, ensure_ascii=False))
        except OSError as e:
            logger.error("Failed to persist %r: %s", key, e)
            return str(e)
        return None

    def _commit(self, *, watchlist: bool = False, watched: bool = False) -> WatchlistSnapshot:
        errors: list[str] = []
        if watchlist:
            payload = [movie_to_dict(m) for m in self._watchlist.values()]
            error = self._persist(WATCHLIST_STORAGE_KEY, payload)
            if error:
                errors.append(error)
        if watched:
            error = self._persist(
                WATCHED_STORAGE_KEY, list(self._watched) + list(self._held_watched)
            )
            if error:
                errors.append(error)
        # In-memory state stays authoritative; the UI surfaces persist_error.
        self.persist_error = errors[0] if errors else None
        snapshot = self.snapshot()
        self._notify(snapshot)
        return snapshot

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def is_movie_in_watchlist(self, movie_id: int) -> bool:
        return movie_id in self._watchlist

    def is_movie_watched(self, movie_id: int) -> bool:
        return movie_id in self._watched

    def get_movie(self, movie_id: int) -> Movie | None:
        return self._watchlist.get(movie_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_movie(self, movie: Movie) -> WatchlistSnapshot:
        """Add movie to the watchlist, keeping its position when already present.

        A held watched flag for the id (see ``load``) is restored.
        """
        self._watchlist[movie.id] = self._watchlist.get(movie.id, movie)
        if movie.id in self._held_watched:
            del self._held_watched[movie.id]
            self._watched[movie.id] = None
            logger.debug("Added movie %d to watchlist with its held watched flag", movie.id)
            return self._commit(watchlist=True, watched=True)
        logger.debug("Added movie %d to watchlist", movie.id)
        return self._commit(watchlist=True)

    def remove_movie(self, movie_id: int) -> WatchlistSnapshot:
        """Remove movie from the watchlist and clear its watched flag."""
        self._watchlist.pop(movie_id, None)
        self._watched.pop(movie_id, None)
        self._held_watched.pop(movie_id, None)
        logger.debug("Removed movie %d from watchlist", movie_id)
        return self._commit(watchlist=True, watched=True)

    def mark_as_watched(self, movie_id: int) -> WatchlistSnapshot:
        """Flag a watchlist member as watched.

        Raises:
            NotInWatchlistError: If movie_id is not in the watchlist.
        """
        if movie_id not in self._watchlist:
            logger.error("Refusing to mark movie %d watched: not in watchlist", movie_id)
            raise NotInWatchlistError(movie_id)
        self._watched[movie_id] = None
        return self._commit(watched=True)

    def unmark_as_watched(self, movie_id: int) -> WatchlistSnapshot:
        self._watched.pop(movie_id, None)
        return self._commit(watched=True)

    def toggle_watched(self, movie_id: int) -> WatchlistSnapshot:
        """Flip the watched flag of a watchlist member.

        Raises:
            NotInWatchlistError: If the movie is unwatched and not a member.
        """
        if movie_id in self._watched:
            return self.unmark_as_watched(movie_id)
        return self.mark_as_watched(movie_id)

    def clear(self) -> WatchlistSnapshot:
        """Remove everything (used by replace-mode imports)."""
        self._watchlist.clear()
        self._watched.clear()
        self._held_watched.clear()
        return self._commit(watchlist=True, watched=True)


__all__ = [
    "NotInWatchlistError",
    "WatchlistError",
    "WatchlistListener",
    "WatchlistStore",
]
