"""Shared test fixtures for Movie Browser tests."""

from __future__ import annotations

import pytest

from movie_browser.models import Movie, MoviePage
from movie_browser.storage import InMemoryStorage
from movie_browser.themes import DEFAULT_THEME, THEME_COLORS
from movie_browser.watchlist import WatchlistStore
from movie_browser.widgets import listing as _widget_listing

# ── Module-level state isolation ─────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Restore THEME_COLORS and the icon set after each test.

    MovieBrowser.__init__ switches the module-level icon set; without this
    fixture an --ascii test would leak into later rendering tests.
    """
    yield
    THEME_COLORS.clear()
    THEME_COLORS.update(DEFAULT_THEME)
    _widget_listing.set_ascii_icons(False)


# ── Factories ────────────────────────────────────────────────────────────────


@pytest.fixture
def make_movie():
    """Factory fixture for creating Movie instances with sensible defaults."""

    def _make(
        movie_id: int = 1,
        title: str | None = None,
        poster_path: str | None = None,
        release_date: str | None = "2024-01-15",
        vote_average: float = 7.0,
    ) -> Movie:
        return Movie(
            id=movie_id,
            title=title if title is not None else f"Movie {movie_id}",
            poster_path=poster_path,
            release_date=release_date,
            vote_average=vote_average,
        )

    return _make


@pytest.fixture
def make_page(make_movie):
    """Factory fixture for MoviePage. ``ids`` become movies via make_movie."""

    def _make(
        page: int = 1,
        ids: list[int] | tuple[int, ...] = (1, 2, 3),
        total_pages: int = 3,
        movies: list[Movie] | None = None,
    ) -> MoviePage:
        results = tuple(movies) if movies is not None else tuple(make_movie(i) for i in ids)
        return MoviePage(
            page=page,
            results=results,
            total_pages=total_pages,
            total_results=len(results) * max(total_pages, 1),
        )

    return _make


class CountingStorage(InMemoryStorage):
    """InMemoryStorage that records every write and can be made to fail."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__(initial)
        self.writes: list[str] = []
        self.removes: list[str] = []
        self.fail_writes = False

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.writes.append(key)
        super().set(key, value)

    def remove(self, key: str) -> None:
        self.removes.append(key)
        super().remove(key)


@pytest.fixture
def memory_storage() -> CountingStorage:
    return CountingStorage()


@pytest.fixture
def store(memory_storage) -> WatchlistStore:
    """A loaded, empty watchlist store over counting in-memory storage."""
    watchlist_store = WatchlistStore(memory_storage)
    watchlist_store.load()
    return watchlist_store
