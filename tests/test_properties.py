"""Property-based tests using Hypothesis.

Verifies invariants of page merging, the watchlist store, list keys, fuzzy
filtering, and config validation. Each test runs 50 examples in CI, 200 in dev.

Run:
    pytest tests/test_properties.py -v
    pytest tests/test_properties.py -v --hypothesis-seed=0  # reproducible
"""

from __future__ import annotations

import hypothesis.strategies as st
from hypothesis import given, settings

from movie_browser.accumulator import ListAccumulator
from movie_browser.config import _config_to_dict, _dict_to_config
from movie_browser.models import (
    MAX_REQUEST_TIMEOUT_SECONDS,
    MOVIE_CATEGORIES,
    TRENDING_LIST,
    Movie,
    MoviePage,
    UserConfig,
)
from movie_browser.parsing import ListSource, format_list_key, parse_list_key, parse_movie
from movie_browser.query import filter_movies_by_title, truncate_text
from movie_browser.storage import InMemoryStorage
from movie_browser.watchlist import NotInWatchlistError, WatchlistStore

# ── Hypothesis profiles ─────────────────────────────────────────────
settings.register_profile("ci", max_examples=50, deadline=None)
settings.register_profile("dev", max_examples=200, deadline=None)
settings.load_profile("ci")

# ── Custom strategies ────────────────────────────────────────────────

_IDS = st.integers(min_value=1, max_value=40)


@st.composite
def movies(draw: st.DrawFn, movie_id: int | None = None) -> Movie:
    """Generate a Movie with a small id space so duplicates are common."""
    return Movie(
        id=movie_id if movie_id is not None else draw(_IDS),
        title=draw(st.text(max_size=40)),
        poster_path=draw(st.one_of(st.none(), st.just("/p.jpg"))),
        release_date=draw(st.one_of(st.none(), st.just("2001-05-04"))),
        vote_average=draw(st.floats(min_value=0, max_value=10, allow_nan=False)),
    )


@st.composite
def movie_pages(draw: st.DrawFn) -> list[MoviePage]:
    """Generate a sequence of pages 1..n for one list."""
    total = draw(st.integers(min_value=1, max_value=6))
    return [
        MoviePage(
            page=number,
            results=tuple(draw(st.lists(movies(), max_size=8))),
            total_pages=total,
        )
        for number in range(1, total + 1)
    ]


# ── Store operations for sequence tests ──────────────────────────────
_OPERATIONS = st.lists(
    st.tuples(st.sampled_from(["add", "remove", "mark", "unmark", "toggle"]), _IDS),
    max_size=40,
)


def _apply(store: WatchlistStore, op: str, movie_id: int) -> None:
    try:
        if op == "add":
            store.add_movie(Movie(movie_id, f"Movie {movie_id}"))
        elif op == "remove":
            store.remove_movie(movie_id)
        elif op == "mark":
            store.mark_as_watched(movie_id)
        elif op == "unmark":
            store.unmark_as_watched(movie_id)
        else:
            store.toggle_watched(movie_id)
    except NotInWatchlistError:
        assert not store.is_movie_in_watchlist(movie_id)


def _fresh_store() -> WatchlistStore:
    store = WatchlistStore(InMemoryStorage())
    store.load()
    return store


# ============================================================================
# Page merging
# ============================================================================


class TestMergeProperties:
    """Properties of accumulating pages into one list."""

    @given(pages=movie_pages())
    def test_ids_are_unique(self, pages: list[MoviePage]) -> None:
        acc = ListAccumulator(fetch_page=None)  # type: ignore[arg-type]
        for page in pages:
            acc.merge_page(page)
        ids = [m.id for m in acc.items]
        assert len(ids) == len(set(ids))

    @given(pages=movie_pages())
    def test_order_is_first_appearance(self, pages: list[MoviePage]) -> None:
        acc = ListAccumulator(fetch_page=None)  # type: ignore[arg-type]
        for page in pages:
            acc.merge_page(page)
        expected: list[int] = []
        for page in pages:
            for movie in page.results:
                if movie.id not in expected:
                    expected.append(movie.id)
        assert [m.id for m in acc.items] == expected

    @given(pages=movie_pages())
    def test_latest_value_wins(self, pages: list[MoviePage]) -> None:
        acc = ListAccumulator(fetch_page=None)  # type: ignore[arg-type]
        for page in pages:
            acc.merge_page(page)
        latest = {m.id: m for page in pages for m in page.results}
        assert {m.id: m for m in acc.items} == latest

    @given(pages=movie_pages())
    def test_has_more_false_after_last_page(self, pages: list[MoviePage]) -> None:
        acc = ListAccumulator(fetch_page=None)  # type: ignore[arg-type]
        for page in pages:
            acc.merge_page(page)
        assert acc.has_more is False


# ============================================================================
# Watchlist store
# ============================================================================


class TestWatchlistProperties:
    """Invariants of the watchlist store under arbitrary operation sequences."""

    @given(ops=_OPERATIONS)
    def test_watched_is_subset_of_watchlist(self, ops) -> None:
        store = _fresh_store()
        for op, movie_id in ops:
            _apply(store, op, movie_id)
            watchlist_ids = {m.id for m in store.watchlist}
            assert set(store.watched) <= watchlist_ids

    @given(ops=_OPERATIONS)
    def test_reload_matches_memory(self, ops) -> None:
        storage = InMemoryStorage()
        store = WatchlistStore(storage)
        store.load()
        for op, movie_id in ops:
            _apply(store, op, movie_id)

        reloaded = WatchlistStore(storage)
        assert reloaded.load() == store.snapshot()
        assert reloaded.load_errors == []

    @given(movie=movies())
    def test_toggle_twice_is_identity(self, movie: Movie) -> None:
        store = _fresh_store()
        store.add_movie(movie)
        before = store.snapshot()
        store.toggle_watched(movie.id)
        store.toggle_watched(movie.id)
        assert store.snapshot() == before

    @given(movie=movies())
    def test_add_is_idempotent(self, movie: Movie) -> None:
        store = _fresh_store()
        first = store.add_movie(movie)
        assert store.add_movie(movie) == first


# ============================================================================
# Parsing and list keys
# ============================================================================


class TestListKeyProperties:
    @given(query=st.text(min_size=1, max_size=50))
    def test_search_key_round_trip(self, query: str) -> None:
        source = ListSource("search", query)
        assert parse_list_key(format_list_key(source)) == source

    @given(genre_id=st.integers(min_value=0, max_value=10**6))
    def test_genre_key_round_trip(self, genre_id: int) -> None:
        key = format_list_key(ListSource("genre", str(genre_id)))
        assert parse_list_key(key) == ListSource("genre", str(genre_id))

    @given(key=st.sampled_from([TRENDING_LIST, *MOVIE_CATEGORIES]))
    def test_fixed_keys_round_trip(self, key: str) -> None:
        assert format_list_key(parse_list_key(key)) == key


class TestParseMovieProperties:
    @given(data=st.dictionaries(st.text(max_size=15), st.none() | st.integers() | st.text()))
    def test_never_crashes(self, data: dict) -> None:
        movie = parse_movie(data)
        assert movie is None or isinstance(movie.id, int)


# ============================================================================
# Query helpers
# ============================================================================


class TestFilterProperties:
    @given(items=st.lists(movies(), max_size=20), query=st.text(max_size=20))
    def test_result_is_subset(self, items: list[Movie], query: str) -> None:
        result = filter_movies_by_title(query, items)
        assert all(movie in items for movie in result)
        assert len(result) <= len(items)

    @given(items=st.lists(movies(), max_size=20))
    def test_blank_query_keeps_order(self, items: list[Movie]) -> None:
        assert filter_movies_by_title("   ", items) == items


class TestTruncateProperties:
    @given(text=st.text(max_size=200), max_len=st.integers(min_value=1, max_value=100))
    def test_bounded_length(self, text: str, max_len: int) -> None:
        result = truncate_text(text, max_len)
        assert len(result) <= max_len + 3


# ============================================================================
# Config
# ============================================================================


class TestConfigProperties:
    @given(
        timeout=st.integers(min_value=1, max_value=MAX_REQUEST_TIMEOUT_SECONDS),
        default_list=st.sampled_from([TRENDING_LIST, *MOVIE_CATEGORIES, "genre:28"]),
        ascii_icons=st.booleans(),
    )
    def test_round_trip(self, timeout: int, default_list: str, ascii_icons: bool) -> None:
        config = UserConfig(
            request_timeout_seconds=timeout,
            default_list=default_list,
            ascii_icons=ascii_icons,
        )
        assert _dict_to_config(_config_to_dict(config)) == config

    @given(
        data=st.dictionaries(
            st.sampled_from(
                ["api_base_url", "request_timeout_seconds", "default_list", "ascii_icons"]
            ),
            st.none() | st.booleans() | st.integers() | st.text(max_size=30),
        )
    )
    def test_arbitrary_values_produce_valid_config(self, data: dict) -> None:
        config = _dict_to_config(data)
        assert 1 <= config.request_timeout_seconds <= MAX_REQUEST_TIMEOUT_SECONDS
        assert config.api_base_url.startswith(("http://", "https://"))
        parse_list_key(config.default_list)
        assert isinstance(config.ascii_icons, bool)
