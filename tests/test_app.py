"""End-to-end app workflows using Textual run_test() + pilot."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock, patch

import httpx
import pytest
from textual.widgets import OptionList

from movie_browser.app import MovieBrowser
from movie_browser.models import (
    DEFAULT_API_BASE_URL,
    Genre,
    Movie,
    MovieDetails,
    MoviePage,
    UserConfig,
)
from movie_browser.modals import GenrePickerScreen, MovieDetailsScreen, WatchlistScreen
from movie_browser.services.interfaces import AppServices
from movie_browser.storage import InMemoryStorage
from movie_browser.watchlist import WatchlistStore


class FakeMovieApi:
    """In-process stand-in for the backend, keyed by list key."""

    def __init__(
        self,
        pages: dict[str, list[MoviePage]] | None = None,
        genres: list[Genre] | None = None,
    ) -> None:
        self.pages = pages or {}
        self.genres = genres or []
        self.calls: list[tuple[str, int]] = []
        self.failures: dict[tuple[str, int], int] = {}

    async def fetch_list_page(self, *, client, base_url, key, page, timeout_seconds):
        self.calls.append((key, page))
        if self.failures.get((key, page), 0) > 0:
            self.failures[(key, page)] -= 1
            raise httpx.ConnectError("backend down")
        pages = self.pages.get(key, [])
        if page <= len(pages):
            return pages[page - 1]
        return MoviePage(page=page, results=(), total_pages=len(pages))

    async def fetch_genres(self, *, client, base_url, timeout_seconds):
        return list(self.genres)

    async def fetch_movie_details(self, *, client, base_url, movie_id, timeout_seconds):
        return MovieDetails(id=movie_id, title=f"Movie {movie_id}", overview="Details here.")


def _movies(*ids: int) -> tuple[Movie, ...]:
    return tuple(Movie(i, f"Movie {i}", None, "2020-02-02", 6.5) for i in ids)


def _single_page(*ids: int) -> list[MoviePage]:
    return [MoviePage(page=1, results=_movies(*ids), total_pages=1)]


async def _wait_for(pilot, predicate, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    end = loop.time() + timeout
    while not predicate() and loop.time() < end:
        await pilot.pause(0.05)
    assert predicate()


def _make_app(api: FakeMovieApi, store: WatchlistStore | None = None, **kwargs) -> MovieBrowser:
    if store is None:
        store = WatchlistStore(InMemoryStorage())
        store.load()
    return MovieBrowser(store, services=AppServices(movie_api=api), **kwargs)


@pytest.fixture
def api() -> FakeMovieApi:
    return FakeMovieApi(
        pages={
            "trending": _single_page(1, 2, 3),
            "popular": _single_page(10, 11),
            "search:heat": _single_page(42),
            "genre:35": _single_page(7, 8),
        },
        genres=[Genre(28, "Action"), Genre(35, "Comedy")],
    )


@pytest.mark.integration()
class TestListBrowsing:
    async def test_first_page_rendered(self, api):
        app = _make_app(api)
        async with app.run_test() as pilot:
            option_list = app.query_one("#movie-list", OptionList)
            await _wait_for(pilot, lambda: option_list.option_count == 3)
            assert api.calls[0] == ("trending", 1)
            assert app.sub_title == "Trending"
            assert option_list.highlighted == 0

    async def test_initial_list_argument(self, api):
        app = _make_app(api, initial_list="popular")
        async with app.run_test() as pilot:
            await _wait_for(pilot, lambda: app._accumulator.items == _movies(10, 11))
            assert app.sub_title == "Popular"

    async def test_number_key_switches_list(self, api):
        app = _make_app(api)
        async with app.run_test() as pilot:
            option_list = app.query_one("#movie-list", OptionList)
            await _wait_for(pilot, lambda: option_list.option_count == 3)

            await pilot.press("3")
            await _wait_for(pilot, lambda: app._accumulator.key == "popular")
            await _wait_for(pilot, lambda: option_list.option_count == 2)
            assert ("popular", 1) in api.calls
            assert app.sub_title == "Popular"

    async def test_near_end_loads_next_page_once(self):
        api = FakeMovieApi(
            pages={
                "trending": [
                    MoviePage(page=1, results=_movies(1, 2, 3), total_pages=2),
                    MoviePage(page=2, results=_movies(3, 4, 5), total_pages=2),
                ]
            }
        )
        app = _make_app(api)
        async with app.run_test() as pilot:
            option_list = app.query_one("#movie-list", OptionList)
            await _wait_for(pilot, lambda: len(app._accumulator.items) >= 3)
            await pilot.press("j")
            await pilot.press("j")
            await _wait_for(pilot, lambda: option_list.option_count == 5)
            await pilot.pause(0.1)

            assert [page for key, page in api.calls] == [1, 2]
            assert [m.id for m in app._accumulator.items] == [1, 2, 3, 4, 5]
            assert app._accumulator.has_more is False

    async def test_page_without_new_rows_keeps_loading(self):
        api = FakeMovieApi(
            pages={
                "trending": [
                    MoviePage(page=1, results=_movies(1, 2, 3), total_pages=3),
                    MoviePage(page=2, results=_movies(1, 2, 3), total_pages=3),
                    MoviePage(page=3, results=_movies(4), total_pages=3),
                ]
            }
        )
        app = _make_app(api)
        async with app.run_test() as pilot:
            option_list = app.query_one("#movie-list", OptionList)
            await _wait_for(pilot, lambda: ("trending", 3) in api.calls)
            await _wait_for(pilot, lambda: option_list.option_count == 4)

            assert [m.id for m in app._accumulator.items] == [1, 2, 3, 4]
            assert app._accumulator.has_more is False
            assert option_list.highlighted == 0

    async def test_retry_loads_next_page_when_more_remain(self):
        first = MoviePage(page=1, results=_movies(*range(1, 21)), total_pages=2)
        api = FakeMovieApi(
            pages={"trending": [first, MoviePage(page=2, results=_movies(21), total_pages=2)]}
        )
        app = _make_app(api)
        app.notify = MagicMock()
        async with app.run_test() as pilot:
            await _wait_for(pilot, lambda: len(app._accumulator.items) == 20)
            await pilot.pause(0.1)
            assert api.calls == [("trending", 1)]
            assert app._accumulator.has_more is True

            await pilot.press("r")
            await _wait_for(pilot, lambda: len(app._accumulator.items) == 21)
            assert api.calls == [("trending", 1), ("trending", 2)]
            messages = [call.args[0] for call in app.notify.call_args_list]
            assert "Nothing to retry." not in messages

    async def test_retry_with_nothing_left(self, api):
        app = _make_app(api)
        app.notify = MagicMock()
        async with app.run_test() as pilot:
            await _wait_for(pilot, lambda: len(app._accumulator.items) == 3)
            await pilot.press("r")
            assert app.notify.call_args[0][0] == "Nothing to retry."
            assert api.calls == [("trending", 1)]

    async def test_failed_first_page_then_retry(self, api):
        api.failures[("trending", 1)] = 1
        app = _make_app(api)
        app.notify = MagicMock()
        async with app.run_test() as pilot:
            await _wait_for(pilot, lambda: app._accumulator.last_error is not None)
            assert app._accumulator.items == ()
            assert "Could not load page 1." in app.notify.call_args[0][0]

            await pilot.press("r")
            await _wait_for(pilot, lambda: len(app._accumulator.items) == 3)
            assert app._accumulator.last_error is None

    async def test_search_submission(self, api):
        app = _make_app(api)
        async with app.run_test() as pilot:
            await _wait_for(pilot, lambda: len(app._accumulator.items) == 3)
            await pilot.press("slash")
            for ch in "heat":
                await pilot.press(ch)
            await pilot.press("enter")

            await _wait_for(pilot, lambda: app._accumulator.items == _movies(42))
            assert app._accumulator.key == "search:heat"
            assert app.sub_title == 'Results for "heat"'

    async def test_genre_picker_switches_list(self, api):
        app = _make_app(api)
        async with app.run_test() as pilot:
            await _wait_for(pilot, lambda: len(app._accumulator.items) == 3)
            await pilot.press("g")
            await _wait_for(pilot, lambda: isinstance(app.screen, GenrePickerScreen))
            await pilot.press("j")
            await pilot.press("enter")

            await _wait_for(pilot, lambda: app._accumulator.key == "genre:35")
            await _wait_for(pilot, lambda: len(app._accumulator.items) == 2)
            assert app.sub_title == "Comedy Movies"

    async def test_set_default_list_saves_config(self, api):
        config = UserConfig()
        app = _make_app(api, config=config)
        with patch("movie_browser.app.save_config", return_value=True) as save_mock:
            async with app.run_test() as pilot:
                await pilot.press("4")
                await _wait_for(pilot, lambda: app._accumulator.key == "top_rated")
                app.action_set_default_list()
                assert config.default_list == "top_rated"
                save_mock.assert_called_once_with(config)

    async def test_api_url_override_is_not_saved(self, api):
        config = UserConfig()
        recorded: list[str] = []

        async def fetch_list_page(*, client, base_url, key, page, timeout_seconds):
            recorded.append(base_url)
            return _single_page(1)[0]

        api.fetch_list_page = fetch_list_page
        app = _make_app(api, config=config, api_base_url="https://movies.example/api")
        with patch("movie_browser.app.save_config", return_value=True) as save_mock:
            async with app.run_test() as pilot:
                await _wait_for(pilot, lambda: len(app._accumulator.items) == 1)
                app.action_set_default_list()
                save_mock.assert_called_once()

        assert recorded == ["https://movies.example/api"]
        saved = save_mock.call_args.args[0]
        assert saved.api_base_url == DEFAULT_API_BASE_URL
        assert saved.default_list == "trending"


@pytest.mark.integration()
class TestWatchlistActions:
    async def test_a_adds_and_removes(self, api):
        app = _make_app(api)
        async with app.run_test() as pilot:
            await _wait_for(pilot, lambda: len(app._accumulator.items) == 3)
            await pilot.press("a")
            assert app._store.is_movie_in_watchlist(1)
            await pilot.press("a")
            assert not app._store.is_movie_in_watchlist(1)

    async def test_x_requires_membership(self, api):
        app = _make_app(api)
        app.notify = MagicMock()
        async with app.run_test() as pilot:
            await _wait_for(pilot, lambda: len(app._accumulator.items) == 3)
            await pilot.press("x")
            assert app._store.watched == ()
            assert "not in your watchlist" in app.notify.call_args[0][0]

            await pilot.press("a")
            await pilot.press("x")
            assert app._store.watched == (1,)

    async def test_persist_failure_is_reported(self, api, memory_storage):
        store = WatchlistStore(memory_storage)
        store.load()
        memory_storage.fail_writes = True
        app = _make_app(api, store=store)
        app.notify = MagicMock()
        async with app.run_test() as pilot:
            await _wait_for(pilot, lambda: len(app._accumulator.items) == 3)
            await pilot.press("a")
            assert store.is_movie_in_watchlist(1)
            errors = [
                call.args[0]
                for call in app.notify.call_args_list
                if call.kwargs.get("severity") == "error"
            ]
            assert len(errors) == 1
            assert "disk full" in errors[0]

    async def test_load_errors_shown_on_mount(self, api):
        store = WatchlistStore(InMemoryStorage({"watchlist": "{bad"}))
        store.load()
        app = _make_app(api, store=store)
        app.notify = MagicMock()
        async with app.run_test():
            messages = [call.args[0] for call in app.notify.call_args_list]
            assert any("unreadable" in message for message in messages)

    async def test_watchlist_modal_opens_details(self, api):
        store = WatchlistStore(InMemoryStorage())
        store.load()
        store.add_movie(Movie(99, "Saved Movie"))
        app = _make_app(api, store=store)
        async with app.run_test() as pilot:
            await pilot.press("l")
            await _wait_for(pilot, lambda: isinstance(app.screen, WatchlistScreen))
            await pilot.press("enter")
            await _wait_for(pilot, lambda: isinstance(app.screen, MovieDetailsScreen))

            details_screen = app.screen
            await _wait_for(pilot, lambda: details_screen._details is not None)
            await pilot.press("x")
            assert store.watched == (99,)

            await pilot.press("escape")
            await _wait_for(pilot, lambda: not isinstance(app.screen, MovieDetailsScreen))

    async def test_watchlist_modal_remove(self, api):
        store = WatchlistStore(InMemoryStorage())
        store.load()
        store.add_movie(Movie(1, "First"))
        store.add_movie(Movie(2, "Second"))
        store.mark_as_watched(1)
        app = _make_app(api, store=store)
        async with app.run_test() as pilot:
            await pilot.press("l")
            await _wait_for(pilot, lambda: isinstance(app.screen, WatchlistScreen))
            await pilot.press("d")
            assert [m.id for m in store.watchlist] == [2]
            assert store.watched == ()

    async def test_details_add_from_list(self, api):
        app = _make_app(api)
        async with app.run_test() as pilot:
            await _wait_for(pilot, lambda: len(app._accumulator.items) == 3)
            await pilot.press("enter")
            await _wait_for(pilot, lambda: isinstance(app.screen, MovieDetailsScreen))
            await pilot.press("a")
            assert app._store.is_movie_in_watchlist(1)
