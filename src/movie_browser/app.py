"""Textual application: browse movie lists and manage the watchlist."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import httpx
from textual import on
from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.widgets import Footer, Header, Input, Label, OptionList
from textual.widgets.option_list import Option

from movie_browser.accumulator import ListAccumulator, PageFetchError
from movie_browser.action_messages import (
    build_actionable_error,
    build_actionable_warning,
    build_page_load_error,
    describe_fetch_failure,
)
from movie_browser.config import save_config
from movie_browser.models import (
    AccumulatorState,
    Genre,
    Movie,
    MovieDetails,
    MoviePage,
    UserConfig,
    WatchlistSnapshot,
)
from movie_browser.modals import GenrePickerScreen, MovieDetailsScreen, WatchlistScreen
from movie_browser.parsing import ListSource, describe_list_key, format_list_key, parse_list_key
from movie_browser.query import truncate_text
from movie_browser.services.interfaces import AppServices, build_default_app_services
from movie_browser.themes import THEME_COLORS, THEME_NAME, build_textual_theme
from movie_browser.ui_constants import APP_BINDINGS, APP_CSS, NEAR_END_THRESHOLD
from movie_browser.watchlist import NotInWatchlistError, WatchlistStore
from movie_browser.widgets import listing as _widget_listing
from movie_browser.widgets.listing import (
    render_empty_list,
    render_list_status,
    render_movie_option,
)

logger = logging.getLogger(__name__)


class MovieBrowser(App):
    """A TUI application to browse movies and keep a watchlist."""

    TITLE = "Movie Browser"

    CSS = APP_CSS

    BINDINGS = APP_BINDINGS

    def __init__(
        self,
        store: WatchlistStore,
        config: UserConfig | None = None,
        initial_list: str | None = None,
        ascii_icons: bool = False,
        services: AppServices | None = None,
        api_base_url: str | None = None,
    ) -> None:
        super().__init__()
        # Register the theme so $th-* CSS variables resolve before compose()
        self.register_theme(build_textual_theme(THEME_NAME, THEME_COLORS))
        try:
            self.theme = THEME_NAME
        except Exception as e:
            logger.debug("Skipping theme activation in current context: %s", e, exc_info=True)

        self._config = config or UserConfig()
        # A one-off backend URL (--api-url) that is never written back to config
        self._api_base_url = api_base_url or self._config.api_base_url
        self._store = store
        self._services: AppServices = services or build_default_app_services()
        self._initial_list = initial_list or self._config.default_list
        _widget_listing.set_ascii_icons(ascii_icons or self._config.ascii_icons)

        self._accumulator = ListAccumulator(self._fetch_list_page)
        self._rendered_ids: list[int] = []
        self._genres: list[Genre] | None = None
        self._genre_names: dict[int, str] = {}
        self._unsubscribers: list[Callable[[], None]] = []

        # Shared HTTP client, created on mount
        self._http_client: httpx.AsyncClient | None = None

        # Background task tracking (prevent GC of fire-and-forget tasks)
        self._background_tasks: set[asyncio.Task[None]] = set()

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="list-pane"):
            yield Label("", id="list-header")
            with Vertical(id="search-container"):
                yield Input(
                    placeholder=" Search movies (Enter to search, Esc to cancel)",
                    id="search-input",
                )
            yield OptionList(id="movie-list")
            yield Label("", id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Create the shared client, surface startup warnings, and load the first list."""
        self._http_client = httpx.AsyncClient()

        if self._config.config_defaulted:
            self.notify(
                "Config file was corrupt and has been backed up. Using defaults.",
                severity="warning",
                timeout=8,
            )
        if self._store.load_errors:
            self.notify(
                build_actionable_warning(
                    "Some saved watchlist data was unreadable",
                    why="; ".join(self._store.load_errors),
                    next_step="re-add any missing movies with a",
                ),
                severity="warning",
                timeout=10,
            )

        self._unsubscribers.append(self._accumulator.subscribe(self._on_list_changed))
        self._unsubscribers.append(self._store.subscribe(self._on_watchlist_changed))

        self._switch_list(self._initial_list)
        logger.debug("App mounted: list=%r, api=%s", self._initial_list, self._api_base_url)

        try:
            self._get_movie_list_widget().focus()
        except NoMatches:
            pass

    async def on_unmount(self) -> None:
        """Unsubscribe, cancel background work, and close the shared client."""
        unsubscribers = self._unsubscribers
        self._unsubscribers = []
        for unsubscribe in unsubscribers:
            unsubscribe()

        # Cancel tracked background tasks to avoid leaks during teardown.
        pending = [task for task in self._background_tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            _, still_pending = await asyncio.wait(pending, timeout=0.5)
            for task in still_pending:
                logger.debug("Background task did not cancel before shutdown: %r", task)
        self._background_tasks.clear()

        client = self._http_client
        self._http_client = None
        if client is not None:
            try:
                await client.aclose()
            except Exception as e:
                logger.debug(
                    "Failed to close shared HTTP client during shutdown: %s", e, exc_info=True
                )

    # ------------------------------------------------------------------
    # Background tasks
    # ------------------------------------------------------------------

    def _track_task(self, coro: Any) -> asyncio.Task[None]:
        """Create an asyncio task and track it to prevent garbage collection."""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(self._on_task_done)
        return task

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        """Log unhandled exceptions from background tasks."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in background task: %s", exc, exc_info=exc)

    # ------------------------------------------------------------------
    # Backend access
    # ------------------------------------------------------------------

    async def _fetch_list_page(self, key: str, page: int) -> MoviePage:
        return await self._services.movie_api.fetch_list_page(
            client=self._http_client,
            base_url=self._api_base_url,
            key=key,
            page=page,
            timeout_seconds=self._config.request_timeout_seconds,
        )

    async def _fetch_movie_details(self, movie_id: int) -> MovieDetails:
        return await self._services.movie_api.fetch_movie_details(
            client=self._http_client,
            base_url=self._api_base_url,
            movie_id=movie_id,
            timeout_seconds=self._config.request_timeout_seconds,
        )

    async def _load_more(self, *, near_end: bool = False) -> None:
        """Request the next page and surface failures as a notification."""
        try:
            if near_end:
                await self._accumulator.signal_near_end()
            else:
                await self._accumulator.request_next_page()
        except PageFetchError as e:
            self.notify(build_page_load_error(e), title="Movies", severity="warning", timeout=8)

    def _switch_list(self, key: str) -> None:
        """Reset the accumulator to key and fetch its first page."""
        try:
            parse_list_key(key)
        except ValueError as e:
            logger.warning("Ignoring unknown list %r: %s", key, e)
            self.notify(f"Unknown list: {key}", severity="warning")
            return
        self._accumulator.reset(key)
        self._track_task(self._load_more())

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _get_movie_list_widget(self) -> OptionList:
        return self.query_one("#movie-list", OptionList)

    def _render_option(self, movie: Movie, snapshot: WatchlistSnapshot | None = None) -> str:
        if snapshot is None:
            return render_movie_option(
                movie,
                in_watchlist=self._store.is_movie_in_watchlist(movie.id),
                watched=self._store.is_movie_watched(movie.id),
            )
        return render_movie_option(
            movie,
            in_watchlist=snapshot.contains(movie.id),
            watched=movie.id in snapshot.watched,
        )

    def _on_list_changed(self, state: AccumulatorState) -> None:
        try:
            self._render_list(state)
        except NoMatches:
            # DOM not ready yet or already torn down
            return

    def _render_list(self, state: AccumulatorState) -> None:
        """Sync the OptionList with state.

        Pages only ever append, so the common case adds the new tail and
        keeps the scroll position. A reset rebuilds the list.
        """
        option_list = self._get_movie_list_widget()
        new_ids = [movie.id for movie in state.items]
        old_ids = self._rendered_ids

        if old_ids and new_ids[: len(old_ids)] == old_ids:
            for index, movie in enumerate(state.items[: len(old_ids)]):
                option_list.replace_option_prompt_at_index(index, self._render_option(movie))
            tail = state.items[len(old_ids) :]
            if tail:
                option_list.add_options(
                    [Option(self._render_option(m), id=str(m.id)) for m in tail]
                )
        else:
            option_list.clear_options()
            if state.items:
                option_list.add_options(
                    [Option(self._render_option(m), id=str(m.id)) for m in state.items]
                )
                option_list.highlighted = 0
            else:
                option_list.add_option(
                    Option(render_empty_list(state.is_loading, state.last_error), disabled=True)
                )
        self._rendered_ids = new_ids

        title = describe_list_key(state.key, self._genre_names) if state.key else ""
        self.query_one("#list-header", Label).update(f" {title}")
        self.sub_title = title
        self.query_one("#status-bar", Label).update(
            render_list_status(
                len(state.items),
                is_loading=state.is_loading,
                has_more=state.has_more,
                last_error=state.last_error,
            )
        )

        # A merged page may add no new rows, so the highlight never moves.
        # Re-check the cursor so loading continues while it stays near the end.
        if (
            not state.is_loading
            and state.has_more
            and state.last_error is None
            and self._is_near_end(option_list.highlighted)
        ):
            self._track_task(self._load_more(near_end=True))

    def _is_near_end(self, index: int | None) -> bool:
        count = len(self._accumulator.items)
        return bool(count) and index is not None and index >= count - NEAR_END_THRESHOLD

    def _on_watchlist_changed(self, snapshot: WatchlistSnapshot) -> None:
        if self._store.persist_error:
            self.notify(
                build_actionable_error(
                    "save the watchlist",
                    why=self._store.persist_error,
                    next_step="check disk space and permissions; changes last until you quit",
                ),
                severity="error",
                timeout=8,
            )
        try:
            option_list = self._get_movie_list_widget()
        except NoMatches:
            return
        for index, movie in enumerate(self._accumulator.items[: len(self._rendered_ids)]):
            option_list.replace_option_prompt_at_index(index, self._render_option(movie, snapshot))

    def _highlighted_movie(self) -> Movie | None:
        idx = self._get_movie_list_widget().highlighted
        items = self._accumulator.items
        if idx is None or not 0 <= idx < len(items):
            return None
        return items[idx]

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    @on(OptionList.OptionHighlighted, "#movie-list")
    def _on_movie_highlighted(self, event: OptionList.OptionHighlighted) -> None:
        if self._is_near_end(event.option_index):
            self._track_task(self._load_more(near_end=True))

    @on(OptionList.OptionSelected, "#movie-list")
    def _on_movie_selected(self, event: OptionList.OptionSelected) -> None:
        items = self._accumulator.items
        if 0 <= event.option_index < len(items):
            self._open_details(items[event.option_index])

    @on(Input.Submitted, "#search-input")
    def _on_search_submitted(self, event: Input.Submitted) -> None:
        query = event.value.strip()
        if not query:
            self.notify("Type a title to search for.", title="Search", severity="warning")
            return
        self._hide_search()
        self._switch_list(format_list_key(ListSource("search", query)))

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def action_show_list(self, key: str) -> None:
        """Switch to a built-in list (trending or a category)."""
        self._switch_list(key)

    def action_toggle_search(self) -> None:
        container = self.query_one("#search-container")
        container.add_class("visible")
        self.query_one("#search-input", Input).focus()

    def _hide_search(self) -> None:
        self.query_one("#search-container").remove_class("visible")
        self._get_movie_list_widget().focus()

    def action_cancel_search(self) -> None:
        self._hide_search()

    def action_cursor_down(self) -> None:
        self._get_movie_list_widget().action_cursor_down()

    def action_cursor_up(self) -> None:
        self._get_movie_list_widget().action_cursor_up()

    def action_retry(self) -> None:
        state = self._accumulator.snapshot()
        if state.is_loading:
            return
        if state.last_error is None and not state.has_more:
            self.notify("Nothing to retry.", title="Movies")
            return
        self._track_task(self._load_more())

    def action_toggle_watchlist(self) -> None:
        movie = self._highlighted_movie()
        if movie is None:
            return
        title = truncate_text(movie.title, 50)
        if self._store.is_movie_in_watchlist(movie.id):
            self._store.remove_movie(movie.id)
            self.notify(f"Removed {title} from your watchlist", title="Watchlist")
        else:
            self._store.add_movie(movie)
            self.notify(f"Added {title} to your watchlist", title="Watchlist")

    def action_toggle_watched(self) -> None:
        movie = self._highlighted_movie()
        if movie is None:
            return
        try:
            self._store.toggle_watched(movie.id)
        except NotInWatchlistError:
            self.notify(
                build_actionable_warning(
                    f"{movie.title} is not in your watchlist",
                    next_step="press a to add it, then x to mark it watched",
                ),
                title="Watched",
                severity="warning",
            )

    def action_show_watchlist(self) -> None:
        self.push_screen(WatchlistScreen(self._store), self._on_watchlist_dismissed)

    def _on_watchlist_dismissed(self, movie_id: int | None) -> None:
        if movie_id is None:
            return
        movie = self._store.get_movie(movie_id)
        if movie is not None:
            self._open_details(movie)

    def _open_details(self, movie: Movie) -> None:
        self.push_screen(MovieDetailsScreen(movie, self._store, self._fetch_movie_details))

    def action_pick_genre(self) -> None:
        self._track_task(self._open_genre_picker())

    async def _open_genre_picker(self) -> None:
        if self._genres is None:
            try:
                genres = await self._services.movie_api.fetch_genres(
                    client=self._http_client,
                    base_url=self._api_base_url,
                    timeout_seconds=self._config.request_timeout_seconds,
                )
            except (httpx.HTTPError, OSError, ValueError) as e:
                logger.warning("Could not load genres: %s", e)
                self.notify(
                    build_actionable_error(
                        "load genres",
                        why=describe_fetch_failure(e),
                        next_step="press g to try again",
                    ),
                    severity="warning",
                )
                return
            if not genres:
                self.notify("The movie backend returned no genres.", severity="warning")
                return
            self._genres = genres
            self._genre_names = {g.id: g.name for g in genres}

        current: int | None = None
        key = self._accumulator.key
        if key is not None:
            source = parse_list_key(key)
            if source.kind == "genre":
                current = int(source.value)
        self.push_screen(GenrePickerScreen(self._genres, current), self._on_genre_picked)

    def _on_genre_picked(self, genre: Genre | None) -> None:
        if genre is None:
            return
        self._switch_list(format_list_key(ListSource("genre", str(genre.id))))

    def _save_config_or_warn(self, context: str) -> bool:
        """Save config and notify the user on failure.

        Returns True on success, False on failure.
        """
        if not save_config(self._config):
            self.notify(f"Failed to save {context}.", severity="warning")
            return False
        return True

    def action_set_default_list(self) -> None:
        """Remember the current list as the startup list."""
        key = self._accumulator.key
        if key is None:
            return
        self._config.default_list = key
        if self._save_config_or_warn("startup list"):
            self.notify(f"Startup list set to {describe_list_key(key, self._genre_names)}")


__all__ = ["MovieBrowser"]
