"""Movie detail modal."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

import httpx
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.css.query import NoMatches
from textual.screen import ModalScreen
from textual.widgets import Static

from movie_browser.action_messages import describe_fetch_failure
from movie_browser.models import Movie, MovieDetails, WatchlistSnapshot
from movie_browser.query import escape_rich_text
from movie_browser.watchlist import NotInWatchlistError, WatchlistStore
from movie_browser.widgets.details import (
    render_membership_line,
    render_movie_details,
    render_movie_header,
)

logger = logging.getLogger(__name__)

DetailsLoader = Callable[[int], Awaitable[MovieDetails]]


class MovieDetailsScreen(ModalScreen[None]):
    """Full details for one movie, with watchlist controls."""

    BINDINGS = [
        Binding("escape", "close", "Close"),
        Binding("a", "toggle_watchlist", "Watchlist +/-"),
        Binding("x", "toggle_watched", "Watched"),
    ]

    CSS = """
    MovieDetailsScreen {
        align: center middle;
    }

    #details-dialog {
        width: 80%;
        height: 85%;
        min-width: 60;
        min-height: 20;
        background: $th-background;
        border: tall $th-accent;
        padding: 0 2;
    }

    #details-header {
        height: auto;
        margin-bottom: 1;
    }

    #details-membership {
        height: auto;
        margin-bottom: 1;
    }

    #details-scroll {
        height: 1fr;
        background: $th-panel;
        padding: 0 1;
    }

    #details-footer {
        height: auto;
        color: $th-muted;
    }
    """

    def __init__(self, movie: Movie, store: WatchlistStore, load_details: DetailsLoader) -> None:
        super().__init__()
        self._movie = movie
        self._store = store
        self._load_details = load_details
        self._details: MovieDetails | None = None
        self._unsubscribe: Callable[[], None] | None = None

    def compose(self) -> ComposeResult:
        with Vertical(id="details-dialog"):
            yield Static(render_movie_header(self._movie), id="details-header")
            yield Static("", id="details-membership")
            with VerticalScroll(id="details-scroll"):
                yield Static("[dim italic]Loading details...[/]", id="details-body")
            yield Static("Close: Esc", id="details-footer")

    def on_mount(self) -> None:
        self._unsubscribe = self._store.subscribe(self._on_store_changed)
        self._on_store_changed(self._store.snapshot())
        self.app._track_task(self._load())  # type: ignore[attr-defined]

    def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def _load(self) -> None:
        try:
            details = await self._load_details(self._movie.id)
        except (httpx.HTTPError, OSError, ValueError) as e:
            logger.warning("Could not load details for movie %d: %s", self._movie.id, e)
            self._set_body(
                "[dim italic]Could not load details.[/]\n"
                f"[dim]Why: {escape_rich_text(describe_fetch_failure(e))}.[/]"
            )
            return
        self._details = details
        self._set_body(render_movie_details(details))

    def _set_body(self, markup: str) -> None:
        try:
            self.query_one("#details-body", Static).update(markup)
        except NoMatches:
            # Screen was dismissed while loading
            pass

    def _on_store_changed(self, snapshot: WatchlistSnapshot) -> None:
        movie_id = self._movie.id
        line = render_membership_line(snapshot.contains(movie_id), movie_id in snapshot.watched)
        try:
            self.query_one("#details-membership", Static).update(line)
        except NoMatches:
            pass

    def _movie_for_watchlist(self) -> Movie:
        if self._details is not None:
            return self._details.to_movie()
        return self._movie

    def action_toggle_watchlist(self) -> None:
        if self._store.is_movie_in_watchlist(self._movie.id):
            self._store.remove_movie(self._movie.id)
        else:
            self._store.add_movie(self._movie_for_watchlist())

    def action_toggle_watched(self) -> None:
        try:
            self._store.toggle_watched(self._movie.id)
        except NotInWatchlistError:
            self.notify(
                "Add the movie to your watchlist before marking it watched.",
                title="Watched",
                severity="warning",
            )

    def action_close(self) -> None:
        self.dismiss(None)


__all__ = ["DetailsLoader", "MovieDetailsScreen"]
