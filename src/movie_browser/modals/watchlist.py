"""Watchlist management modal."""

from __future__ import annotations

from collections.abc import Callable

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.screen import ModalScreen
from textual.widgets import Input, Label, OptionList, Static
from textual.widgets.option_list import Option

from movie_browser.models import Movie, WatchlistSnapshot
from movie_browser.query import escape_rich_text, filter_movies_by_title
from movie_browser.themes import THEME_COLORS
from movie_browser.watchlist import WatchlistStore
from movie_browser.widgets.listing import render_movie_option


class WatchlistScreen(ModalScreen[int | None]):
    """Browse, filter and edit the watchlist.

    Dismisses with the id of the movie chosen with Enter, or None.
    """

    BINDINGS = [
        Binding("escape", "close", "Close"),
        Binding("d", "remove", "Remove"),
        Binding("delete", "remove", "Remove", show=False),
        Binding("x", "toggle_watched", "Watched"),
        Binding("slash", "focus_filter", "Filter", show=False),
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
    ]

    CSS = """
    WatchlistScreen {
        align: center middle;
    }

    #watchlist-dialog {
        width: 80%;
        height: 80%;
        min-width: 60;
        min-height: 20;
        background: $th-background;
        border: tall $th-orange;
        padding: 0 2;
    }

    #watchlist-title {
        text-style: bold;
        color: $th-orange;
        margin-bottom: 1;
    }

    #watchlist-filter {
        width: 100%;
        background: $th-panel;
        border: none;
        margin-bottom: 1;
    }

    #watchlist-filter:focus {
        border-left: tall $th-accent;
    }

    #watchlist-list {
        height: 1fr;
        background: $th-panel;
        border: none;
    }

    #watchlist-footer {
        height: auto;
        color: $th-muted;
        margin-top: 1;
    }
    """

    def __init__(self, store: WatchlistStore) -> None:
        super().__init__()
        self._store = store
        self._visible: list[Movie] = []
        self._unsubscribe: Callable[[], None] | None = None

    def compose(self) -> ComposeResult:
        with Vertical(id="watchlist-dialog"):
            yield Label("My Watchlist", id="watchlist-title")
            yield Input(placeholder="Filter by title...", id="watchlist-filter")
            yield OptionList(id="watchlist-list")
            yield Static(
                "Enter: details · d: remove · x: watched · /: filter · Esc: close",
                id="watchlist-footer",
            )

    def on_mount(self) -> None:
        self._unsubscribe = self._store.subscribe(self._on_store_changed)
        self._populate(self._store.snapshot())
        self.query_one("#watchlist-list", OptionList).focus()

    def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _filter_text(self) -> str:
        try:
            return self.query_one("#watchlist-filter", Input).value
        except NoMatches:
            return ""

    def _on_store_changed(self, snapshot: WatchlistSnapshot) -> None:
        self._populate(snapshot)

    def _populate(self, snapshot: WatchlistSnapshot) -> None:
        """Rebuild the list from snapshot, keeping the highlight position."""
        try:
            option_list = self.query_one("#watchlist-list", OptionList)
        except NoMatches:
            return
        previous = option_list.highlighted
        query = self._filter_text()
        self._visible = filter_movies_by_title(query, snapshot.watchlist)
        watched = set(snapshot.watched)

        title = self.query_one("#watchlist-title", Label)
        watched_count = sum(1 for m in snapshot.watchlist if m.id in watched)
        title.update(
            f"My Watchlist [{THEME_COLORS['muted']}]"
            f"({len(snapshot.watchlist)} movies, {watched_count} watched)[/]"
        )

        option_list.clear_options()
        if not self._visible:
            if query.strip():
                option_list.add_option(
                    Option(
                        f'[dim]No watchlist titles match [bold]"{escape_rich_text(query)}"[/bold].[/]',
                        disabled=True,
                    )
                )
            else:
                option_list.add_option(
                    Option(
                        "[dim]Your watchlist is empty.[/]\n"
                        "[dim]Try: press [bold]a[/bold] on a movie to add it.[/]",
                        disabled=True,
                    )
                )
            return

        for movie in self._visible:
            option_list.add_option(
                Option(render_movie_option(movie, True, movie.id in watched), id=str(movie.id))
            )
        if previous is None:
            option_list.highlighted = 0
        else:
            option_list.highlighted = min(previous, len(self._visible) - 1)

    def _highlighted_movie(self) -> Movie | None:
        option_list = self.query_one("#watchlist-list", OptionList)
        idx = option_list.highlighted
        if idx is None or not 0 <= idx < len(self._visible):
            return None
        return self._visible[idx]

    @on(Input.Changed, "#watchlist-filter")
    def _on_filter_changed(self, event: Input.Changed) -> None:
        self._populate(self._store.snapshot())

    @on(Input.Submitted, "#watchlist-filter")
    def _on_filter_submitted(self, event: Input.Submitted) -> None:
        self.query_one("#watchlist-list", OptionList).focus()

    @on(OptionList.OptionSelected, "#watchlist-list")
    def _on_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option_id is not None:
            self.dismiss(int(event.option_id))

    def action_focus_filter(self) -> None:
        self.query_one("#watchlist-filter", Input).focus()

    def action_remove(self) -> None:
        movie = self._highlighted_movie()
        if movie is None:
            return
        self._store.remove_movie(movie.id)
        self.notify(f"Removed {movie.title}", title="Watchlist")

    def action_toggle_watched(self) -> None:
        movie = self._highlighted_movie()
        if movie is None:
            return
        self._store.toggle_watched(movie.id)

    def action_cursor_down(self) -> None:
        self.query_one("#watchlist-list", OptionList).action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one("#watchlist-list", OptionList).action_cursor_up()

    def action_close(self) -> None:
        self.dismiss(None)


__all__ = ["WatchlistScreen"]
