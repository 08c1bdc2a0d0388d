"""Genre picker modal."""

from __future__ import annotations

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Label, OptionList, Static
from textual.widgets.option_list import Option

from movie_browser.models import Genre
from movie_browser.query import escape_rich_text


class GenrePickerScreen(ModalScreen[Genre | None]):
    """Choose one genre to browse."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
    ]

    CSS = """
    GenrePickerScreen {
        align: center middle;
    }

    #genre-dialog {
        width: 50;
        height: 70%;
        background: $th-background;
        border: tall $th-accent;
        padding: 0 2;
    }

    #genre-title {
        text-style: bold;
        color: $th-accent;
        margin-bottom: 1;
    }

    #genre-list {
        height: 1fr;
        background: $th-panel;
        border: none;
    }

    #genre-footer {
        color: $th-muted;
        margin-top: 1;
    }
    """

    def __init__(self, genres: list[Genre], current_genre_id: int | None = None) -> None:
        super().__init__()
        self._genres = genres
        self._current_genre_id = current_genre_id

    def compose(self) -> ComposeResult:
        with Vertical(id="genre-dialog"):
            yield Label("Browse by Genre", id="genre-title")
            yield OptionList(
                *(Option(escape_rich_text(g.name), id=str(g.id)) for g in self._genres),
                id="genre-list",
            )
            yield Static("Enter: browse · Esc: cancel", id="genre-footer")

    def on_mount(self) -> None:
        option_list = self.query_one("#genre-list", OptionList)
        if option_list.option_count > 0:
            index = next(
                (i for i, g in enumerate(self._genres) if g.id == self._current_genre_id),
                0,
            )
            option_list.highlighted = index
        option_list.focus()

    @on(OptionList.OptionSelected, "#genre-list")
    def _on_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.dismiss(self._genres[event.option_index])

    def action_cursor_down(self) -> None:
        self.query_one("#genre-list", OptionList).action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one("#genre-list", OptionList).action_cursor_up()

    def action_cancel(self) -> None:
        self.dismiss(None)


__all__ = ["GenrePickerScreen"]
