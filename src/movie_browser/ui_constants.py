"""Internal UI constants for the MovieBrowser app."""

from __future__ import annotations

from textual.binding import Binding, BindingType

# Rows from the end of the list at which the next page is requested
NEAR_END_THRESHOLD = 5

APP_CSS = """
Screen {
    background: $th-background;
}

Header {
    background: $th-panel-alt;
    color: $th-text;
}

#list-pane {
    height: 1fr;
    border: tall $th-highlight;
    background: $th-panel;
}

#list-pane:focus-within {
    border: tall $th-accent;
}

#list-header {
    padding: 0 1;
    background: $th-panel;
    color: $th-accent;
    text-style: bold;
}

#movie-list {
    height: 1fr;
    scrollbar-gutter: stable;
}

#movie-list > .option-list--option-highlighted {
    background: $th-highlight-focus;
}

#search-container {
    height: auto;
    padding: 0 1;
    background: $th-panel;
    display: none;
}

#search-container.visible {
    display: block;
}

#search-input {
    width: 100%;
    background: $th-panel-alt;
    border: none;
}

#search-input:focus {
    border-left: tall $th-accent;
}

#status-bar {
    padding: 0 1;
    background: $th-panel-alt;
    color: $th-muted;
}
"""

APP_BINDINGS: list[BindingType] = [
    Binding("q", "quit", "Quit"),
    Binding("1", "show_list('trending')", "Trending", show=False),
    Binding("2", "show_list('now_playing')", "Now Playing", show=False),
    Binding("3", "show_list('popular')", "Popular", show=False),
    Binding("4", "show_list('top_rated')", "Top Rated", show=False),
    Binding("5", "show_list('upcoming')", "Upcoming", show=False),
    Binding("slash", "toggle_search", "Search"),
    Binding("escape", "cancel_search", "Cancel", show=False),
    Binding("g", "pick_genre", "Genres"),
    Binding("a", "toggle_watchlist", "Watchlist +/-"),
    Binding("x", "toggle_watched", "Watched"),
    Binding("l", "show_watchlist", "My Watchlist"),
    Binding("r", "retry", "Retry", show=False),
    Binding("D", "set_default_list", "Set Startup List", show=False),
    Binding("j", "cursor_down", "Down", show=False),
    Binding("k", "cursor_up", "Up", show=False),
]

__all__ = [
    "APP_BINDINGS",
    "APP_CSS",
    "NEAR_END_THRESHOLD",
]
