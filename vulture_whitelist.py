"""Vulture whitelist for Textual framework false positives.

Textual uses string-based dispatch for action_* methods (via BINDINGS),
lifecycle hooks, event handlers (@on decorators), and compose() methods.
Vulture can't trace these, so we declare them here.
"""

# ── MovieBrowser (App) ───────────────────────────────────────────────
from movie_browser.app import MovieBrowser

MovieBrowser.TITLE
MovieBrowser.CSS
MovieBrowser.BINDINGS
MovieBrowser.compose
MovieBrowser.on_mount
MovieBrowser.on_unmount
MovieBrowser._on_movie_highlighted
MovieBrowser._on_movie_selected
MovieBrowser._on_search_submitted
MovieBrowser.action_show_list
MovieBrowser.action_toggle_search
MovieBrowser.action_cancel_search
MovieBrowser.action_cursor_down
MovieBrowser.action_cursor_up
MovieBrowser.action_retry
MovieBrowser.action_toggle_watchlist
MovieBrowser.action_toggle_watched
MovieBrowser.action_show_watchlist
MovieBrowser.action_pick_genre
MovieBrowser.action_set_default_list

# ── Modals ──────────────────────────────────────────────────────────
from movie_browser.modals import GenrePickerScreen, MovieDetailsScreen, WatchlistScreen

MovieDetailsScreen.CSS
MovieDetailsScreen.BINDINGS
MovieDetailsScreen.compose
MovieDetailsScreen.on_mount
MovieDetailsScreen.on_unmount
MovieDetailsScreen.action_toggle_watchlist
MovieDetailsScreen.action_toggle_watched
MovieDetailsScreen.action_close

WatchlistScreen.CSS
WatchlistScreen.BINDINGS
WatchlistScreen.compose
WatchlistScreen.on_mount
WatchlistScreen.on_unmount
WatchlistScreen._on_filter_changed
WatchlistScreen._on_filter_submitted
WatchlistScreen._on_option_selected
WatchlistScreen.action_focus_filter
WatchlistScreen.action_remove
WatchlistScreen.action_toggle_watched
WatchlistScreen.action_cursor_down
WatchlistScreen.action_cursor_up
WatchlistScreen.action_close

GenrePickerScreen.CSS
GenrePickerScreen.BINDINGS
GenrePickerScreen.compose
GenrePickerScreen.on_mount
GenrePickerScreen._on_option_selected
GenrePickerScreen.action_cursor_down
GenrePickerScreen.action_cursor_up
GenrePickerScreen.action_cancel

# ── Protocol members (structural typing) ─────────────────────────────
from movie_browser.services.interfaces import MovieApiService
from movie_browser.storage import KeyValueStorage

MovieApiService.fetch_list_page
MovieApiService.fetch_genres
MovieApiService.fetch_movie_details
KeyValueStorage.get
KeyValueStorage.set
KeyValueStorage.remove
