"""Modal dialogs for the movie browser TUI.

Import modals from this package: ``from movie_browser.modals import WatchlistScreen``
"""

from movie_browser.modals.details import DetailsLoader, MovieDetailsScreen
from movie_browser.modals.genres import GenrePickerScreen
from movie_browser.modals.watchlist import WatchlistScreen

__all__ = [
    "DetailsLoader",
    "GenrePickerScreen",
    "MovieDetailsScreen",
    "WatchlistScreen",
]
