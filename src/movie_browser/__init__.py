"""Movie Browser: a terminal UI for browsing movie lists and keeping a watchlist."""

from movie_browser.accumulator import ListAccumulator, PageFetchError
from movie_browser.models import (
    AccumulatorState,
    CastMember,
    Genre,
    Movie,
    MovieDetails,
    MoviePage,
    OmdbRating,
    UserConfig,
    WatchlistSnapshot,
)
from movie_browser.storage import InMemoryStorage, JsonFileStorage, KeyValueStorage, StorageError
from movie_browser.watchlist import NotInWatchlistError, WatchlistError, WatchlistStore

__version__ = "1.0.0"

__all__ = [
    "AccumulatorState",
    "CastMember",
    "Genre",
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorage",
    "ListAccumulator",
    "Movie",
    "MovieDetails",
    "MoviePage",
    "NotInWatchlistError",
    "OmdbRating",
    "PageFetchError",
    "StorageError",
    "UserConfig",
    "WatchlistError",
    "WatchlistSnapshot",
    "WatchlistStore",
    "__version__",
]
