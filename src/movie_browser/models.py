"""Data models and constants for the movie browser application."""

from __future__ import annotations

from dataclasses import dataclass, field

# Application identity: single source of truth for platformdirs paths
CONFIG_APP_NAME = "movie-browser"

# Backend defaults
DEFAULT_API_BASE_URL = "http://localhost:8080/api"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 15
MAX_REQUEST_TIMEOUT_SECONDS = 120

# Paged list sources
TRENDING_LIST = "trending"
MOVIE_CATEGORIES = ("now_playing", "popular", "top_rated", "upcoming")
GENRE_KEY_PREFIX = "genre:"
SEARCH_KEY_PREFIX = "search:"
DEFAULT_LIST_KEY = TRENDING_LIST

LIST_TITLES: dict[str, str] = {
    "trending": "Trending",
    "now_playing": "Now Playing",
    "popular": "Popular",
    "top_rated": "Top Rated",
    "upcoming": "Upcoming",
}

# Durable storage keys
WATCHLIST_STORAGE_KEY = "watchlist"
WATCHED_STORAGE_KEY = "watched"


@dataclass(frozen=True, slots=True)
class Movie:
    """A catalog entry as returned in paged lists. Identity is ``id``."""

    id: int
    title: str
    poster_path: str | None = None
    release_date: str | None = None
    vote_average: float = 0.0

    @property
    def year(self) -> str:
        """Release year, or an empty string when unknown."""
        return (self.release_date or "")[:4]


@dataclass(frozen=True, slots=True)
class MoviePage:
    """One response of a paged list endpoint."""

    page: int
    results: tuple[Movie, ...]
    total_pages: int
    total_results: int = 0

    @property
    def has_more(self) -> bool:
        return self.page < self.total_pages


@dataclass(frozen=True, slots=True)
class Genre:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class CastMember:
    id: int
    name: str
    character: str = ""
    profile_path: str | None = None


@dataclass(frozen=True, slots=True)
class OmdbRating:
    """A third-party rating line, e.g. ("Rotten Tomatoes", "93%")."""

    source: str
    value: str


@dataclass(frozen=True, slots=True)
class MovieDetails:
    """Detail page data merged from primary metadata, ratings, and credits."""

    id: int
    title: str
    imdb_id: str = ""
    overview: str = ""
    poster_path: str | None = None
    release_date: str | None = None
    vote_average: float = 0.0
    genres: tuple[Genre, ...] = ()
    tagline: str = ""
    runtime: int = 0
    rated: str = ""
    awards: str = ""
    ratings: tuple[OmdbRating, ...] = ()
    plot: str = ""
    cast: tuple[CastMember, ...] = ()

    def to_movie(self) -> Movie:
        """Reduce details to the list item stored in the watchlist."""
        return Movie(
            id=self.id,
            title=self.title,
            poster_path=self.poster_path,
            release_date=self.release_date,
            vote_average=self.vote_average,
        )


@dataclass(frozen=True, slots=True)
class AccumulatorState:
    """Immutable snapshot of a list accumulator."""

    key: str | None
    items: tuple[Movie, ...]
    next_page: int
    has_more: bool
    is_loading: bool
    last_error: str | None = None


@dataclass(frozen=True, slots=True)
class WatchlistSnapshot:
    """Immutable snapshot of the watchlist store."""

    watchlist: tuple[Movie, ...] = ()
    watched: tuple[int, ...] = ()

    def contains(self, movie_id: int) -> bool:
        return any(movie.id == movie_id for movie in self.watchlist)


@dataclass(slots=True)
class UserConfig:
    """User preferences persisted between sessions."""

    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout_seconds: int = DEFAULT_REQUEST_TIMEOUT_SECONDS
    default_list: str = DEFAULT_LIST_KEY
    storage_dir: str = ""  # Empty = platformdirs user data dir
    ascii_icons: bool = False
    version: int = 1
    config_defaulted: bool = field(default=False, compare=False)


__all__ = [
    "CONFIG_APP_NAME",
    "DEFAULT_API_BASE_URL",
    "DEFAULT_LIST_KEY",
    "DEFAULT_REQUEST_TIMEOUT_SECONDS",
    "GENRE_KEY_PREFIX",
    "LIST_TITLES",
    "MAX_REQUEST_TIMEOUT_SECONDS",
    "MOVIE_CATEGORIES",
    "SEARCH_KEY_PREFIX",
    "TRENDING_LIST",
    "WATCHED_STORAGE_KEY",
    "WATCHLIST_STORAGE_KEY",
    "AccumulatorState",
    "CastMember",
    "Genre",
    "Movie",
    "MovieDetails",
    "MoviePage",
    "OmdbRating",
    "UserConfig",
    "WatchlistSnapshot",
]
