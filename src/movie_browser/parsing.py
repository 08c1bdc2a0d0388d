"""Parsing of backend payloads and list keys into movie models.

Backend payloads are untrusted: every parser type-checks its input and
falls back to safe defaults instead of raising, except where a payload is
unusable as a whole (missing ``id`` on a detail response, non-object root),
in which case ``None`` is returned and the caller decides.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from movie_browser.models import (
    GENRE_KEY_PREFIX,
    LIST_TITLES,
    MOVIE_CATEGORIES,
    SEARCH_KEY_PREFIX,
    TRENDING_LIST,
    CastMember,
    Genre,
    Movie,
    MovieDetails,
    MoviePage,
    OmdbRating,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Value coercion
# ============================================================================


def _coerce_int(value: Any, default: int = 0) -> int:
    """Coerce untrusted values to int, excluding bool."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return default


def _coerce_float(value: Any, default: float = 0.0) -> float:
    """Coerce untrusted numeric values to float, excluding bool."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return default


def _coerce_str(value: Any, default: str = "") -> str:
    if isinstance(value, str):
        return value
    return default


def _optional_str(value: Any) -> str | None:
    """Return non-empty strings unchanged, everything else as None."""
    if isinstance(value, str) and value:
        return value
    return None


# ============================================================================
# Movies and pages
# ============================================================================


def parse_movie(item: Any) -> Movie | None:
    """Parse one list result. Returns None when ``id`` is missing or invalid."""
    if not isinstance(item, dict):
        return None
    movie_id = item.get("id")
    if isinstance(movie_id, bool) or not isinstance(movie_id, int):
        return None
    return Movie(
        id=movie_id,
        title=_coerce_str(item.get("title")),
        poster_path=_optional_str(item.get("poster_path")),
        release_date=_optional_str(item.get("release_date")),
        vote_average=_coerce_float(item.get("vote_average")),
    )


def movie_to_dict(movie: Movie) -> dict[str, Any]:
    """Serialize a Movie using the backend's wire field names."""
    return {
        "id": movie.id,
        "title": movie.title,
        "poster_path": movie.poster_path,
        "release_date": movie.release_date,
        "vote_average": movie.vote_average,
    }


def parse_movie_page(data: Any) -> MoviePage | None:
    """Parse a paged list response ``{page, results, total_pages, total_results}``.

    Results without a usable ``id`` are dropped. Returns None when the root
    is not an object.
    """
    if not isinstance(data, dict):
        return None
    raw_results = data.get("results")
    if not isinstance(raw_results, list):
        raw_results = []
    results: list[Movie] = []
    for raw in raw_results:
        movie = parse_movie(raw)
        if movie is None:
            logger.debug("Dropping list result without a valid id: %r", raw)
            continue
        results.append(movie)
    page = max(1, _coerce_int(data.get("page"), 1))
    total_pages = max(0, _coerce_int(data.get("total_pages"), 0))
    total_results = max(0, _coerce_int(data.get("total_results"), len(results)))
    return MoviePage(
        page=page,
        results=tuple(results),
        total_pages=total_pages,
        total_results=total_results,
    )


def empty_page() -> MoviePage:
    """The page returned for a blank search query."""
    return MoviePage(page=1, results=(), total_pages=1, total_results=0)


# ============================================================================
# Genres and details
# ============================================================================


def _parse_genre(raw: Any) -> Genre | None:
    if not isinstance(raw, dict):
        return None
    genre_id = raw.get("id")
    if isinstance(genre_id, bool) or not isinstance(genre_id, int):
        return None
    return Genre(id=genre_id, name=_coerce_str(raw.get("name")))


def parse_genre_list(data: Any) -> list[Genre]:
    """Parse ``{"genres": [{id, name}, ...]}``; invalid entries are skipped."""
    if not isinstance(data, dict):
        return []
    raw_genres = data.get("genres")
    if not isinstance(raw_genres, list):
        return []
    genres = [_parse_genre(raw) for raw in raw_genres]
    return [genre for genre in genres if genre is not None]


def _parse_cast(raw_cast: Any) -> tuple[CastMember, ...]:
    if not isinstance(raw_cast, list):
        return ()
    cast: list[CastMember] = []
    for raw in raw_cast:
        if not isinstance(raw, dict):
            continue
        member_id = raw.get("id")
        if isinstance(member_id, bool) or not isinstance(member_id, int):
            continue
        cast.append(
            CastMember(
                id=member_id,
                name=_coerce_str(raw.get("name")),
                character=_coerce_str(raw.get("character")),
                profile_path=_optional_str(raw.get("profile_path")),
            )
        )
    return tuple(cast)


def _parse_ratings(raw_ratings: Any) -> tuple[OmdbRating, ...]:
    if not isinstance(raw_ratings, list):
        return ()
    ratings = [
        OmdbRating(source=_coerce_str(r.get("Source")), value=_coerce_str(r.get("Value")))
        for r in raw_ratings
        if isinstance(r, dict)
    ]
    return tuple(r for r in ratings if r.source)


def parse_movie_details(data: Any) -> MovieDetails | None:
    """Parse the combined detail response ``{"tmdb", "omdb", "cast"}``.

    The ``omdb`` and ``cast`` sections are optional; the backend omits or
    zeroes them when the ratings source is unavailable.
    """
    if not isinstance(data, dict):
        return None
    tmdb = data.get("tmdb")
    if not isinstance(tmdb, dict):
        return None
    movie_id = tmdb.get("id")
    if isinstance(movie_id, bool) or not isinstance(movie_id, int):
        return None
    omdb = data.get("omdb")
    if not isinstance(omdb, dict):
        omdb = {}
    raw_genres = tmdb.get("genres")
    genres = (
        tuple(g for g in (_parse_genre(raw) for raw in raw_genres) if g is not None)
        if isinstance(raw_genres, list)
        else ()
    )
    return MovieDetails(
        id=movie_id,
        title=_coerce_str(tmdb.get("title")),
        imdb_id=_coerce_str(tmdb.get("imdb_id")),
        overview=_coerce_str(tmdb.get("overview")),
        poster_path=_optional_str(tmdb.get("poster_path")),
        release_date=_optional_str(tmdb.get("release_date")),
        vote_average=_coerce_float(tmdb.get("vote_average")),
        genres=genres,
        tagline=_coerce_str(tmdb.get("tagline")),
        runtime=_coerce_int(tmdb.get("runtime")),
        rated=_coerce_str(omdb.get("Rated")),
        awards=_coerce_str(omdb.get("Awards")),
        ratings=_parse_ratings(omdb.get("Ratings")),
        plot=_coerce_str(omdb.get("Plot")),
        cast=_parse_cast(data.get("cast")),
    )


# ============================================================================
# List keys
# ============================================================================


@dataclass(frozen=True, slots=True)
class ListSource:
    """Parsed accumulator key.

    kind is one of "trending", "category", "genre", "search".
    """

    kind: str
    value: str = ""


def parse_list_key(key: str) -> ListSource:
    """Parse an accumulator key such as ``popular``, ``genre:28``, ``search:alien``.

    Raises:
        ValueError: If the key names no known list.
    """
    if key == TRENDING_LIST:
        return ListSource(kind="trending")
    if key in MOVIE_CATEGORIES:
        return ListSource(kind="category", value=key)
    if key.startswith(GENRE_KEY_PREFIX):
        genre_id = key[len(GENRE_KEY_PREFIX) :].strip()
        if not (genre_id.isascii() and genre_id.isdigit()):
            raise ValueError(f"Invalid genre id in list key: {key!r}")
        return ListSource(kind="genre", value=genre_id)
    if key.startswith(SEARCH_KEY_PREFIX):
        return ListSource(kind="search", value=key[len(SEARCH_KEY_PREFIX) :])
    raise ValueError(f"Unknown movie list: {key!r}")


def format_list_key(source: ListSource) -> str:
    """Inverse of parse_list_key."""
    if source.kind == "trending":
        return TRENDING_LIST
    if source.kind == "category":
        return source.value
    if source.kind == "genre":
        return f"{GENRE_KEY_PREFIX}{source.value}"
    if source.kind == "search":
        return f"{SEARCH_KEY_PREFIX}{source.value}"
    raise ValueError(f"Unknown list source kind: {source.kind!r}")


def describe_list_key(key: str, genre_names: dict[int, str] | None = None) -> str:
    """Human-readable title for a list key (falls back to the raw key)."""
    try:
        source = parse_list_key(key)
    except ValueError:
        return key
    if source.kind in ("trending", "category"):
        return LIST_TITLES.get(key, key)
    if source.kind == "genre":
        name = (genre_names or {}).get(int(source.value))
        return f"{name} Movies" if name else f"Genre {source.value}"
    return f'Results for "{source.value}"'


__all__ = [
    "ListSource",
    "describe_list_key",
    "empty_page",
    "format_list_key",
    "movie_to_dict",
    "parse_genre_list",
    "parse_list_key",
    "parse_movie",
    "parse_movie_details",
    "parse_movie_page",
]
