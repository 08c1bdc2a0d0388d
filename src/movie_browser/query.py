"""Text helpers: Rich escaping and fuzzy title matching."""

from __future__ import annotations

from collections.abc import Iterable

from rapidfuzz import fuzz
from rich.markup import escape as escape_markup

from movie_browser.models import Movie

FUZZY_SCORE_CUTOFF = 60  # Minimum score (0-100) to include in results
FUZZY_LIMIT = 100  # Maximum number of results to return


def escape_rich_text(text: str | None) -> str:
    """Escape text for safe Rich markup rendering."""
    return escape_markup(text) if text else ""


def truncate_text(text: str, max_len: int) -> str:
    """Cut text at a word boundary and append an ellipsis when too long."""
    if len(text) <= max_len:
        return text
    cut = text[:max_len].rsplit(" ", 1)[0]
    return f"{cut}..."


def format_runtime(minutes: int) -> str:
    """Format runtime minutes as e.g. "2h 14m"; empty when unknown."""
    if minutes <= 0:
        return ""
    hours, mins = divmod(minutes, 60)
    if not hours:
        return f"{mins}m"
    return f"{hours}h {mins:02d}m"


def filter_movies_by_title(query: str, movies: Iterable[Movie]) -> list[Movie]:
    """Fuzzy-filter movies by title, best matches first.

    A blank query returns the movies unchanged, in their original order.
    """
    movie_list = list(movies)
    query_lower = query.strip().lower()
    if not query_lower:
        return movie_list

    scored: list[tuple[Movie, float]] = []
    for movie in movie_list:
        text = f"{movie.title} {movie.year}"
        score = fuzz.WRatio(query_lower, text.lower())
        if score >= FUZZY_SCORE_CUTOFF:
            scored.append((movie, score))

    # sort() is stable: ties keep watchlist order
    scored.sort(key=lambda x: x[1], reverse=True)
    return [movie for movie, _ in scored[:FUZZY_LIMIT]]


__all__ = [
    "FUZZY_LIMIT",
    "FUZZY_SCORE_CUTOFF",
    "escape_rich_text",
    "filter_movies_by_title",
    "format_runtime",
    "truncate_text",
]
