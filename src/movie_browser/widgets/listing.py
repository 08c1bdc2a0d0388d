"""List rendering helpers for movie entries."""

from __future__ import annotations

from movie_browser.models import Movie
from movie_browser.query import escape_rich_text
from movie_browser.themes import THEME_COLORS, rating_color

_ICON_SETS: dict[str, dict[str, str]] = {
    "unicode": {
        "watchlist": "\u2605",  # ★
        "watched": "\u2713",  # ✓
        "rating": "\u2606",  # ☆
    },
    "ascii": {
        "watchlist": "*",
        "watched": "v",
        "rating": "r",
    },
}
_ACTIVE_ICON_SET = _ICON_SETS["unicode"]


def set_ascii_icons(enabled: bool) -> None:
    """Switch list indicators between Unicode and ASCII modes."""
    global _ACTIVE_ICON_SET
    _ACTIVE_ICON_SET = _ICON_SETS["ascii"] if enabled else _ICON_SETS["unicode"]


def get_icon(name: str) -> str:
    return _ACTIVE_ICON_SET[name]


def _render_badges(in_watchlist: bool, watched: bool) -> str:
    parts: list[str] = []
    if in_watchlist:
        parts.append(f"[{THEME_COLORS['yellow']}]{_ACTIVE_ICON_SET['watchlist']}[/]")
    if watched:
        parts.append(f"[{THEME_COLORS['green']}]{_ACTIVE_ICON_SET['watched']}[/]")
    return " ".join(parts)


def render_movie_option(movie: Movie, in_watchlist: bool = False, watched: bool = False) -> str:
    """Build the Rich markup for one OptionList row.

    Layout: ``<badges> <title> (<year>)  <rating>``. Watched titles are dimmed.
    """
    title = escape_rich_text(movie.title)
    if watched:
        title = f"[dim]{title}[/]"
    line = f"[bold]{title}[/]"
    if movie.year:
        line += f" [dim]({movie.year})[/]"
    if movie.vote_average > 0:
        color = rating_color(movie.vote_average)
        line += f"  [{color}]{_ACTIVE_ICON_SET['rating']}{movie.vote_average:.1f}[/]"
    badges = _render_badges(in_watchlist, watched)
    return f"{badges} {line}" if badges else line


def render_list_status(
    count: int,
    *,
    is_loading: bool,
    has_more: bool,
    last_error: str | None,
) -> str:
    """Status bar text for the current accumulator state."""
    if is_loading:
        return f"{count} movies · [{THEME_COLORS['accent']}]loading...[/]"
    if last_error:
        return f"{count} movies · [{THEME_COLORS['pink']}]load failed[/] · press r to retry"
    if not has_more:
        return f"{count} movies · end of list"
    return f"{count} movies"


def render_empty_list(is_loading: bool, last_error: str | None) -> str:
    """Placeholder row shown when the list has no movies."""
    if is_loading:
        return "[dim italic]Loading movies...[/]"
    if last_error:
        return "[dim italic]Could not load movies.[/]\n[dim]Try: press [bold]r[/bold] to retry.[/]"
    return (
        "[dim italic]No movies found.[/]\n"
        "[dim]Try: press [bold]/[/bold] to search or [bold]g[/bold] to pick a genre.[/]"
    )


__all__ = [
    "get_icon",
    "render_empty_list",
    "render_list_status",
    "render_movie_option",
    "set_ascii_icons",
]
