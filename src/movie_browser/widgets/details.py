"""Detail rendering for a single movie."""

from __future__ import annotations

from movie_browser.models import Movie, MovieDetails
from movie_browser.query import escape_rich_text, format_runtime
from movie_browser.themes import THEME_COLORS, rating_color
from movie_browser.widgets.listing import get_icon

DETAIL_CAST_LIMIT = 10  # Cast members shown in the detail screen


def _section(title: str, body: str) -> str:
    return f"[bold {THEME_COLORS['accent_alt']}]{title}[/]\n{body}"


def render_membership_line(in_watchlist: bool, watched: bool) -> str:
    """One-line watchlist/watched state with the key hints that change it."""
    if not in_watchlist:
        return "[dim]Not in your watchlist. Press [bold]a[/bold] to add it.[/]"
    state = f"[{THEME_COLORS['yellow']}]{get_icon('watchlist')} In watchlist[/]"
    if watched:
        state += f"  [{THEME_COLORS['green']}]{get_icon('watched')} Watched[/]"
    else:
        state += "  [dim]Not watched yet[/]"
    return f"{state}\n[dim]Press [bold]a[/bold] to remove, [bold]x[/bold] to toggle watched.[/]"


def render_movie_header(movie: Movie) -> str:
    """Title line plus year and rating, available before details load."""
    title = f"[bold {THEME_COLORS['accent']}]{escape_rich_text(movie.title)}[/]"
    meta: list[str] = []
    if movie.year:
        meta.append(movie.year)
    if movie.vote_average > 0:
        color = rating_color(movie.vote_average)
        meta.append(f"[{color}]{get_icon('rating')}{movie.vote_average:.1f}[/]")
    return f"{title}\n{'  '.join(meta)}" if meta else title


def render_movie_details(details: MovieDetails) -> str:
    """Render loaded details as Rich markup sections."""
    lines: list[str] = []
    if details.tagline:
        lines.append(f"[italic]{escape_rich_text(details.tagline)}[/]")

    facts: list[str] = []
    if details.genres:
        facts.append(", ".join(escape_rich_text(g.name) for g in details.genres))
    runtime = format_runtime(details.runtime)
    if runtime:
        facts.append(runtime)
    if details.rated:
        facts.append(f"Rated {escape_rich_text(details.rated)}")
    if facts:
        lines.append(f"[dim]{' · '.join(facts)}[/]")

    overview = details.overview or details.plot
    lines.append(
        _section(
            "Overview",
            escape_rich_text(overview) if overview else "[dim italic]No overview available[/]",
        )
    )

    if details.ratings:
        rating_lines = [
            f"  {escape_rich_text(r.source)}: [bold]{escape_rich_text(r.value)}[/]"
            for r in details.ratings
        ]
        lines.append(_section("Ratings", "\n".join(rating_lines)))

    if details.awards and details.awards != "N/A":
        lines.append(_section("Awards", escape_rich_text(details.awards)))

    if details.cast:
        cast_lines = []
        for member in details.cast[:DETAIL_CAST_LIMIT]:
            line = f"  {escape_rich_text(member.name)}"
            if member.character:
                line += f" [dim]as {escape_rich_text(member.character)}[/]"
            cast_lines.append(line)
        lines.append(_section("Cast", "\n".join(cast_lines)))

    if details.imdb_id:
        lines.append(f"[dim]IMDb: {escape_rich_text(details.imdb_id)}[/]")

    return "\n\n".join(lines)


__all__ = [
    "DETAIL_CAST_LIMIT",
    "render_membership_line",
    "render_movie_details",
    "render_movie_header",
]
