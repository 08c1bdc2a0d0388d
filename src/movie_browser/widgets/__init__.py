"""Rendering helpers for list rows and the detail screen."""

from movie_browser.widgets.details import (
    DETAIL_CAST_LIMIT,
    render_membership_line,
    render_movie_details,
    render_movie_header,
)
from movie_browser.widgets.listing import (
    render_empty_list,
    render_list_status,
    render_movie_option,
    set_ascii_icons,
)

__all__ = [
    "DETAIL_CAST_LIMIT",
    "render_empty_list",
    "render_list_status",
    "render_membership_line",
    "render_movie_details",
    "render_movie_header",
    "render_movie_option",
    "set_ascii_icons",
]
