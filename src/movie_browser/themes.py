"""Theme system: the color palette and its Textual theme."""

from __future__ import annotations

from textual.theme import Theme as TextualTheme

THEME_NAME = "movie-monokai"

DEFAULT_THEME = {
    "background": "#272822",
    "panel": "#1e1e1e",
    "panel_alt": "#3e3d32",
    "text": "#f8f8f2",
    "muted": "#75715e",
    "accent": "#66d9ef",
    "accent_alt": "#e6db74",
    "green": "#a6e22e",
    "yellow": "#e6db74",
    "orange": "#fd971f",
    "pink": "#f92672",
    "purple": "#ae81ff",
    "highlight": "#49483e",
    "highlight_focus": "#5a5950",
}

THEME_COLORS = DEFAULT_THEME.copy()


def build_textual_theme(name: str, colors: dict[str, str]) -> TextualTheme:
    """Convert an app color dict to a Textual Theme with custom CSS variables.

    The $th-* variables are what APP_CSS and the modal CSS reference.
    """
    variables = {
        "th-background": colors["background"],
        "th-panel": colors["panel"],
        "th-panel-alt": colors["panel_alt"],
        "th-highlight": colors["highlight"],
        "th-highlight-focus": colors["highlight_focus"],
        "th-accent": colors["accent"],
        "th-accent-alt": colors["accent_alt"],
        "th-muted": colors["muted"],
        "th-text": colors["text"],
        "th-green": colors["green"],
        "th-orange": colors["orange"],
    }
    return TextualTheme(
        name=name,
        primary=colors["accent"],
        secondary=colors["accent_alt"],
        accent=colors["green"],
        foreground=colors["text"],
        background=colors["background"],
        surface=colors["panel"],
        panel=colors["panel_alt"],
        warning=colors["orange"],
        error=colors["pink"],
        success=colors["green"],
        dark=True,
        variables=variables,
    )


def rating_color(vote_average: float) -> str:
    """Color for a 0-10 rating badge."""
    if vote_average >= 7.5:
        return THEME_COLORS["green"]
    if vote_average >= 5.0:
        return THEME_COLORS["yellow"]
    return THEME_COLORS["muted"]


__all__ = [
    "DEFAULT_THEME",
    "THEME_COLORS",
    "THEME_NAME",
    "build_textual_theme",
    "rating_color",
]
