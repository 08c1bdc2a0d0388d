"""Internal service layer for backend access."""

from movie_browser.services.movie_api_service import (
    MovieApiError,
    fetch_category_page,
    fetch_genre_page,
    fetch_genres,
    fetch_list_page,
    fetch_movie_details,
    fetch_trending,
    search_movies,
)

__all__ = [
    "MovieApiError",
    "fetch_category_page",
    "fetch_genre_page",
    "fetch_genres",
    "fetch_list_page",
    "fetch_movie_details",
    "fetch_trending",
    "search_movies",
]
