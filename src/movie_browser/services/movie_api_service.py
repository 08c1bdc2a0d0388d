"""Internal movie metadata API service helpers.

Thin async wrappers over the backend REST routes. Each call accepts an
optional shared ``httpx.AsyncClient``; without one a temporary client is
created for the request.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from movie_browser.models import MOVIE_CATEGORIES, Genre, MovieDetails, MoviePage
from movie_browser.parsing import (
    empty_page,
    parse_genre_list,
    parse_list_key,
    parse_movie_details,
    parse_movie_page,
)

logger = logging.getLogger(__name__)

USER_AGENT = "movie-browser/1.0"


class MovieApiError(ValueError):
    """The backend answered with a payload that cannot be used."""


async def _get_json(
    *,
    client: httpx.AsyncClient | None,
    url: str,
    params: dict[str, Any] | None,
    timeout_seconds: int,
) -> Any:
    """GET url and decode JSON. Raises httpx errors or MovieApiError."""
    headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    if client is not None:
        response = await client.get(url, params=params, headers=headers, timeout=timeout_seconds)
    else:
        async with httpx.AsyncClient() as tmp_client:
            response = await tmp_client.get(
                url, params=params, headers=headers, timeout=timeout_seconds
            )

    response.raise_for_status()
    try:
        return response.json()
    except ValueError as e:
        raise MovieApiError(f"Backend returned invalid JSON for {url}") from e


def _url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


async def _fetch_page(
    *,
    client: httpx.AsyncClient | None,
    base_url: str,
    path: str,
    params: dict[str, Any],
    timeout_seconds: int,
) -> MoviePage:
    data = await _get_json(
        client=client,
        url=_url(base_url, path),
        params=params,
        timeout_seconds=timeout_seconds,
    )
    page = parse_movie_page(data)
    if page is None:
        raise MovieApiError(f"Backend returned a malformed page for {path}")
    return page


async def fetch_trending(
    *,
    client: httpx.AsyncClient | None,
    base_url: str,
    page: int,
    timeout_seconds: int,
) -> MoviePage:
    """Fetch one page of trending movies."""
    return await _fetch_page(
        client=client,
        base_url=base_url,
        path="trending",
        params={"page": page},
        timeout_seconds=timeout_seconds,
    )


async def fetch_category_page(
    *,
    client: httpx.AsyncClient | None,
    base_url: str,
    category: str,
    page: int,
    timeout_seconds: int,
) -> MoviePage:
    """Fetch one page of a named category list.

    Raises:
        ValueError: If category is not one of MOVIE_CATEGORIES.
    """
    if category not in MOVIE_CATEGORIES:
        raise ValueError(f"Invalid movie category: {category!r}")
    return await _fetch_page(
        client=client,
        base_url=base_url,
        path=f"movies/{category}",
        params={"page": page},
        timeout_seconds=timeout_seconds,
    )


async def fetch_genre_page(
    *,
    client: httpx.AsyncClient | None,
    base_url: str,
    genre_id: int,
    page: int,
    timeout_seconds: int,
) -> MoviePage:
    """Fetch one page of movies discovered by genre."""
    return await _fetch_page(
        client=client,
        base_url=base_url,
        path=f"discover/genre/{genre_id}",
        params={"page": page},
        timeout_seconds=timeout_seconds,
    )


async def search_movies(
    *,
    client: httpx.AsyncClient | None,
    base_url: str,
    query: str,
    page: int,
    timeout_seconds: int,
) -> MoviePage:
    """Search movies by free text. A blank query yields an empty page locally."""
    query = query.strip()
    if not query:
        return empty_page()
    return await _fetch_page(
        client=client,
        base_url=base_url,
        path="search",
        params={"q": query, "page": page},
        timeout_seconds=timeout_seconds,
    )


async def fetch_genres(
    *,
    client: httpx.AsyncClient | None,
    base_url: str,
    timeout_seconds: int,
) -> list[Genre]:
    """Fetch the genre list used by the genre picker."""
    data = await _get_json(
        client=client,
        url=_url(base_url, "genres"),
        params=None,
        timeout_seconds=timeout_seconds,
    )
    return parse_genre_list(data)


async def fetch_movie_details(
    *,
    client: httpx.AsyncClient | None,
    base_url: str,
    movie_id: int,
    timeout_seconds: int,
) -> MovieDetails:
    """Fetch combined details (metadata, ratings, cast) for one movie."""
    data = await _get_json(
        client=client,
        url=_url(base_url, f"movie/{movie_id}"),
        params=None,
        timeout_seconds=timeout_seconds,
    )
    details = parse_movie_details(data)
    if details is None:
        raise MovieApiError(f"Backend returned malformed details for movie {movie_id}")
    return details


async def fetch_list_page(
    *,
    client: httpx.AsyncClient | None,
    base_url: str,
    key: str,
    page: int,
    timeout_seconds: int,
) -> MoviePage:
    """Fetch one page of the list named by an accumulator key.

    Raises:
        ValueError: If key names no known list.
    """
    source = parse_list_key(key)
    logger.debug("Fetching page %d of %r", page, key)
    if source.kind == "trending":
        return await fetch_trending(
            client=client, base_url=base_url, page=page, timeout_seconds=timeout_seconds
        )
    if source.kind == "category":
        return await fetch_category_page(
            client=client,
            base_url=base_url,
            category=source.value,
            page=page,
            timeout_seconds=timeout_seconds,
        )
    if source.kind == "genre":
        return await fetch_genre_page(
            client=client,
            base_url=base_url,
            genre_id=int(source.value),
            page=page,
            timeout_seconds=timeout_seconds,
        )
    return await search_movies(
        client=client,
        base_url=base_url,
        query=source.value,
        page=page,
        timeout_seconds=timeout_seconds,
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
