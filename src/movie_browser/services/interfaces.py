"""Service interfaces + default adapters for app-level dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from movie_browser.models import Genre, MovieDetails, MoviePage
from movie_browser.services import movie_api_service as _movie_api


@runtime_checkable
class MovieApiService(Protocol):
    """Interface for movie metadata backend operations."""

    async def fetch_list_page(
        self,
        *,
        client: httpx.AsyncClient | None,
        base_url: str,
        key: str,
        page: int,
        timeout_seconds: int,
    ) -> MoviePage:
        """Fetch one page of the list named by key."""
        ...

    async def fetch_genres(
        self,
        *,
        client: httpx.AsyncClient | None,
        base_url: str,
        timeout_seconds: int,
    ) -> list[Genre]:
        """Fetch available genres."""
        ...

    async def fetch_movie_details(
        self,
        *,
        client: httpx.AsyncClient | None,
        base_url: str,
        movie_id: int,
        timeout_seconds: int,
    ) -> MovieDetails:
        """Fetch combined detail data for one movie."""
        ...


class DefaultMovieApiService:
    """Default adapter that delegates to function-based movie API services."""

    async def fetch_list_page(
        self,
        *,
        client: httpx.AsyncClient | None,
        base_url: str,
        key: str,
        page: int,
        timeout_seconds: int,
    ) -> MoviePage:
        return await _movie_api.fetch_list_page(
            client=client,
            base_url=base_url,
            key=key,
            page=page,
            timeout_seconds=timeout_seconds,
        )

    async def fetch_genres(
        self,
        *,
        client: httpx.AsyncClient | None,
        base_url: str,
        timeout_seconds: int,
    ) -> list[Genre]:
        return await _movie_api.fetch_genres(
            client=client,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )

    async def fetch_movie_details(
        self,
        *,
        client: httpx.AsyncClient | None,
        base_url: str,
        movie_id: int,
        timeout_seconds: int,
    ) -> MovieDetails:
        return await _movie_api.fetch_movie_details(
            client=client,
            base_url=base_url,
            movie_id=movie_id,
            timeout_seconds=timeout_seconds,
        )


@dataclass(slots=True)
class AppServices:
    """Aggregated service interfaces consumed by the app layer."""

    movie_api: MovieApiService


def build_default_app_services() -> AppServices:
    """Build default app services backed by existing function-based modules."""
    return AppServices(movie_api=DefaultMovieApiService())


__all__ = [
    "AppServices",
    "DefaultMovieApiService",
    "MovieApiService",
    "build_default_app_services",
]
