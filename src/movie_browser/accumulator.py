"""Incremental paginated list accumulator for infinite-scroll browsing.

One accumulator tracks one list key (a category, genre, or search query) and
grows a duplicate-free, order-preserving sequence of movies page by page.

Request flow::

    reset(key)                 clear state, invalidate in-flight requests
    request_next_page()        fetch next_page if not loading and has_more
    signal_near_end()          "last row is visible"; coalesces with in-flight

Stale responses: every ``reset`` bumps a request token. A fetch captures the
token when it starts and compares it when it completes; a mismatch means
the key changed meanwhile, so the result (or failure) is dropped without
touching the new key's state.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

import httpx

from movie_browser.models import AccumulatorState, Movie, MoviePage

logger = logging.getLogger(__name__)

PageFetcher = Callable[[str, int], Awaitable[MoviePage]]
AccumulatorListener = Callable[[AccumulatorState], None]

# Errors treated as transient: state is kept and the fetch may be retried.
TRANSIENT_FETCH_ERRORS: tuple[type[BaseException], ...] = (
    httpx.HTTPError,
    OSError,
    ValueError,
)


class PageFetchError(RuntimeError):
    """A page request failed; the accumulator state is unchanged."""

    def __init__(self, key: str, page: int, cause: BaseException) -> None:
        super().__init__(f"Failed to load page {page} of {key!r}: {cause}")
        self.key = key
        self.page = page
        self.cause = cause


class ListAccumulator:
    """Accumulates pages of movies for the current list key."""

    def __init__(self, fetch_page: PageFetcher, key: str | None = None) -> None:
        self._fetch_page = fetch_page
        self._listeners: list[AccumulatorListener] = []
        self._request_token = 0
        self._key: str | None = key
        # dict keeps first-insertion order; re-assigning a key keeps its slot.
        self._items: dict[int, Movie] = {}
        self._next_page = 1
        self._has_more = True
        self._is_loading = False
        self._last_error: str | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def key(self) -> str | None:
        return self._key

    @property
    def items(self) -> tuple[Movie, ...]:
        return tuple(self._items.values())

    @property
    def next_page(self) -> int:
        return self._next_page

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def last_error(self) -> str | None:
        return self._last_error

    def snapshot(self) -> AccumulatorState:
        return AccumulatorState(
            key=self._key,
            items=self.items,
            next_page=self._next_page,
            has_more=self._has_more,
            is_loading=self._is_loading,
            last_error=self._last_error,
        )

    def subscribe(self, listener: AccumulatorListener) -> Callable[[], None]:
        """Register listener for state changes. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def reset(self, key: str) -> None:
        """Start over for key. Any in-flight response becomes stale."""
        self._request_token += 1
        self._key = key
        self._items = {}
        self._next_page = 1
        self._has_more = True
        self._is_loading = False
        self._last_error = None
        logger.debug("Accumulator reset to %r (token %d)", key, self._request_token)
        self._notify()

    def merge_page(self, page: MoviePage) -> None:
        """Merge one page: dedup by id, later value wins, first position kept."""
        for movie in page.results:
            self._items[movie.id] = movie
        self._has_more = page.page < page.total_pages

    async def request_next_page(self) -> bool:
        """Fetch and merge the next page for the current key.

        Returns True when a page was merged, False when the call was a no-op
        (no key, already loading, nothing more) or its response went stale.

        Raises:
            PageFetchError: If the fetch failed for the still-current key.
        """
        key = self._key
        if key is None or self._is_loading or not self._has_more:
            return False

        request_token = self._request_token
        page_number = self._next_page
        self._is_loading = True
        self._notify()

        try:
            page = await self._fetch_page(key, page_number)
        except TRANSIENT_FETCH_ERRORS as exc:
            if request_token != self._request_token:
                logger.debug("Ignoring failure of stale request for %r: %s", key, exc)
                return False
            logger.warning("Page %d of %r failed: %s", page_number, key, exc)
            self._is_loading = False
            self._last_error = str(exc) or type(exc).__name__
            self._notify()
            raise PageFetchError(key, page_number, exc) from exc
        except BaseException:
            # Cancellation or a bug in the fetcher: release the loading flag.
            if request_token == self._request_token:
                self._is_loading = False
                self._notify()
            raise

        # Ignore stale responses after reset to another key.
        if request_token != self._request_token:
            logger.debug("Ignoring stale page %d for %r", page_number, key)
            return False

        self.merge_page(page)
        self._next_page += 1
        self._is_loading = False
        self._last_error = None
        logger.debug(
            "Merged page %d/%d of %r: %d items total",
            page.page,
            page.total_pages,
            key,
            len(self._items),
        )
        self._notify()
        return True

    async def signal_near_end(self) -> bool:
        """Consumer signal: the end of the rendered list is visible.

        Level-triggered: while a fetch is in flight the signal is absorbed by
        it, so repeated signals never start a second concurrent request.
        """
        if self._is_loading:
            return False
        return await self.request_next_page()


__all__ = [
    "TRANSIENT_FETCH_ERRORS",
    "AccumulatorListener",
    "ListAccumulator",
    "PageFetchError",
    "PageFetcher",
]
