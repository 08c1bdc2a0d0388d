"""UI-facing copy builders for notifications."""

from __future__ import annotations

import httpx

from movie_browser.accumulator import PageFetchError


def _ensure_sentence(text: str) -> str:
    """Return text with terminal sentence punctuation."""
    cleaned = text.strip()
    if not cleaned:
        return ""
    if cleaned.endswith((".", "!", "?")):
        return cleaned
    return f"{cleaned}."


def build_next_step_hint(next_step: str) -> str:
    """Build a canonical next-step guidance line."""
    return f"Next step: {_ensure_sentence(next_step)}"


def build_actionable_error(
    action: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    """Build a 2-3 line actionable error message."""
    lines = [f"Could not {action.strip()}."]
    if why:
        lines.append(f"Why: {_ensure_sentence(why)}")
    lines.append(build_next_step_hint(next_step))
    return "\n".join(lines)


def build_actionable_warning(
    message: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    """Build a 2-3 line actionable warning message."""
    lines = [_ensure_sentence(message)]
    if why:
        lines.append(f"Why: {_ensure_sentence(why)}")
    lines.append(build_next_step_hint(next_step))
    return "\n".join(lines)


def describe_fetch_failure(exc: BaseException) -> str:
    """Short reason for a failed backend request."""
    cause = exc.cause if isinstance(exc, PageFetchError) else exc
    if isinstance(cause, httpx.HTTPStatusError):
        status_code = cause.response.status_code
        if status_code == 429:
            return "the movie backend is rate limiting requests (HTTP 429)"
        if status_code >= 500:
            return f"the movie backend is unavailable right now (HTTP {status_code})"
        return f"the movie backend rejected the request (HTTP {status_code})"
    if isinstance(cause, httpx.TimeoutException):
        return "the request to the movie backend timed out"
    if isinstance(cause, (httpx.HTTPError, OSError)):
        return "a network or I/O error occurred"
    return "the movie backend returned an unexpected response"


def build_page_load_error(exc: PageFetchError) -> str:
    """Notification text for a failed list page."""
    return build_actionable_error(
        f"load page {exc.page}",
        why=describe_fetch_failure(exc),
        next_step="scroll to the end again or press r to retry",
    )


__all__ = [
    "build_actionable_error",
    "build_actionable_warning",
    "build_next_step_hint",
    "build_page_load_error",
    "describe_fetch_failure",
]
