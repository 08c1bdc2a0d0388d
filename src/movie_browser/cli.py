"""CLI/bootstrap helpers for the movie browser application."""

from __future__ import annotations

import argparse
import json
import logging
import logging.handlers
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from movie_browser.action_messages import build_actionable_error
from movie_browser.config import (
    CONFIG_APP_NAME,
    export_watchlist,
    import_watchlist,
    load_config,
)
from movie_browser.models import MOVIE_CATEGORIES, TRENDING_LIST, UserConfig
from movie_browser.parsing import ListSource, format_list_key, parse_list_key
from movie_browser.storage import InMemoryStorage, JsonFileStorage, KeyValueStorage
from movie_browser.watchlist import WatchlistStore

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool) -> None:
    """Configure logging. When debug=True, logs to file at DEBUG level."""
    if not debug:
        # Default: suppress all logging (TUI captures stderr)
        logging.disable(logging.CRITICAL)
        return

    log_dir = Path(user_config_dir(CONFIG_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "debug.log"

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.DEBUG)


def _configure_color_mode(no_color: bool) -> None:
    """Configure environment hints for terminal color behavior."""
    if no_color:
        os.environ["NO_COLOR"] = "1"
        os.environ.pop("FORCE_COLOR", None)


def _validate_interactive_tty() -> bool:
    """Return True when stdin/stdout are interactive terminals."""
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _build_storage(ephemeral: bool, config: UserConfig) -> KeyValueStorage:
    """Pick the watchlist storage backend for this session."""
    if ephemeral:
        return InMemoryStorage()
    directory = Path(config.storage_dir).expanduser() if config.storage_dir else None
    return JsonFileStorage(directory)


def _resolve_initial_list(args: argparse.Namespace, config: UserConfig) -> str | int:
    """Resolve the startup list key from CLI args. Returns key or exit code."""
    if args.search is not None:
        query = args.search.strip()
        if not query:
            print("Error: --search needs a non-empty query", file=sys.stderr)
            return 1
        return format_list_key(ListSource("search", query))
    if args.genre is not None:
        if args.genre < 0:
            print("Error: --genre must be a non-negative genre id", file=sys.stderr)
            return 1
        return format_list_key(ListSource("genre", str(args.genre)))
    if args.list is not None:
        try:
            parse_list_key(args.list)
        except ValueError:
            print(
                build_actionable_error(
                    f"open list {args.list!r}",
                    why="it is not a known list",
                    next_step=(
                        f"use one of {', '.join((TRENDING_LIST, *MOVIE_CATEGORIES))}, "
                        "genre:<id> or search:<text>"
                    ),
                ),
                file=sys.stderr,
            )
            return 1
        return args.list
    return config.default_list


def _print_watchlist(store: WatchlistStore) -> None:
    """Print the watchlist as plain text (non-interactive)."""
    snapshot = store.snapshot()
    if not snapshot.watchlist:
        print("Your watchlist is empty.")
        return
    watched = set(snapshot.watched)
    for movie in snapshot.watchlist:
        mark = "x" if movie.id in watched else " "
        year = f" ({movie.year})" if movie.year else ""
        print(f"[{mark}] {movie.title}{year}  #{movie.id}")
    print(f"{len(snapshot.watchlist)} movies, {len(watched)} watched")


def _export_watchlist_to(store: WatchlistStore, path: Path) -> int:
    data = export_watchlist(store.snapshot())
    try:
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as e:
        print(f"Error: Failed to write {path}: {e}", file=sys.stderr)
        return 1
    print(f"Exported {len(data['watchlist'])} movies to {path}")
    return 0


def _import_watchlist_from(store: WatchlistStore, path: Path, merge: bool) -> int:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        print(f"Error: {path} not found", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Failed to read {path}: {e}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"Error: {path} is not valid JSON: {e}", file=sys.stderr)
        return 1
    try:
        movies, watched = import_watchlist(data, store, merge=merge)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if store.persist_error:
        print(f"Error: Failed to save watchlist: {store.persist_error}", file=sys.stderr)
        return 1
    print(f"Imported {movies} movies and {watched} watched flags from {path}")
    return 0


def main(
    argv: list[str] | None = None,
    *,
    load_config_fn: Callable[[], UserConfig] = load_config,
    build_storage_fn: Callable[[bool, UserConfig], KeyValueStorage] = _build_storage,
    configure_logging_fn: Callable[[bool], None] = _configure_logging,
    configure_color_mode_fn: Callable[[bool], None] = _configure_color_mode,
    validate_interactive_tty_fn: Callable[[], bool] = _validate_interactive_tty,
    app_factory: Callable[..., Any] | None = None,
) -> int:
    """Main entry point. Returns exit code."""
    parser = argparse.ArgumentParser(description="Browse movies and keep a watchlist in a TUI")
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--list",
        "--category",
        dest="list",
        type=str,
        default=None,
        help=(
            "List to open at startup: trending, now_playing, popular, top_rated, "
            "upcoming (default: config value)"
        ),
    )
    source.add_argument(
        "--search",
        type=str,
        default=None,
        help="Start with search results for this query",
    )
    source.add_argument(
        "--genre",
        type=int,
        default=None,
        help="Start with movies of this genre id",
    )
    parser.add_argument(
        "--api-url",
        type=str,
        default=None,
        help="Base URL of the movie backend API (default: config value)",
    )
    parser.add_argument(
        "--ephemeral",
        action="store_true",
        help="Keep the watchlist in memory only (nothing is read or written)",
    )
    parser.add_argument(
        "--show-watchlist",
        action="store_true",
        help="Print the watchlist and exit",
    )
    parser.add_argument(
        "--export-watchlist",
        type=Path,
        default=None,
        metavar="PATH",
        help="Write the watchlist to a JSON file and exit",
    )
    parser.add_argument(
        "--import-watchlist",
        type=Path,
        default=None,
        metavar="PATH",
        help="Merge a previously exported watchlist and exit",
    )
    parser.add_argument(
        "--replace",
        action="store_true",
        help="With --import-watchlist, replace the watchlist instead of merging",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to file (~/.config/movie-browser/debug.log)",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable terminal colors",
    )
    parser.add_argument(
        "--ascii",
        action="store_true",
        help="Use ASCII-only status icons for compatibility with limited terminals",
    )
    args = parser.parse_args(argv)
    if args.replace and args.import_watchlist is None:
        print("Error: --replace requires --import-watchlist", file=sys.stderr)
        return 1

    configure_color_mode_fn(args.no_color)
    configure_logging_fn(args.debug)
    logger.debug("movie-browser starting, cwd=%s", Path.cwd())

    config = load_config_fn()
    api_url: str | None = None
    if args.api_url is not None:
        api_url = args.api_url.strip().rstrip("/")
        if not api_url.startswith(("http://", "https://")):
            print("Error: --api-url must start with http:// or https://", file=sys.stderr)
            return 1

    initial_list = _resolve_initial_list(args, config)
    if isinstance(initial_list, int):
        return initial_list

    store = WatchlistStore(build_storage_fn(args.ephemeral, config))
    store.load()
    try:
        for error in store.load_errors:
            print(f"Warning: unreadable watchlist data ({error})", file=sys.stderr)

        if args.import_watchlist is not None:
            return _import_watchlist_from(store, args.import_watchlist, merge=not args.replace)
        if args.export_watchlist is not None:
            return _export_watchlist_to(store, args.export_watchlist)
        if args.show_watchlist:
            _print_watchlist(store)
            return 0

        if not validate_interactive_tty_fn():
            print(
                "Error: movie-browser requires an interactive TTY for the full UI.",
                file=sys.stderr,
            )
            print("Next steps:", file=sys.stderr)
            print("  - Run movie-browser directly in a terminal session", file=sys.stderr)
            print("  - Use --show-watchlist for non-interactive output", file=sys.stderr)
            print("  - Use --help for command documentation", file=sys.stderr)
            return 2

        if app_factory is None:
            from movie_browser.app import MovieBrowser as _MovieBrowser

            app_factory = _MovieBrowser

        app = app_factory(
            store,
            config=config,
            api_base_url=api_url,
            initial_list=initial_list,
            ascii_icons=args.ascii,
        )
        app.run()
        return 0
    finally:
        store.close()


__all__ = [
    "_build_storage",
    "_configure_color_mode",
    "_configure_logging",
    "_resolve_initial_list",
    "_validate_interactive_tty",
    "main",
]
