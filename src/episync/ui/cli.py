from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, datetime
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from episync.app import (
    mark_unwatched,
    mark_watched,
    refresh_episode,
    refresh_show_seasons,
    register_show,
    sync_show_watches,
)
from episync.config import configure_logging
from episync.domain.model import ActionDate, RefreshType

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise TV seasons and watch history")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    add_show = subparsers.add_parser("add-show", help="Register a show by its provider ids")
    add_show.add_argument("--trakt-id", type=int, required=True, help="Trakt show id")
    add_show.add_argument("--tmdb-id", type=int, help="TMDb show id")
    add_show.add_argument("--title", type=str, help="Display title")

    seasons = subparsers.add_parser(
        "refresh-seasons",
        help="Refresh a show's seasons and episodes from Trakt",
    )
    seasons.add_argument("show_id", type=int, help="Local show id")
    seasons.add_argument(
        "--force",
        action="store_true",
        help="Fetch even if the last refresh is still fresh",
    )

    episode = subparsers.add_parser(
        "refresh-episode",
        help="Refresh one episode from Trakt and TMDb",
    )
    episode.add_argument("episode_id", type=int, help="Local episode id")

    watches = subparsers.add_parser(
        "sync-watches",
        help="Push pending watch changes and pull a show's watch history",
    )
    watches.add_argument("show_id", type=int, help="Local show id")
    watches.add_argument(
        "--full",
        action="store_true",
        help="Replace the local history instead of fetching only newer plays",
    )
    watches.add_argument("--force", action="store_true", help="Ignore the refresh expiry")
    watches.add_argument(
        "--last-updated",
        type=str,
        help="ISO-8601 timestamp of the last remote history change (enables delta fetches)",
    )

    watched = subparsers.add_parser("mark-watched", help="Mark an episode or season watched")
    watched_target = watched.add_mutually_exclusive_group(required=True)
    watched_target.add_argument("--episode", type=int, dest="episode_id", help="Episode id")
    watched_target.add_argument("--season", type=int, dest="season_id", help="Season id")
    watched.add_argument(
        "--at",
        type=str,
        help="ISO-8601 timestamp of the watch (episode only, defaults to now)",
    )
    watched.add_argument(
        "--include-unaired",
        action="store_true",
        help="Also mark episodes that have not aired yet (season only)",
    )
    watched.add_argument(
        "--air-date",
        action="store_true",
        help="Use each episode's air date instead of now (season only)",
    )

    unwatched = subparsers.add_parser(
        "mark-unwatched",
        help="Remove watches of an episode, a season or a single watch",
    )
    unwatched_target = unwatched.add_mutually_exclusive_group(required=True)
    unwatched_target.add_argument("--episode", type=int, dest="episode_id", help="Episode id")
    unwatched_target.add_argument("--season", type=int, dest="season_id", help="Season id")
    unwatched_target.add_argument("--watch", type=int, dest="watch_id", help="Watch entry id")

    return parser.parse_args(list(argv))


def _parse_iso_datetime(value: str) -> datetime:
    try:
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        dt = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO timestamp: {value}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _dispatch(args: argparse.Namespace, *, timestamp: datetime | None) -> None:
    if args.command == "add-show":
        show = register_show(trakt_id=args.trakt_id, tmdb_id=args.tmdb_id, title=args.title)
        log.info("Registered show %s", show.id)
    elif args.command == "refresh-seasons":
        refresh_show_seasons(args.show_id, force=args.force)
    elif args.command == "refresh-episode":
        refresh_episode(args.episode_id)
    elif args.command == "sync-watches":
        sync_show_watches(
            args.show_id,
            refresh_type=RefreshType.FULL if args.full else RefreshType.QUICK,
            force=args.force,
            last_updated=timestamp,
        )
    elif args.command == "mark-watched":
        mark_watched(
            episode_id=args.episode_id,
            season_id=args.season_id,
            watched_at=timestamp,
            only_aired=not args.include_unaired,
            date=ActionDate.AIR_DATE if args.air_date else ActionDate.NOW,
        )
    elif args.command == "mark-unwatched":
        mark_unwatched(
            episode_id=args.episode_id,
            season_id=args.season_id,
            watch_id=args.watch_id,
        )
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        raw_timestamp = getattr(parsed_args, "last_updated", None) or getattr(
            parsed_args, "at", None
        )
        timestamp = _parse_iso_datetime(raw_timestamp) if raw_timestamp else None
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        _dispatch(parsed_args, timestamp=timestamp)
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
