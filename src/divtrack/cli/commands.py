"""CLI commands for inspecting sessions and running the API server."""

import argparse
import json
import sqlite3
import sys
from pathlib import Path
from typing import Optional

from divtrack.config.logging import get_logger, setup_logging
from divtrack.config.paths import get_data_dir
from divtrack.config.preferences import load_preferences, update_preference
from divtrack.config.settings import DEFAULT_PAGE_SIZE, Settings
from divtrack.core.export import build_session_csv
from divtrack.core.models import GAMES, SessionDetail, SessionsPage, SessionSummaryView
from divtrack.db.connection import Database
from divtrack.db.repository import Repository
from divtrack.db.seed import load_seed
from divtrack.services.sessions import SessionsService


def _open_repository(settings: Settings) -> tuple[Database, Repository]:
    db = Database(settings.db_path)
    db.connect()
    return db, Repository(db)


def _settings_from_args(args: argparse.Namespace) -> Optional[Settings]:
    """Build settings from parsed arguments, printing errors if invalid."""
    settings = Settings.from_args(
        db_path=args.db,
        portable=args.portable,
        seed_file=getattr(args, "seed", None),
        game=getattr(args, "game", None),
        page_size=getattr(args, "page_size", None),
        page=getattr(args, "page", None),
    )
    errors = settings.validate()
    if errors:
        for error in errors:
            print(f"Error: {error}")
        return None
    return settings


def _format_duration(minutes: Optional[int]) -> str:
    if minutes is None:
        return "active"
    hours, mins = divmod(minutes, 60)
    if hours:
        return f"{hours}h {mins:02d}m"
    return f"{mins}m"


def _print_session_row(view: SessionSummaryView) -> None:
    status = "*" if view.is_active else " "
    print(
        f" {status}{view.session_id[:8]:<8} {view.started_at:%Y-%m-%d %H:%M} "
        f"{view.league[:16]:<16} {_format_duration(view.duration_minutes):>8} "
        f"{view.total_decks_opened:>6} decks  "
        f"ex {view.total_exchange_value:>10.1f}c ({view.total_exchange_net_profit:+.1f})  "
        f"stash {view.total_stash_value:>10.1f}c ({view.total_stash_net_profit:+.1f})"
    )


def _print_page(title: str, page: SessionsPage) -> None:
    if not page.sessions:
        print("No sessions found")
        return

    print(f"{title} (page {page.page}/{page.total_pages}, {page.total} total):")
    print("-" * 100)
    for view in page.sessions:
        _print_session_row(view)
    print("-" * 100)


def _print_detail(detail: SessionDetail) -> None:
    ended = f"{detail.ended_at:%Y-%m-%d %H:%M}" if detail.ended_at else "active"
    print(f"League: {detail.league}")
    print(f"Started: {detail.started_at:%Y-%m-%d %H:%M}  Ended: {ended}")
    print(f"Decks opened: {detail.total_count}")
    print("-" * 72)

    for card in sorted(detail.cards, key=lambda c: c.count, reverse=True):
        line = f"  {card.count:>5}x {card.name[:36]:<36}"
        if card.exchange_price is not None and card.stash_price is not None:
            ex_flag = " (hidden)" if card.exchange_price.hide_price else ""
            st_flag = " (hidden)" if card.stash_price.hide_price else ""
            line += (
                f" ex {card.exchange_price.total_value:>9.1f}c{ex_flag}"
                f" stash {card.stash_price.total_value:>9.1f}c{st_flag}"
            )
        print(line)

    print("-" * 72)
    if detail.totals is None:
        print("No price snapshot for this session")
        return

    totals = detail.totals
    print(
        f"Deck cost: {totals.stacked_deck_chaos_cost:.2f}c x {detail.total_count} "
        f"= {totals.total_deck_cost:.1f}c"
    )
    print(
        f"Exchange: {totals.exchange.total_value:.1f}c "
        f"(net {totals.exchange.net_profit:+.1f}c, {totals.exchange.chaos_to_divine_ratio:.0f}c/div)"
    )
    print(
        f"Stash:    {totals.stash.total_value:.1f}c "
        f"(net {totals.stash.net_profit:+.1f}c, {totals.stash.chaos_to_divine_ratio:.0f}c/div)"
    )


def cmd_init(args: argparse.Namespace) -> int:
    """Initialize database and optionally import a seed file."""
    settings = _settings_from_args(args)
    if settings is None:
        return 1

    print(f"Initializing database at: {settings.db_path}")
    db, repo = _open_repository(settings)

    try:
        if settings.seed_file:
            print(f"Seeding from: {settings.seed_file}")
            try:
                counts = load_seed(repo, settings.seed_file)
            except (OSError, json.JSONDecodeError, KeyError, ValueError, sqlite3.Error) as e:
                get_logger().error(f"Seed import failed: {e}")
                print(f"Error: Seed import failed: {e}")
                return 1
            print(f"  Loaded {counts.leagues} leagues, {counts.snapshots} snapshots")
            print(f"  Loaded {counts.divination_cards} cards, {counts.card_rarities} rarities")
            print(f"  Loaded {counts.sessions} sessions ({counts.session_cards} card entries)")
        else:
            for game in GAMES:
                print(f"  {repo.count_sessions(game)} {game} sessions in database")
    finally:
        db.close()

    print("Done.")
    return 0


def cmd_show_sessions(args: argparse.Namespace) -> int:
    """List sessions with resolved totals."""
    settings = _settings_from_args(args)
    if settings is None:
        return 1

    db, repo = _open_repository(settings)
    try:
        page = SessionsService(repo).list_sessions(
            settings.game, settings.page, settings.page_size
        )
        _print_page(f"Sessions [{settings.game}]", page)
    finally:
        db.close()
    return 0


def cmd_show_session(args: argparse.Namespace) -> int:
    """Show the per-card breakdown of one session."""
    settings = _settings_from_args(args)
    if settings is None:
        return 1

    db, repo = _open_repository(settings)
    try:
        detail = SessionsService(repo).get_session_detail(args.session_id)
        if detail is None:
            print(f"Session not found: {args.session_id}")
            return 1
        _print_detail(detail)
    finally:
        db.close()
    return 0


def cmd_search(args: argparse.Namespace) -> int:
    """Find sessions that produced a card matching a name fragment."""
    settings = _settings_from_args(args)
    if settings is None:
        return 1

    db, repo = _open_repository(settings)
    try:
        page = SessionsService(repo).search_by_card(
            settings.game, args.card_name, settings.page, settings.page_size
        )
        _print_page(f"Sessions with '{args.card_name}' [{settings.game}]", page)
    finally:
        db.close()
    return 0


def cmd_export_session(args: argparse.Namespace) -> int:
    """Write the per-card breakdown of a session to a CSV file."""
    settings = _settings_from_args(args)
    if settings is None:
        return 1

    db, repo = _open_repository(settings)
    try:
        detail = SessionsService(repo).get_session_detail(args.session_id)
        if detail is None:
            print(f"Session not found: {args.session_id}")
            return 1

        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(build_session_csv(detail), encoding="utf-8")
        print(f"Exported {len(detail.cards)} cards to {output}")
    finally:
        db.close()
    return 0


def cmd_set_defaults(args: argparse.Namespace) -> int:
    """Save the game and page size the API server uses by default."""
    settings = _settings_from_args(args)
    if settings is None:
        return 1

    data_dir = get_data_dir(args.portable)
    updates = []
    if args.game is not None:
        updates.append(("selected_game", settings.game))
    if args.page_size is not None:
        updates.append(("sessions_page_size", settings.page_size))
    for key, value in updates:
        if not update_preference(key, value, data_dir):
            print(f"Error: Could not save preferences in {data_dir}")
            return 1

    prefs = load_preferences(data_dir)
    print(f"Default game: {prefs.selected_game}")
    print(f"Default page size: {prefs.sessions_page_size}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the web server."""
    from divtrack.version import __version__

    logger = setup_logging(portable=args.portable, console=True)
    logger.info(f"DivTrack v{__version__} starting...")

    # Import here to avoid loading FastAPI when not needed
    import uvicorn

    from divtrack.api.app import create_app

    settings = _settings_from_args(args)
    if settings is None:
        return 1

    logger.info(f"Database: {settings.db_path}")

    db = Database(settings.db_path)
    db.connect()
    try:
        app = create_app(db, load_preferences(get_data_dir(args.portable)))
        logger.info(f"Serving on http://{args.host}:{args.port}")
        uvicorn.run(app, host=args.host, port=args.port, log_level="warning")
    finally:
        db.close()
        logger.info("Server stopped")
    return 0


def _add_paging_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--game",
        type=str,
        choices=GAMES,
        help="Game to list sessions for (default: poe1)",
    )
    parser.add_argument(
        "--page",
        type=int,
        default=1,
        help="Page number, starting at 1 (default: 1)",
    )
    parser.add_argument(
        "--page-size",
        type=int,
        help=f"Sessions per page (default: {DEFAULT_PAGE_SIZE})",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="divtrack",
        description="Divination card farming session tracker",
    )
    parser.add_argument(
        "--db",
        type=str,
        help="Database file path",
    )
    parser.add_argument(
        "--portable",
        action="store_true",
        help="Use portable mode (data beside exe)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init command
    init_parser = subparsers.add_parser("init", help="Initialize database")
    init_parser.add_argument(
        "--seed",
        type=str,
        help="Path to JSON seed file (leagues, snapshots, cards, sessions)",
    )

    # show-sessions command
    sessions_parser = subparsers.add_parser("show-sessions", help="List sessions")
    _add_paging_arguments(sessions_parser)

    # show-session command
    session_parser = subparsers.add_parser("show-session", help="Show one session's cards")
    session_parser.add_argument("session_id", type=str, help="Session ID")

    # search command
    search_parser = subparsers.add_parser("search", help="Find sessions by card name")
    search_parser.add_argument(
        "card_name",
        type=str,
        help="Card name fragment (case-sensitive)",
    )
    _add_paging_arguments(search_parser)

    # export-session command
    export_parser = subparsers.add_parser("export-session", help="Export a session to CSV")
    export_parser.add_argument("session_id", type=str, help="Session ID")
    export_parser.add_argument("output", type=str, help="Output CSV file")

    # set-defaults command
    defaults_parser = subparsers.add_parser(
        "set-defaults", help="Save default game and page size for the server"
    )
    defaults_parser.add_argument("--game", type=str, choices=GAMES, help="Default game")
    defaults_parser.add_argument("--page-size", type=int, help="Default sessions per page")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start web server")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to run server on (default: 8000)",
    )
    serve_parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "init": cmd_init,
        "show-sessions": cmd_show_sessions,
        "show-session": cmd_show_session,
        "search": cmd_search,
        "export-session": cmd_export_session,
        "set-defaults": cmd_set_defaults,
        "serve": cmd_serve,
    }

    cmd_func = commands.get(args.command)
    if cmd_func is None:
        print(f"Unknown command: {args.command}")
        return 1

    return cmd_func(args)


if __name__ == "__main__":
    sys.exit(main())
