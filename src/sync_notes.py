"""Command line entry point for syncing Logos notes into an Obsidian vault."""
from __future__ import annotations

import argparse
import getpass
import logging
import sys
import time
from pathlib import Path
from typing import Iterable, List

from logos_notes.auth import CREDENTIAL_FILE, Credential, CredentialStore
from logos_notes.browse import filter_notes, format_note_line, resource_titles
from logos_notes.config import CONFIG_FILE, SyncConfig, load_config, parse_excluded
from logos_notes.exceptions import AuthenticationError, LogosNotesError
from logos_notes.fetchers import LogosNotesFetcher, verify_session
from logos_notes.log import LOG_FILE, configure_logging
from logos_notes.parsers import process_notes
from logos_notes.state import AUTH_WARNING_KEY, LAST_SYNC_KEY, STATE_FILE, AppState
from logos_notes.sync import run_sync

logger = logging.getLogger("logos_notes.cli")

LOGIN_INSTRUCTIONS = """\
To login, copy the "auth" cookie from the Logos web app:

1. Open https://app.logos.com in your browser and sign in
2. Open the developer tools and find Storage > Cookies > app.logos.com
3. Copy the value of the cookie named "auth"
"""


def _parse_args(argv: Iterable[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config", type=Path, help="Path to JSON configuration file", default=None)
    parser.add_argument("--credentials", type=Path, help="Path to the stored credential", default=CREDENTIAL_FILE)
    parser.add_argument("--state", type=Path, help="Path to the background sync state file", default=STATE_FILE)
    parser.add_argument("--log-file", type=Path, help="Path to the sync log file", default=LOG_FILE)
    parser.add_argument("--vault", type=Path, help="Folder the Markdown files are written to", default=None)
    parser.add_argument("--exclude", help="Comma-separated resource ids to skip", default=None)
    parser.add_argument("--readwise-token", help="Readwise access token", default=None)
    parser.add_argument("--verbose", action="store_true", help="Print debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("sync", help="Sync notes now")
    subparsers.add_parser("background", help="Sync notes unattended if auto-sync is enabled")
    login = subparsers.add_parser("login", help="Store a Logos session token")
    login.add_argument("--token", help="Value of the 'auth' cookie", default=None)
    subparsers.add_parser("logout", help="Forget the stored session token")
    browse = subparsers.add_parser("browse", help="Search your notes")
    browse.add_argument("--query", default="", help="Text to search for")
    browse.add_argument("--resource", default=None, help="Only show notes from this resource title")
    browse.add_argument("--list-resources", action="store_true", help="List resource titles and exit")
    return parser.parse_args(list(argv))


def _combine_config(args: argparse.Namespace) -> SyncConfig:
    config_path = args.config
    if config_path is None and CONFIG_FILE.exists():
        config_path = CONFIG_FILE
    try:
        file_config = load_config(config_path)
    except FileNotFoundError as exc:  # pragma: no cover - user error
        raise SystemExit(f"Configuration file not found: {config_path}") from exc
    except (OSError, ValueError) as exc:  # pragma: no cover - user error
        raise SystemExit(f"Failed to read configuration file: {exc}") from exc
    config = SyncConfig.from_mapping(file_config)

    return config.with_overrides(
        output_dir=args.vault,
        excluded_resources=parse_excluded(args.exclude) if args.exclude is not None else None,
        readwise_token=args.readwise_token,
        sync_to_readwise=True if args.readwise_token else None,
    )


def _print_progress(fetched: int, total: int) -> None:
    logger.info("Progress: %d/%d", fetched, total)
    print(f"\rFetched {fetched}/{total} notes", end="", file=sys.stderr, flush=True)


def _sync(config: SyncConfig, store: CredentialStore, log_file: Path) -> int:
    logger.info(
        "Configuration: output_dir=%s excluded=%s include_color=%s readwise=%s",
        config.output_dir,
        ",".join(config.excluded_resources),
        config.include_highlight_color,
        config.sync_to_readwise,
    )
    if not store.is_authenticated():
        print("Not logged in. Run 'logos-notes-sync login' first.")
        return 1
    if not config.output_dir:
        logger.error("No output folder configured")
        print("Please set an output folder with --vault or in the configuration file.")
        return 1

    try:
        report = run_sync(config, LogosNotesFetcher(store), on_progress=_print_progress)
    except (LogosNotesError, OSError) as exc:
        print(file=sys.stderr)
        logger.exception("Sync failed")
        print(f"Sync failed: {exc}. Check {log_file}.")
        return 1

    print(file=sys.stderr)
    print(report.summary())
    if report.readwise_errors:
        print(f"{report.readwise_errors} highlight(s) could not be sent to Readwise.")
    return 0


def _background(config: SyncConfig, store: CredentialStore, state: AppState) -> int:
    if not config.auto_sync_enabled:
        logger.info("Background sync: auto-sync disabled, skipping")
        return 0

    now_ms = int(time.time() * 1000)
    if not store.is_authenticated():
        if state.should_warn_about_auth(now_ms):
            print("Logos auth expired. Run 'logos-notes-sync login' to continue syncing.")
        logger.info("Background sync: not authenticated")
        return 0
    state.remove(AUTH_WARNING_KEY)

    try:
        report = run_sync(config, LogosNotesFetcher(store))
    except Exception:
        logger.exception("Background sync failed")
        return 0

    state.set(LAST_SYNC_KEY, int(time.time() * 1000))
    logger.info("Background sync: %s", report.summary())
    return 0


def _login(token: str | None, store: CredentialStore) -> int:
    if token is None:
        print(LOGIN_INSTRUCTIONS)
        token = getpass.getpass("Session token: ")
    token = token.strip()
    if not token:
        print("Please enter a session token.")
        return 1

    store.put(Credential(access_token=token))
    try:
        status = verify_session(token)
    except LogosNotesError as exc:
        logger.error("Login check failed: %s", exc)
        print(f"Login failed: {exc}")
        return 1

    if status == "rejected":
        store.clear()
        print("The token was rejected. Please try again with a fresh token.")
        return 1
    if status == "unknown":
        print("Token saved. Try syncing your notes to verify it works.")
        return 0
    print("Successfully logged in to Faithlife.")
    return 0


def _browse(args: argparse.Namespace, store: CredentialStore) -> int:
    try:
        notes = process_notes(LogosNotesFetcher(store).fetch_all())
    except AuthenticationError:
        print("Not logged in. Run 'logos-notes-sync login' first.")
        return 1
    except LogosNotesError as exc:
        print(f"Failed to load notes: {exc}")
        return 1

    if args.list_resources:
        for title in resource_titles(notes):
            print(title)
        return 0

    matches = filter_notes(notes, args.query, args.resource)
    if not matches:
        print("No notes found." if args.query else "No notes found. Sync your notes first.")
        return 0
    lines: List[str] = [format_note_line(note) for note in matches]
    print("\n".join(lines))
    return 0


def main(argv: Iterable[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    starts_run = args.command in ("sync", "background")
    configure_logging(args.log_file, verbose=args.verbose, truncate=starts_run)
    config = _combine_config(args)
    store = CredentialStore(args.credentials)

    if args.command == "sync":
        return _sync(config, store, args.log_file)
    if args.command == "background":
        return _background(config, store, AppState(args.state))
    if args.command == "login":
        return _login(args.token, store)
    if args.command == "logout":
        store.clear()
        print("Logged out.")
        return 0
    return _browse(args, store)


if __name__ == "__main__":
    raise SystemExit(main())
