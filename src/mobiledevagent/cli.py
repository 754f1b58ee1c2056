"""Command line entry point for mobile-dev-agent.

Every command prints a single JSON document on stdout; logs go to stderr.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from mobiledevagent import __version__
from mobiledevagent.config import DEFAULT_SESSION, Settings, load_settings, validate_session_name
from mobiledevagent.domains.retention import (
    RetentionExecutor,
    RetentionPlanner,
    RetentionPolicy,
    RunScanner,
)
from mobiledevagent.domains.selector import CoordsSelector, SelectorResolver, parse_selector_token
from mobiledevagent.domains.shared import MobileDevAgentError, Platform, SnapshotNotFoundError
from mobiledevagent.domains.shared.errors import USAGE
from mobiledevagent.domains.snapshot import FileSnapshotStore, SnapshotBuilder, parse_dump

logger = logging.getLogger(__name__)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mobile-dev-agent",
        description="Canonical UI snapshots, selector resolution and run retention.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log debug output to stderr.",
    )
    parser.add_argument(
        "--state-dir",
        dest="state_dir",
        help="Override the state directory (sessions and snapshots).",
    )
    parser.add_argument(
        "--cache-dir",
        dest="cache_dir",
        help="Override the cache directory (run directories).",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    ui = commands.add_parser("ui", help="Snapshot and selector commands.")
    ui_commands = ui.add_subparsers(dest="ui_command", required=True)

    parse = ui_commands.add_parser("parse", help="Parse a raw UI dump into a snapshot.")
    parse.add_argument(
        "--platform",
        required=True,
        choices=[p.value for p in Platform],
        help="Platform the dump comes from.",
    )
    parse.add_argument(
        "--input",
        dest="input_path",
        required=True,
        help="Path of the raw dump ('-' reads stdin).",
    )
    parse.add_argument(
        "--interactive-only",
        "-i",
        dest="interactive_only",
        action="store_true",
        help="Keep only interactive elements with a visible rectangle.",
    )
    parse.add_argument("--device-id", dest="device_id", help="Device identifier to record.")
    parse.add_argument("--app-id", dest="app_id", help="App identifier to record.")
    parse.add_argument(
        "--session",
        default=DEFAULT_SESSION,
        help=f"Session to store the snapshot in (default '{DEFAULT_SESSION}').",
    )
    parse.add_argument(
        "--no-save",
        dest="save",
        action="store_false",
        help="Do not store the snapshot as the session's latest.",
    )
    parse.add_argument(
        "--tree",
        action="store_true",
        help="Print only the rendered tree.",
    )

    resolve = ui_commands.add_parser("resolve", help="Resolve a selector to a tap target.")
    resolve.add_argument("selector", help='Selector: @e3, coords:x,y, text:"...", id:"..."')
    resolve.add_argument(
        "--session",
        default=DEFAULT_SESSION,
        help=f"Session whose latest snapshot is used (default '{DEFAULT_SESSION}').",
    )

    gc = commands.add_parser("gc", help="Delete old run directories.")
    gc.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Compute and print the plan without deleting anything.",
    )
    gc.add_argument("--keep-last", dest="keep_last", type=int, help="Newest runs always kept.")
    gc.add_argument(
        "--keep-failure-days",
        dest="keep_failure_days",
        type=float,
        help="Keep failed or unknown runs younger than this many days.",
    )
    gc.add_argument("--max-bytes", dest="max_bytes", type=int, help="Byte budget for all runs.")
    return parser


def _emit(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False))
    sys.stdout.write("\n")


def _read_input(input_path: str) -> str:
    try:
        if input_path == "-":
            return sys.stdin.read()
        return Path(input_path).expanduser().read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise MobileDevAgentError(
            f"Cannot read input file: {input_path}", code=USAGE, details=[str(exc)]
        ) from exc


def cmd_ui_parse(args: argparse.Namespace, settings: Settings) -> None:
    session = validate_session_name(args.session, settings.sessions_dir)
    platform = Platform.from_string(args.platform)
    text = _read_input(args.input_path)

    raw: Any = text
    if platform is Platform.IOS:
        try:
            raw = json.loads(text) if text.strip() else None
        except json.JSONDecodeError as exc:
            raise MobileDevAgentError(
                "iOS accessibility dump is not valid JSON", code=USAGE, details=[str(exc)]
            ) from exc

    elements = parse_dump(platform, raw, interactive_only=args.interactive_only)
    snapshot = SnapshotBuilder().build(
        elements, platform, device_id=args.device_id, app_id=args.app_id
    )

    if args.save:
        store = FileSnapshotStore(settings.sessions_dir)
        store.write_latest(session, snapshot)

    if args.tree:
        sys.stdout.write(snapshot.tree + "\n")
    else:
        _emit(snapshot.to_dict())


def cmd_ui_resolve(args: argparse.Namespace, settings: Settings) -> None:
    session = validate_session_name(args.session, settings.sessions_dir)
    selector = parse_selector_token(args.selector)

    snapshot = None
    if not isinstance(selector, CoordsSelector):
        snapshot = FileSnapshotStore(settings.sessions_dir).read_latest(session)
        if snapshot is None:
            raise SnapshotNotFoundError(session)

    resolver = SelectorResolver(stale_after_seconds=settings.snapshot_stale_seconds)
    target = resolver.resolve(snapshot, args.selector)
    _emit(
        {
            "session": session,
            "snapshot_id": str(snapshot.snapshot_id) if snapshot else None,
            "stale": resolver.is_stale(snapshot) if snapshot else False,
            "target": target.to_dict(),
        }
    )


def cmd_gc(args: argparse.Namespace, settings: Settings) -> None:
    settings = settings.with_overrides(
        gc_keep_last=args.keep_last,
        gc_keep_failure_days=args.keep_failure_days,
        gc_max_bytes=args.max_bytes,
    )
    try:
        policy = RetentionPolicy.from_settings(settings)
    except ValueError as exc:
        raise MobileDevAgentError(str(exc), code=USAGE) from exc

    runs = RunScanner().list_runs(settings.cache_dir)
    plan = RetentionPlanner().plan(runs, policy)
    report = RetentionExecutor().execute(plan, dry_run=args.dry_run)
    _emit({"dry_run": args.dry_run, "plan": plan.to_dict(), "report": report.to_dict()})


def main(argv: Optional[List[str]] = None) -> int:
    """Run the mobile-dev-agent CLI and return the process exit code."""

    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = load_settings(state_dir=args.state_dir, cache_dir=args.cache_dir)

    try:
        if args.command == "ui" and args.ui_command == "parse":
            cmd_ui_parse(args, settings)
        elif args.command == "ui" and args.ui_command == "resolve":
            cmd_ui_resolve(args, settings)
        elif args.command == "gc":
            cmd_gc(args, settings)
    except MobileDevAgentError as exc:
        logger.debug("Command failed: %r", exc)
        _emit({"ok": False, "error": exc.to_dict()})
        return exc.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main())
