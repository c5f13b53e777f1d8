from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from sakora.app import recent_audit_log, sync_memberships
from sakora.config import ConfigurationError, MembershipSyncConfig, configure_logging
from sakora.domain.model import MembershipMode

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile Sakora CSV extracts")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    memberships = subparsers.add_parser(
        "memberships",
        help="Sync section or course memberships from a CSV extract",
    )
    memberships.add_argument("csv_path", type=Path, help="Membership CSV file")
    memberships.add_argument(
        "--mode",
        choices=[mode.value for mode in MembershipMode],
        help="Membership type to reconcile (defaults to config)",
    )
    memberships.add_argument(
        "--skip-header",
        action="store_true",
        help="Ignore the first line of the CSV file",
    )
    memberships.add_argument(
        "--page-size",
        type=int,
        help="Ledger entries to load per removal page (defaults to config)",
    )
    memberships.add_argument(
        "--ignore-membership-removals",
        action="store_true",
        default=None,
        help="Only add or update memberships, never remove them",
    )
    memberships.add_argument(
        "--ignore-missing-sessions",
        action="store_true",
        default=None,
        help="Restrict processing and removals to containers in current sessions",
    )
    memberships.add_argument(
        "--session",
        action="append",
        dest="sessions",
        metavar="KEY",
        help="Academic session to treat as current (repeatable, defaults to the store)",
    )

    audit = subparsers.add_parser("audit-log", help="Show recent audit log entries")
    audit.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Number of entries to show (default: %(default)s)",
    )

    return parser.parse_args(list(argv))


def _build_config(args: argparse.Namespace) -> MembershipSyncConfig:
    config = MembershipSyncConfig.from_environment()
    return config.with_overrides(
        mode=args.mode,
        search_page_size=args.page_size,
        ignore_membership_removals=args.ignore_membership_removals,
        ignore_missing_sessions=args.ignore_missing_sessions,
        current_sessions=frozenset(args.sessions) if args.sessions else None,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.debug else logging.INFO)

    config: MembershipSyncConfig | None = None
    try:
        if parsed_args.command == "memberships":
            if not parsed_args.csv_path.is_file():
                raise ValueError(f"CSV file not found: {parsed_args.csv_path}")  # noqa: TRY301
            config = _build_config(parsed_args)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "memberships" and config is not None:
            result = sync_memberships(
                parsed_args.csv_path,
                config=config,
                skip_header=parsed_args.skip_header,
            )
            log.info(
                "%s sync finished: rows=%s, updates=%s, deletes=%s, errors=%s, "
                "skipped=%s, not_found=%s",
                result.mode.handler_name,
                result.rows_read,
                result.updates,
                result.deletes,
                result.errors,
                result.skipped,
                result.not_found,
            )
        elif parsed_args.command == "audit-log":
            for entry in recent_audit_log(limit=parsed_args.limit):
                log.info("%s [%s] %s", entry.created_at.isoformat(), entry.component, entry.message)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
