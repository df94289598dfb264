#!/usr/bin/env python3
"""
Photo Drive Cleanup - Delete event folders past the retention period.

Dry run by default: lists what would be deleted. --execute deletes.
Exit code 2 means some folders could not be deleted.
"""

import argparse
import sys

from photodrive.app import build_client, build_session, load_app_config, resolve_parent_id, sign_in
from photodrive.cleanup import RetentionCleaner
from photodrive.errors import PartialCleanupFailure, PhotoDriveError
from photodrive.ui import (
    Colors,
    colors_enabled,
    format_cleanup_outcome,
    format_stale_folders,
    paint,
    print_error,
)

EXIT_PARTIAL_FAILURE = 2


def run(args) -> int:
    config = load_app_config(verbose=args.verbose)
    color = colors_enabled()
    retention_days = args.days if args.days is not None else config.retention_days

    print(paint("Photo Drive Cleanup", Colors.BOLD, color))
    print()

    session = build_session(config)
    sign_in(session)
    account = session.get_current_account()
    if account:
        print(f"  Account: {account}")

    parent_id = resolve_parent_id(config, args.parent_id)
    print(f"{config.root_folder_name} (ID: {parent_id})")
    print(f"Retention: {retention_days} days")
    print()

    cleaner = RetentionCleaner(build_client(session))
    print("Looking for old event folders...")

    if not args.execute:
        stale = cleaner.run(parent_id, retention_days, dry_run=True)
        for line in format_stale_folders(stale, color):
            print(line)
        return 0

    outcome = cleaner.run(parent_id, retention_days, dry_run=False)
    for line in format_cleanup_outcome(outcome, color):
        print(line)
    outcome.raise_for_failures()
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Delete old event folders from the distribution folder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python drive_cleanup.py                # Show what would be deleted (dry run)
  python drive_cleanup.py --execute      # Actually delete
  python drive_cleanup.py --days 60      # Keep folders up to 60 days old

Exit codes: 0 success, 1 error, 2 some folders could not be deleted.
"""
    )
    parser.add_argument("--execute", action="store_true",
                        help="Delete the folders instead of listing them")
    parser.add_argument("--days", type=int, metavar="N",
                        help="Retention period in days (default: from config, 30)")
    parser.add_argument("--parent-id", metavar="ID",
                        help="Distribution folder ID or URL (default: config or remembered ID)")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Debug logging on stderr")
    args = parser.parse_args()

    if args.days is not None and args.days < 0:
        parser.error("--days must be 0 or greater")

    try:
        return run(args)
    except PartialCleanupFailure as e:
        print_error(str(e))
        return EXIT_PARTIAL_FAILURE
    except PhotoDriveError as e:
        print_error(str(e))
        return 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nCancelled by user.")
        sys.exit(130)
