#!/usr/bin/env python3
"""
Photo Drive Auth - Manage the saved Google Drive sign-in.
"""

import argparse
import sys

from photodrive.app import build_session, load_app_config
from photodrive.errors import PhotoDriveError, ReauthRequired
from photodrive.paths import get_token_path
from photodrive.ui import Colors, colors_enabled, paint, print_error


def show_status(session, color: bool) -> int:
    try:
        session.get_access_token(interactive=False)
    except ReauthRequired as e:
        print(paint(f"Not signed in ({e})", Colors.YELLOW, color))
        return 1

    account = session.get_current_account() or "unknown account"
    print(paint(f"Signed in as {account}", Colors.GREEN, color))
    print(paint(f"Token: {get_token_path()}", Colors.MUTED, color))
    return 0


def run(args) -> int:
    config = load_app_config(verbose=args.verbose)
    color = colors_enabled()
    session = build_session(config)

    if args.logout:
        session.logout()
        print("Signed out. The saved token was removed.")
        return 0

    if args.login:
        session.logout()
        session.authenticate()
        account = session.get_current_account()
        print(paint(f"Signed in{f' as {account}' if account else ''}", Colors.GREEN, color))
        return 0

    return show_status(session, color)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Manage the Google Drive sign-in used by the upload and cleanup tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python drive_auth.py            # Show sign-in status (same as --status)
  python drive_auth.py --login    # Sign in again in the browser
  python drive_auth.py --logout   # Remove the saved token
"""
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--login", action="store_true", help="Run the browser sign-in")
    group.add_argument("--logout", action="store_true", help="Remove the saved token")
    group.add_argument("--status", action="store_true", help="Show the signed-in account")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")
    args = parser.parse_args()

    try:
        return run(args)
    except PhotoDriveError as e:
        print_error(str(e))
        return 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nCancelled by user.")
        sys.exit(130)
