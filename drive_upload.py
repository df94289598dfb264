#!/usr/bin/env python3
"""
Photo Drive Upload - Share an event's photos with models via Google Drive.

Each sub-directory of the event directory holds one model's photos and
becomes one shared folder. With --archives, each zip in the event
directory is uploaded instead and shared as a direct-download link.
"""

import argparse
import sys
import time
from pathlib import Path

from photodrive.app import build_client, build_session, load_app_config, resolve_folder_id, sign_in
from photodrive.core.formatting import format_duration, plural
from photodrive.core.pacing import Pacer
from photodrive.drive.store import hint_store_from_config
from photodrive.errors import ConfigError, PhotoDriveError
from photodrive.provision import (
    DistributionUploader,
    ResourceProvisioner,
    collect_archive_uploads,
    collect_model_uploads,
    delete_local_archives,
    event_folder_name_for_dir,
)
from photodrive.ui import Colors, colors_enabled, format_upload_report, paint, print_error


def run(args) -> int:
    event_dir = Path(args.event_dir)
    if not event_dir.is_dir():
        raise ConfigError(f"Event directory not found: {event_dir}")

    config = load_app_config(verbose=args.verbose)
    color = colors_enabled()

    if args.archives:
        archives = collect_archive_uploads(event_dir)
        if not archives:
            raise ConfigError(f"No .zip archives found in {event_dir}")
    else:
        models = collect_model_uploads(event_dir)
        if not models:
            raise ConfigError(f"No model folders with photos found in {event_dir}")

    print(paint("Photo Drive Upload", Colors.BOLD, color))
    print()
    print("Checking Google Drive sign-in...")

    session = build_session(config)
    sign_in(session)
    account = session.get_current_account()
    if account:
        print(f"  Account: {account}")
    print()

    client = build_client(session)
    provisioner = ResourceProvisioner(
        client,
        root_folder_name=config.root_folder_name,
        hint_store=hint_store_from_config(config),
    )
    remembered = resolve_folder_id(args.root_folder_id) if args.root_folder_id else config.root_folder_id
    root = provisioner.ensure_root_folder(remembered)
    print(f"{config.root_folder_name} (ID: {root.id})")

    uploader = DistributionUploader(
        provisioner,
        pacer=Pacer(config.upload_delay_min, config.upload_delay_max),
        model_folder_suffix=config.model_folder_suffix,
    )
    folder_name = event_folder_name_for_dir(event_dir)
    start = time.time()

    if args.archives:
        print(f"Uploading {plural(len(archives), 'archive')} to {folder_name}...")
        report = uploader.upload_archives(root.id, folder_name, archives)
    else:
        print(f"Uploading {plural(len(models), 'model folder')} to {folder_name}...")
        report = uploader.upload_model_folders(root.id, folder_name, models)

    print()
    for line in format_upload_report(report, color):
        print(line)
    print()

    if args.archives and args.delete_after_upload:
        removed = delete_local_archives(a.archive_path for a in archives)
        print(f"Removed {plural(removed, 'local archive')}")

    print(paint(
        f"Done in {format_duration(time.time() - start)} ({client.api_calls} API calls)",
        Colors.MUTED, color,
    ))
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Upload event photos to Google Drive and print share links",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python drive_upload.py ~/events/2025-01-12_Studio
      One shared folder per model sub-directory
  python drive_upload.py ~/events/2025-01-12_Studio --archives
      Upload each model's .zip and share direct-download links
  python drive_upload.py ~/events/Studio --archives --delete-after-upload
      Remove the local zips once everything is shared

Directories not named YYYY-MM-DD_name get today's date as a prefix.
First run opens a browser for Google sign-in; the token is saved for later runs.
"""
    )
    parser.add_argument("event_dir", metavar="EVENT_DIR",
                        help="Local event directory")
    parser.add_argument("--archives", action="store_true",
                        help="Upload *.zip archives instead of photo folders")
    parser.add_argument("--delete-after-upload", action="store_true",
                        help="Delete local archives after a successful upload (with --archives)")
    parser.add_argument("--root-folder-id", metavar="ID",
                        help="Distribution root folder ID or URL to try first")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Debug logging on stderr")
    args = parser.parse_args()

    if args.delete_after_upload and not args.archives:
        parser.error("--delete-after-upload requires --archives")

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
