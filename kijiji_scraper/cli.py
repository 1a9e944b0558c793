"""
Command line entry point: capture listings, inspect the store, export.
"""
import argparse
import asyncio
import logging
import sys

from .config import config
from .core import capture_listing
from .database import RecordStore
from .errors import StorageError
from .export import FORMATS, export_all
from .sources import HtmlFileSource, LogNotifier, PlaywrightSource
from .utils import init_logger, locale_datetime

logger = logging.getLogger("kijiji_scraper")


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Kijiji vehicle listing capture with SQLite store and Excel/CSV export")
    ap.add_argument("--db", type=str, default=config.DB_PATH, help="Path to SQLite DB")

    # Logging
    lvl_choices = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    ap.add_argument("--log-level", choices=lvl_choices, default=None,
                    help="Global log level for both console and file (overrides --log-console/--log-file).")
    ap.add_argument("--log-console", choices=lvl_choices, default=config.LOG_CONSOLE,
                    help="Console log level (default from env LOG_CONSOLE or INFO).")
    ap.add_argument("--log-file", choices=lvl_choices, default=config.LOG_FILE,
                    help="File log level (default from env LOG_FILE or DEBUG).")
    ap.add_argument("--log-file-path", default=config.LOG_FILE_PATH,
                    help="Path to log file (default from env LOG_FILE_PATH or kijiji_scraper.log).")
    ap.add_argument("--no-file-log", action="store_true",
                    help="Disable file logging (only console output).")

    sub = ap.add_subparsers(dest="command", required=True)

    cap = sub.add_parser("capture", help="Capture one vehicle listing")
    cap.add_argument("--url", required=True, help="Listing URL")
    cap.add_argument("--html", default=None, help="Read the page from a saved HTML file instead of a browser")
    cap.add_argument("--image", default=None, help="PNG snapshot to store with a saved HTML page")
    cap.add_argument("--headless", action="store_true", default=config.HEADLESS, help="Run browser without UI")
    cap.add_argument("--storage-state", default=config.STORAGE_STATE, help="Path to storage_state.json")
    cap.add_argument("--mirror", action="store_true",
                     help="Also write the snapshot under the export root at capture time")
    cap.add_argument("--export-root", default=config.EXPORT_ROOT, help="Root folder for exports")

    sub.add_parser("list", help="Show saved listings")
    sub.add_parser("count", help="Print the number of saved listings")

    exp = sub.add_parser("export", help="Export all listings and snapshots")
    exp.add_argument("--format", choices=FORMATS, default=config.EXPORT_FORMAT, help="Export file format")
    exp.add_argument("--export-root", default=config.EXPORT_ROOT, help="Root folder for exports")
    exp.add_argument("--prefix", default=config.FILE_PREFIX, help="Data file name prefix")

    clr = sub.add_parser("clear", help="Delete all saved listings and snapshots")
    clr.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    return ap.parse_args(argv)


async def run_capture(args, store: RecordStore, notifier: LogNotifier):
    if args.html:
        source = HtmlFileSource(args.html, args.url, args.image)
        return await capture_listing(source, store, notifier=notifier,
                                     mirror_root=args.export_root if args.mirror else None)
    async with PlaywrightSource(args.url, headless=args.headless,
                                storage_state_path=args.storage_state) as source:
        return await capture_listing(source, store, notifier=notifier,
                                     mirror_root=args.export_root if args.mirror else None)


def print_listings(store: RecordStore):
    listings = store.get_all()
    if not listings:
        print("No listings saved yet.")
        return
    print(f"Found {len(listings)} saved listings:\n")
    for i, x in enumerate(listings, 1):
        print(f"{i}. {x.title or 'Untitled'}")
        print(f"   Price: {x.price}")
        print(f"   Location: {x.location}")
        print(f"   Listing ID: {x.id}")
        print(f"   Saved: {locale_datetime(x.date_saved)}\n")


def main(argv=None) -> int:
    config.validate()
    args = parse_args(argv)
    eff_console = args.log_level or args.log_console
    eff_file = args.log_level or args.log_file
    init_logger(
        console_level=eff_console,
        file_level=eff_file,
        log_file=None if args.no_file_log else args.log_file_path
    )
    logger.debug(
        f"Logger initialized: console={eff_console}, "
        f"file={'DISABLED' if args.no_file_log else eff_file}, "
        f"path={'N/A' if args.no_file_log else args.log_file_path}"
    )

    notifier = LogNotifier(logger)
    store = RecordStore(args.db, on_count_changed=lambda n: logger.info(f">>> Saved listings: {n}"))

    try:
        store.init()
        if args.command == "capture":
            asyncio.run(run_capture(args, store, notifier))
        elif args.command == "list":
            print_listings(store)
        elif args.command == "count":
            print(store.count())
        elif args.command == "export":
            asyncio.run(export_all(store, args.export_root, fmt=args.format,
                                   notifier=notifier, prefix=args.prefix))
        elif args.command == "clear":
            if not args.yes:
                answer = input("Are you sure you want to delete all saved listings? [y/N] ")
                if answer.strip().lower() not in ("y", "yes"):
                    return 0
            store.clear()
            notifier.notify("Success", "All listings have been deleted.")
    except StorageError as e:
        logger.error(f"Storage error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
