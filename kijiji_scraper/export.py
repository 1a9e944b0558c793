"""
Export utilities: spreadsheet/CSV of all listings plus their snapshot files.
"""
import asyncio
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Tuple

import pandas as pd

from .barrier import CompletionBarrier
from .database import RecordStore
from .models import Listing
from .sources import FileDownloader, LogNotifier
from .utils import locale_datetime

logger = logging.getLogger(__name__)


# (header, Listing attribute) in export order
EXPORT_COLUMNS: List[Tuple[str, str]] = [
    ("Listing ID", "id"),
    ("Title", "title"),
    ("Year", "year"),
    ("Make", "make"),
    ("Model", "model"),
    ("Price", "price"),
    ("Location", "location"),
    ("Mileage", "mileage"),
    ("Transmission", "transmission"),
    ("Body Type", "body_type"),
    ("Colour", "colour"),
    ("Drivetrain", "drivetrain"),
    ("Seller Name", "seller_name"),
    ("Listing Date", "date_posted"),
    ("Listing URL", "url"),
    ("Scraped Date", "date_saved"),
]
EXPORT_HEADERS = [h for h, _ in EXPORT_COLUMNS]
COLUMN_WIDTHS = [20, 35, 8, 12, 15, 12, 20, 15, 12, 12, 10, 10, 20, 15, 40, 20]

SHEET_NAME = "Kijiji Vehicle Listings"
DEFAULT_FILE_PREFIX = "kijiji_vehicles"
FORMATS = ("xlsx", "csv")


@dataclass
class ExportResult:
    data_path: str
    snapshot_dir: str
    listings: int
    snapshots_expected: int
    snapshots_written: int
    snapshots_failed: int


def listing_row(listing: Listing) -> List[str]:
    """One export row. Empty values become ''; the N/A sentinel is kept as is."""
    row = []
    for _, attr in EXPORT_COLUMNS:
        value = getattr(listing, attr, "") or ""
        if attr == "date_saved":
            value = locale_datetime(value)
        row.append(str(value))
    return row


def build_frame(listings: List[Listing]) -> pd.DataFrame:
    rows = [listing_row(x) for x in listings]
    return pd.DataFrame(rows, columns=EXPORT_HEADERS, dtype=str)


def listings_csv(listings: List[Listing]) -> str:
    """CSV text: minimal quoting, inner quotes doubled, CRLF line endings."""
    return build_frame(listings).to_csv(index=False, lineterminator="\r\n")


def write_csv(listings: List[Listing], out_path: str) -> str:
    build_frame(listings).to_csv(out_path, index=False, lineterminator="\r\n", encoding="utf-8")
    return out_path


def write_xlsx(listings: List[Listing], out_path: str) -> str:
    from openpyxl.utils import get_column_letter

    df = build_frame(listings)
    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=SHEET_NAME)
        ws = writer.sheets[SHEET_NAME]
        for i, width in enumerate(COLUMN_WIDTHS, 1):
            ws.column_dimensions[get_column_letter(i)].width = width
    return out_path


def write_tabular(listings: List[Listing], base_path: str, fmt: str = "xlsx") -> str:
    """
    Write listings to `base_path` + extension and return the path written.

    Spreadsheet output falls back to CSV when the xlsx writer is missing or fails.
    """
    if fmt not in FORMATS:
        raise ValueError(f"Unsupported export format: {fmt}")
    os.makedirs(os.path.dirname(base_path) or ".", exist_ok=True)

    if fmt == "xlsx":
        xlsx_path = base_path + ".xlsx"
        try:
            return write_xlsx(listings, xlsx_path)
        except Exception as e:
            # openpyxl rejects some cell values with its own exception types
            logger.warning(f"Excel export failed ({type(e).__name__}: {e}); falling back to CSV")
            if os.path.exists(xlsx_path):
                os.remove(xlsx_path)
    return write_csv(listings, base_path + ".csv")


def export_paths(root: str, now: datetime, prefix: str = DEFAULT_FILE_PREFIX) -> Tuple[str, str]:
    """
    Return (data file path without extension, snapshot directory).

    <root>/data/<YYYY-MM-DD>/<prefix>_<YYYY-MM-DDTHH-MM-SS> and
    <root>/screenshots/<YYYY-MM-DD>, dates in UTC.
    """
    now = now.astimezone(timezone.utc)
    today = now.strftime("%Y-%m-%d")
    stamp = now.strftime("%Y-%m-%dT%H-%M-%S")
    data_base = os.path.join(root, "data", today, f"{prefix}_{stamp}")
    return data_base, snapshot_dir_for(root, now)


def snapshot_dir_for(root: str, now: datetime) -> str:
    return os.path.join(root, "screenshots", now.astimezone(timezone.utc).strftime("%Y-%m-%d"))


async def export_snapshots(
    listings: List[Listing],
    store: RecordStore,
    snapshot_dir: str,
    downloader=None,
    on_complete=None,
) -> CompletionBarrier:
    """
    Write <snapshot_dir>/<id>.png for every listing that has a snapshot.

    The number of writes is counted before any is issued; all writes run
    concurrently and each one, failed or not, arrives at the barrier. Returns
    once the barrier has fired.
    """
    downloader = downloader or FileDownloader()
    pending = []
    for listing in listings:
        blob = store.get_snapshot(listing.id)
        if blob:
            pending.append((listing.id, blob))

    barrier = CompletionBarrier(len(pending), on_complete)

    async def write_one(listing_id: str, blob: bytes):
        path = os.path.join(snapshot_dir, f"{listing_id}.png")
        try:
            await downloader.download(blob, path)
        except Exception as e:
            logger.error(f"Error exporting screenshot {path}: {e}")
            barrier.arrive(ok=False)
        else:
            logger.debug(f"Screenshot saved to {path}")
            barrier.arrive(ok=True)

    tasks = [asyncio.create_task(write_one(i, b)) for i, b in pending]
    await barrier.wait()
    await asyncio.gather(*tasks)
    return barrier


async def export_all(
    store: RecordStore,
    root: str,
    fmt: str = "xlsx",
    downloader=None,
    notifier=None,
    prefix: str = DEFAULT_FILE_PREFIX,
    now: Optional[datetime] = None,
) -> Optional[ExportResult]:
    """
    Export every stored listing to one tabular file and its snapshots.

    Returns None when the store is empty. Snapshot write failures are
    logged and only lower the written count.
    """
    notifier = notifier or LogNotifier()
    listings = store.get_all()
    if not listings:
        notifier.notify("Export", "No listings to export.")
        return None

    now = now or datetime.now(timezone.utc)
    data_base, snapshot_dir = export_paths(root, now, prefix)
    data_path = write_tabular(listings, data_base, fmt)
    logger.info(f">>> Saved {len(listings)} rows to {data_path}")
    notifier.notify("Export", f"Exported {len(listings)} listings to {data_path}")

    def on_complete(barrier: CompletionBarrier):
        if barrier.expected == 0:
            notifier.notify("Export", "Export complete! Data file saved (no screenshots).")
        else:
            notifier.notify(
                "Export",
                f"Export complete! Saved {len(listings)} listings and {barrier.succeeded} "
                f"screenshots to {snapshot_dir} folder.",
            )

    barrier = await export_snapshots(listings, store, snapshot_dir, downloader, on_complete)
    return ExportResult(
        data_path=data_path,
        snapshot_dir=snapshot_dir,
        listings=len(listings),
        snapshots_expected=barrier.expected,
        snapshots_written=barrier.succeeded,
        snapshots_failed=barrier.failed,
    )
