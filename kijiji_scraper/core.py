"""
Capture orchestration: page -> Listing -> id -> record store.
"""
import logging
import os
from datetime import datetime, timezone
from typing import Optional, Tuple

from .database import RecordStore
from .errors import SideFileWriteFailed, SnapshotCaptureFailed, StorageError
from .export import snapshot_dir_for
from .identifiers import generate_listing_id
from .models import Listing
from .resolver import FieldResolver
from .sources import FileDownloader, LogNotifier
from .utils import now_millis

logger = logging.getLogger(__name__)


KIJIJI_HOST = "kijiji.ca"
VEHICLE_PATHS = ("/v-cars-trucks/", "/v-autos/")


def check_listing_url(url: str) -> Optional[Tuple[str, str]]:
    """Return a (title, message) rejection if the URL is not a Kijiji vehicle listing."""
    if not url or KIJIJI_HOST not in url:
        return ("Not Supported", "This is not a Kijiji page.")
    if not any(p in url for p in VEHICLE_PATHS):
        return ("Not a Vehicle Listing", "Please navigate to a vehicle listing page.")
    return None


def is_vehicle_listing_url(url: str) -> bool:
    return check_listing_url(url) is None


async def capture_listing(
    source,
    store: RecordStore,
    resolver: Optional[FieldResolver] = None,
    notifier=None,
    mirror_root: Optional[str] = None,
    now_ms: Optional[int] = None,
) -> Optional[Listing]:
    """
    Capture one listing from `source` and save it.

    Returns the saved Listing, or None when the URL is not a vehicle listing.
    A failed snapshot only drops the image; storage errors are reported and
    re-raised. With `mirror_root` the snapshot is also written to
    <mirror_root>/screenshots/<date>/<id>.png.
    """
    notifier = notifier or LogNotifier()
    resolver = resolver or FieldResolver()

    url = source.url
    rejection = check_listing_url(url)
    if rejection:
        notifier.notify(*rejection)
        return None

    now_ms = now_ms if now_ms is not None else now_millis()
    captured_at = datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc)
    listing_id = generate_listing_id(url, now_ms)

    notifier.notify("Kijiji Vehicle Scraper", "Extracting listing data...")
    doc = await source.capture_listing()
    listing = resolver.resolve(doc)
    listing.url = url
    listing.date_saved = captured_at.isoformat()
    listing.id = listing_id

    snapshot = None
    try:
        snapshot = await source.capture_image()
    except SnapshotCaptureFailed as e:
        logger.warning(f"Screenshot error, saving without image: {e}")

    try:
        store.put(listing, snapshot)
    except StorageError as e:
        notifier.notify("Error", f"Failed to save listing: {e}")
        raise

    if snapshot and mirror_root:
        path = os.path.join(snapshot_dir_for(mirror_root, captured_at), f"{listing_id}.png")
        try:
            await FileDownloader().download(snapshot, path)
            logger.info(f">>> Screenshot saved to {path}")
        except SideFileWriteFailed as e:
            logger.error(f"Error saving screenshot: {e}")

    notifier.notify("Success", f"Listing saved successfully! ID: {listing.id}")
    return listing
