"""
Record store access for the API.
"""
import logging
from typing import Any, Dict, List, Optional

from kijiji_scraper.database import RecordStore
from kijiji_scraper.models import Listing

from .config import config

logger = logging.getLogger(__name__)


def get_store() -> RecordStore:
    """Store handle for the configured database; connections are opened per call."""
    return RecordStore(config.DB_PATH)


def listing_to_dict(listing: Listing, has_snapshot: bool) -> Dict[str, Any]:
    data = listing.to_row()
    data["has_snapshot"] = has_snapshot
    return data


def get_listings(q: Optional[str] = None, limit: int = 50, offset: int = 0) -> Dict[str, Any]:
    """Listings in insertion order, optionally filtered by a title/make/model substring."""
    store = get_store()
    items = store.get_all()
    if q:
        term = q.lower()
        items = [x for x in items
                 if term in x.title.lower() or term in x.make.lower() or term in x.model.lower()]
    with_snapshot = set(store.snapshot_ids())
    page = items[offset:offset + limit]
    return {
        "total": len(items),
        "items": [listing_to_dict(x, x.id in with_snapshot) for x in page],
    }


def get_listing_by_id(listing_id: str) -> Optional[Dict[str, Any]]:
    store = get_store()
    listing = store.get(listing_id)
    if listing is None:
        return None
    return listing_to_dict(listing, listing_id in set(store.snapshot_ids()))


def get_snapshot(listing_id: str) -> Optional[bytes]:
    return get_store().get_snapshot(listing_id)


def get_all_listings() -> List[Listing]:
    return get_store().get_all()


def get_statistics() -> Dict[str, Any]:
    """Saved-listing count (the badge number) and snapshot coverage."""
    store = get_store()
    return {
        "total_listings": store.count(),
        "with_snapshots": len(store.snapshot_ids()),
    }
