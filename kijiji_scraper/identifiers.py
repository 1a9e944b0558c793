"""
Listing identifiers shared by the database row and the snapshot filename.
"""
import re
from typing import Optional

from .utils import now_millis


ID_PREFIX = "KJ"
AD_ID_TAIL = 6

_TRAILING_AD_ID = re.compile(r"/(\d+)$")


def extract_ad_id(url: str) -> str:
    """Return the numeric ad id that ends a Kijiji URL, or an empty string."""
    m = _TRAILING_AD_ID.search(url or "")
    return m.group(1) if m else ""


def generate_listing_id(url: str, now_ms: Optional[int] = None) -> str:
    """
    Build an id of the form KJ-<last 6 digits of the ad id>-<epoch millis>.

    The id is a pure function of (url, now_ms); no lookup against the store
    is made.
    """
    if now_ms is None:
        now_ms = now_millis()
    ad_id = extract_ad_id(url)
    return f"{ID_PREFIX}-{ad_id[-AD_ID_TAIL:]}-{now_ms}"
