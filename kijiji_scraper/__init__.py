"""
Kijiji Vehicle Listing Capture Package
"""
from .models import Listing, NA
from .document import ListingDocument
from .resolver import FieldResolver, FieldStrategy, DEFAULT_FIELD_STRATEGIES, resolve_listing
from .title import decompose_title
from .identifiers import generate_listing_id
from .database import RecordStore
from .barrier import CompletionBarrier
from .export import (
    export_all,
    export_snapshots,
    write_tabular,
    EXPORT_HEADERS
)
from .core import capture_listing
from .utils import init_logger, now_iso

__version__ = "1.0.0"

__all__ = [
    "Listing",
    "NA",
    "ListingDocument",
    "FieldResolver",
    "FieldStrategy",
    "DEFAULT_FIELD_STRATEGIES",
    "resolve_listing",
    "decompose_title",
    "generate_listing_id",
    "RecordStore",
    "CompletionBarrier",
    "export_all",
    "export_snapshots",
    "write_tabular",
    "EXPORT_HEADERS",
    "capture_listing",
    "init_logger",
    "now_iso"
]
