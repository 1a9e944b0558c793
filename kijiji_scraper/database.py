"""
Record store: listings and their snapshots in one SQLite database.
"""
import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from .errors import StorageTransactionFailed, StorageUnavailable
from .models import Listing

logger = logging.getLogger(__name__)


LISTING_COLUMNS = Listing.field_names()

# Schema definitions
DDL_LISTINGS = """
CREATE TABLE IF NOT EXISTS listings (
  id TEXT PRIMARY KEY,
  url TEXT NOT NULL,
  date_saved TEXT NOT NULL,
  title TEXT,
  price TEXT,
  location TEXT,
  date_posted TEXT,
  seller_name TEXT,
  year TEXT,
  make TEXT,
  model TEXT,
  mileage TEXT,
  transmission TEXT,
  body_type TEXT,
  colour TEXT,
  drivetrain TEXT,
  condition TEXT,
  seats TEXT,
  fuel TEXT
);
"""

DDL_SNAPSHOTS = """
CREATE TABLE IF NOT EXISTS snapshots (
  id TEXT PRIMARY KEY REFERENCES listings(id) ON DELETE CASCADE,
  data BLOB NOT NULL
);
"""

DDL_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_listings_date_saved ON listings(date_saved);",
]

INSERT_LISTING = "INSERT INTO listings ({cols}) VALUES ({marks})".format(
    cols=",".join(LISTING_COLUMNS),
    marks=",".join("?" for _ in LISTING_COLUMNS),
)


class RecordStore:
    """
    Transactional store for captured listings and snapshots.

    Each operation opens its own connection and closes it when done; no
    connection handle outlives a call. `on_count_changed` receives the new
    listing count after every committed write (used for the saved-count badge).
    """

    def __init__(self, path: str, on_count_changed: Optional[Callable[[int], None]] = None):
        self.path = path
        self.on_count_changed = on_count_changed

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Open a scoped connection with foreign keys enforced."""
        try:
            conn = sqlite3.connect(self.path)
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
            conn.execute("PRAGMA foreign_keys=ON;")
        except sqlite3.Error as e:
            logger.error(f"Cannot open database {self.path}: {e}")
            raise StorageUnavailable(f"Cannot open database {self.path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        except sqlite3.Error as e:
            # reads against a missing or mismatched schema land here
            logger.error(f"Database error: {e}")
            raise StorageUnavailable(f"Database error: {e}") from e
        finally:
            conn.close()

    @contextmanager
    def transaction(self, action: str) -> Iterator[sqlite3.Connection]:
        """Run the body in one transaction; any sqlite error rolls it back."""
        with self.connect() as conn:
            try:
                with conn:
                    yield conn
            except sqlite3.Error as e:
                logger.error(f"Failed to {action}: {e}")
                raise StorageTransactionFailed(f"Failed to {action}: {e}") from e

    def init(self) -> "RecordStore":
        """Initialize database schema with tables and indexes."""
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with self.transaction("initialize schema") as conn:
            conn.execute(DDL_LISTINGS)
            conn.execute(DDL_SNAPSHOTS)
            for ddl in DDL_INDEXES:
                conn.execute(ddl)
        return self

    # Writes

    def _insert_listing(self, conn: sqlite3.Connection, listing: Listing):
        row = listing.to_row()
        conn.execute(INSERT_LISTING, [row[c] for c in LISTING_COLUMNS])

    def _insert_snapshot(self, conn: sqlite3.Connection, listing_id: str, data: bytes):
        conn.execute("INSERT INTO snapshots (id, data) VALUES (?, ?)", (listing_id, sqlite3.Binary(data)))

    def put(self, listing: Listing, snapshot: Optional[bytes] = None):
        """
        Save a listing and, if given, its snapshot atomically.

        Both rows are written in one transaction: either both are visible
        afterwards or neither is. An id already in the store is rejected.
        """
        with self.transaction(f"save listing {listing.id}") as conn:
            self._insert_listing(conn, listing)
            if snapshot:
                self._insert_snapshot(conn, listing.id, snapshot)
        logger.info(f">>> Saved listing {listing.id} ({'with' if snapshot else 'without'} snapshot)")
        self._recount()

    def clear(self):
        """Delete every listing and snapshot in one transaction."""
        with self.transaction("clear listings") as conn:
            conn.execute("DELETE FROM snapshots")
            conn.execute("DELETE FROM listings")
        logger.info(">>> All listings cleared")
        self._recount()

    def _recount(self):
        if self.on_count_changed is None:
            return
        self.on_count_changed(self.count())

    # Reads

    def count(self) -> int:
        with self.connect() as conn:
            return conn.execute("SELECT COUNT(*) FROM listings").fetchone()[0]

    def get(self, listing_id: str) -> Optional[Listing]:
        with self.connect() as conn:
            r = conn.execute("SELECT * FROM listings WHERE id = ?", (listing_id,)).fetchone()
        return Listing.from_row(dict(r)) if r else None

    def get_all(self) -> List[Listing]:
        """All listings in insertion order."""
        with self.connect() as conn:
            rows = conn.execute("SELECT * FROM listings ORDER BY rowid ASC").fetchall()
        return [Listing.from_row(dict(r)) for r in rows]

    def get_snapshot(self, listing_id: str) -> Optional[bytes]:
        with self.connect() as conn:
            r = conn.execute("SELECT data FROM snapshots WHERE id = ?", (listing_id,)).fetchone()
        return bytes(r["data"]) if r else None

    def snapshot_ids(self) -> List[str]:
        with self.connect() as conn:
            return [r[0] for r in conn.execute("SELECT id FROM snapshots ORDER BY rowid ASC")]
