"""
Exception types for extraction, storage and export.
"""
from typing import Optional


class KijijiScraperError(Exception):
    """Base class for all errors raised by this package."""


class ExtractionFieldError(KijijiScraperError):
    """A single field strategy failed. Logged and downgraded to the sentinel."""

    def __init__(self, field: str, strategy: str, cause: Optional[BaseException] = None):
        self.field = field
        self.strategy = strategy
        self.cause = cause
        super().__init__(f"field '{field}' strategy '{strategy}' failed: {cause!r}")


class StorageError(KijijiScraperError):
    """Base class for record store failures."""


class StorageUnavailable(StorageError):
    """The store could not be opened (missing directory, locked, corrupt)."""


class StorageTransactionFailed(StorageError):
    """A transaction was rolled back; the store is unchanged."""


class SnapshotCaptureFailed(KijijiScraperError):
    """The visual snapshot could not be captured. The record is still stored."""


class SideFileWriteFailed(KijijiScraperError):
    """A snapshot file could not be written during export."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"failed to write {path}: {cause!r}")
