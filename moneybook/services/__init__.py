"""Services package."""

from moneybook.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    RecordStoreInterface,
    StorageError,
    StoreUnavailableError,
)

__all__ = [
    # Storage services
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryRecordStore",
    "RecordStoreInterface",
    "StorageError",
    "StoreUnavailableError",
]
