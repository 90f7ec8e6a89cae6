"""
Storage Services Package

Provides the abstract record store interface and concrete implementations.
Google Sheets is the persistent backend; the in-memory store is used for
development and tests.
"""

from moneybook.services.storage.interface import (
    RecordStoreInterface,
    StorageError,
    StoreUnavailableError,
    rate_limit_key,
    session_key,
    transactions_key,
)
from moneybook.services.storage.memory import InMemoryRecordStore
from moneybook.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
)

__all__ = [
    # Interface
    "RecordStoreInterface",
    "rate_limit_key",
    "session_key",
    "transactions_key",
    # Exceptions
    "StorageError",
    "StoreUnavailableError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryRecordStore",
]
