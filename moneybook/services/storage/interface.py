"""
Abstract Record Store Interface

DESIGN DECISION: Storage is a plain key-value record store.
Every persisted thing is one JSON value under one key:

- transactions_<user_id>  -> list of transaction objects
- session_<token>         -> {"userId": ..., "expiresAt": ...} (with TTL)
- limit_<client>          -> failed login counter (with TTL)

This allows us to:
1. Swap Google Sheets for any other key-value backend later
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally tiny: get, put, delete. There are no
conditional writes, so read-modify-write callers can lose updates under
concurrency (last writer wins).
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class RecordStoreInterface(ABC):
    """
    Abstract interface for key-value record storage.

    Values are JSON-compatible (dict, list, str, int, float, bool).
    Implementations must return copies: mutating a value returned by
    get() must not change what is stored.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Read the value stored under a key.

        Args:
            key: Record key

        Returns:
            The stored value, or None if the key is absent or expired

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def put(
        self,
        key: str,
        value: Any,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        """
        Write (create or replace) the value under a key.

        Args:
            key: Record key
            value: JSON-compatible value
            ttl_seconds: Expire the record after this many seconds.
                        None keeps it forever.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """
        Delete a key. Deleting an absent key is not an error.

        Raises:
            StorageError: If the backend cannot be written
        """
        pass


def transactions_key(user_id: str) -> str:
    return f"transactions_{user_id}"


def session_key(token: str) -> str:
    return f"session_{token}"


def rate_limit_key(client: str) -> str:
    return f"limit_{client}"


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StoreUnavailableError(StorageError):
    """Could not connect to storage backend."""
    pass
