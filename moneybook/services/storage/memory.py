"""
In-Memory Record Store

Used for local development and tests. Values are kept as JSON text so
callers always get a fresh copy back, the same as with a remote store.
Nothing survives a process restart.
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from moneybook.services.storage.interface import RecordStoreInterface, StorageError


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryRecordStore(RecordStoreInterface):
    """
    Dict-backed record store with TTL support.

    Args:
        clock: Returns the current UTC time. Injected by tests to
               move time forward and exercise expiry.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or _utc_now
        self._records: dict[str, tuple[str, Optional[datetime]]] = {}

    async def get(self, key: str) -> Optional[Any]:
        entry = self._records.get(key)
        if entry is None:
            return None

        raw, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._records[key]
            return None

        return json.loads(raw)

    async def put(
        self,
        key: str,
        value: Any,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        try:
            raw = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key} is not JSON-serializable: {e}")

        expires_at = None
        if ttl_seconds is not None:
            expires_at = self._clock() + timedelta(seconds=ttl_seconds)

        self._records[key] = (raw, expires_at)

    async def delete(self, key: str) -> None:
        self._records.pop(key, None)

    def keys(self) -> list[str]:
        """All keys currently held, including ones that have expired but not been read."""
        return list(self._records)
