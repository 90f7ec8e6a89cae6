"""
Transaction Repository

A thin list/append/remove layer over the record store. Each user's
transactions are one JSON array under transactions_<user_id>.

KNOWN CONSISTENCY GAP: append and remove are read-modify-write of the
whole array with no version check. Two concurrent writes for the same
user can lose one of them (last writer wins). Closing that gap belongs
in the store (conditional put or one key per transaction), behind this
same interface; the report engine never needs to know.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Optional

import structlog
from pydantic import ValidationError

from moneybook.models.transaction import Transaction, TransactionDraft
from moneybook.services.storage import RecordStoreInterface, transactions_key


logger = structlog.get_logger(__name__)


class TransactionRepository:
    """
    Stores and retrieves a user's transactions.

    Every method takes the user id explicitly and returns the full,
    current list so callers can re-render without a second read.
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._store = store
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def _load_records(self, user_id: str) -> list[Any]:
        """Raw stored entries; an absent or non-list value counts as empty."""
        value = await self._store.get(transactions_key(user_id))
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning(
                "transactions_not_a_list",
                user_id=user_id,
                value_type=type(value).__name__,
            )
            return []
        return value

    def _parse(self, user_id: str, records: list[Any]) -> list[Transaction]:
        transactions = []
        for record in records:
            try:
                transactions.append(Transaction.model_validate(record))
            except ValidationError as e:
                # Kept in storage, hidden from callers
                logger.warning(
                    "transaction_unreadable",
                    user_id=user_id,
                    record_id=record.get("id") if isinstance(record, dict) else None,
                    errors=e.error_count(),
                )
        return transactions

    async def list_transactions(self, user_id: str) -> list[Transaction]:
        """All readable transactions of a user, in insertion order."""
        records = await self._load_records(user_id)
        return self._parse(user_id, records)

    async def append(
        self,
        user_id: str,
        draft: TransactionDraft,
        now: Optional[datetime] = None,
    ) -> list[Transaction]:
        """
        Stamp a draft with id and timestamp and add it to the user's list.

        Args:
            user_id: Owner of the list
            draft: Validated client data
            now: Insertion time (defaults to the repository clock)

        Returns:
            The updated list

        Raises:
            StorageError: If the store cannot be read or written
        """
        transaction = Transaction.from_draft(draft, now=now or self._clock())

        records = await self._load_records(user_id)
        records.append(transaction.to_record())
        await self._store.put(transactions_key(user_id), records)

        logger.info(
            "transaction_appended",
            user_id=user_id,
            transaction_id=transaction.id,
            type=transaction.type.value,
        )
        return self._parse(user_id, records)

    async def remove(self, user_id: str, transaction_id: str) -> list[Transaction]:
        """
        Remove every entry with the given id. Unknown ids are a no-op.

        Returns:
            The resulting list

        Raises:
            StorageError: If the store cannot be read or written
        """
        records = await self._load_records(user_id)
        remaining = [
            record for record in records
            if not (isinstance(record, dict) and record.get("id") == transaction_id)
        ]

        if len(remaining) != len(records):
            await self._store.put(transactions_key(user_id), remaining)
            logger.info(
                "transaction_removed",
                user_id=user_id,
                transaction_id=transaction_id,
            )
        else:
            logger.debug(
                "transaction_remove_noop",
                user_id=user_id,
                transaction_id=transaction_id,
            )

        return self._parse(user_id, remaining)
