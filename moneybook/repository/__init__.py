"""Transaction repository package."""

from moneybook.repository.transactions import TransactionRepository

__all__ = ["TransactionRepository"]
