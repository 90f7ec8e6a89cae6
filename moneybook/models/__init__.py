"""
Data Models Package

This package contains all Pydantic models used in Moneybook.
All data flowing through the system must conform to these schemas.
"""

from moneybook.models.transaction import (
    Transaction,
    TransactionDraft,
    TransactionType,
    format_timestamp,
    sanitize_text,
)
from moneybook.models.session import Session
from moneybook.models.reports import (
    DailyBalance,
    MonthlyBalance,
    PeriodSummary,
    SummaryPeriod,
    WeekdayBalance,
)

__all__ = [
    # Transaction models
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "format_timestamp",
    "sanitize_text",
    # Session
    "Session",
    # Report models
    "DailyBalance",
    "MonthlyBalance",
    "PeriodSummary",
    "SummaryPeriod",
    "WeekdayBalance",
]
