"""
Transaction Models

A transaction is the only persisted business entity. Two shapes exist:

- TransactionDraft: what a client is allowed to send (type, amount,
  category, description). Validated strictly at write time.
- Transaction: what is stored. The server assigns id and timestamp.

DESIGN DECISION: Stored transactions are read leniently. The amount of a
stored record may be a number or a numeric string (older records, manual
edits in the backing sheet) and is only parsed when a report is computed.
A bad amount must not make the whole list unreadable.
"""

import math
import secrets
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)


class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
    "/": "&#x2F;",
}


def sanitize_text(value: Optional[str]) -> Optional[str]:
    """Escape characters that could inject HTML into a rendered page."""
    if value is None:
        return None
    return "".join(_HTML_ESCAPES.get(char, char) for char in value)


def generate_id() -> str:
    """256-bit random hex identifier."""
    return secrets.token_hex(32)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render an instant as ISO-8601 UTC with millisecond precision and a Z suffix."""
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class TransactionDraft(BaseModel):
    """
    Client-supplied transaction data.

    Any id or timestamp sent by a client is ignored: both are assigned
    by the repository when the draft is appended.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    type: TransactionType = Field(
        ...,
        description="income or expense"
    )
    amount: float = Field(
        ...,
        ge=0,
        description="Non-negative amount"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Free-text category label"
    )
    description: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Optional free-text note"
    )

    @field_validator('amount')
    @classmethod
    def reject_non_finite(cls, v: float) -> float:
        """NaN and infinity are not amounts."""
        if not math.isfinite(v):
            raise ValueError("Amount must be a finite number")
        return v

    @field_validator('category', 'description')
    @classmethod
    def escape_html(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_text(v)


class Transaction(BaseModel):
    """
    A stored transaction.

    type and amount are kept exactly as stored. An unrecognised type is
    kept as text and reports count it as an expense. amount may be
    anything (number, numeric string, garbage); use
    moneybook.reports.aggregation.parse_amount to read it.
    """
    model_config = ConfigDict(extra="ignore")

    id: str = Field(
        ...,
        min_length=1,
        description="Server-generated unique identifier"
    )
    type: Union[TransactionType, str] = Field(
        ...,
        union_mode="left_to_right",
        description="income, expense, or whatever text was stored"
    )
    amount: Any = Field(
        default=None,
        description="Amount as stored; parsed at report time"
    )
    category: str = ""
    description: Optional[str] = None
    timestamp: datetime = Field(
        ...,
        description="Moment of insertion (UTC)"
    )

    @field_validator('type', mode='before')
    @classmethod
    def type_as_text(cls, v: Any) -> Any:
        """Non-text types (null, numbers) are kept as their text form."""
        if isinstance(v, str):
            return v
        return "" if v is None else str(v)

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @field_validator('timestamp')
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive timestamps are treated as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @field_serializer('timestamp')
    def serialize_timestamp(self, v: datetime) -> str:
        return format_timestamp(v)

    @classmethod
    def from_draft(
        cls,
        draft: TransactionDraft,
        now: Optional[datetime] = None,
    ) -> "Transaction":
        """Stamp a draft with a fresh id and the insertion time."""
        return cls(
            id=generate_id(),
            type=draft.type,
            amount=draft.amount,
            category=draft.category,
            description=draft.description,
            timestamp=now or utc_now(),
        )

    def to_record(self) -> dict:
        """Convert to a JSON-compatible dict for the record store."""
        return self.model_dump(mode="json")
