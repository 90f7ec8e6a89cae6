"""
Report Models

Output shapes of the period aggregation engine. Field names are
snake_case in Python and camelCase on the wire (totalIncome, ...).
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SummaryPeriod(str, Enum):
    """
    Periods the scalar summary understands.

    ALL means "no lower bound". Any unrecognised period name resolves
    to ALL instead of raising.
    """
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    ALL = "all"

    @classmethod
    def resolve(cls, name: str) -> "SummaryPeriod":
        try:
            return cls(name)
        except ValueError:
            return cls.ALL


class _ReportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PeriodSummary(_ReportModel):
    """Income, expense and balance of the transactions inside a period."""

    total_income: float = 0.0
    total_expense: float = 0.0
    balance: float = 0.0
    transaction_count: int = Field(default=0, ge=0)
    period: str = Field(
        ...,
        description="The period name exactly as requested"
    )


class DailyBalance(_ReportModel):
    """Net flow of one day of a month."""

    day: int = Field(..., ge=1, le=31)
    date: str = Field(..., description="ISO date key (YYYY-MM-DD)")
    balance: float = 0.0


class MonthlyBalance(_ReportModel):
    """Net flow of one month of a year."""

    month: int = Field(..., ge=1, le=12)
    balance: float = 0.0


class WeekdayBalance(_ReportModel):
    """Net flow of one day of the current week."""

    day: str = Field(..., description="Weekday name, Monday..Sunday")
    weekday: int = Field(..., ge=1, le=7, description="Monday=1 .. Sunday=7")
    date: str = Field(..., description="ISO date key (YYYY-MM-DD)")
    balance: float = 0.0
