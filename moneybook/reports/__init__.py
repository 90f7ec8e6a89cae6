"""Period reports package."""

from moneybook.reports.civil import (
    DEFAULT_UTC_OFFSET_MINUTES,
    CivilClock,
    days_in_month,
)
from moneybook.reports.aggregation import (
    WEEKDAY_NAMES,
    MalformedAmountError,
    daily_balances,
    monthly_balances,
    net_amount,
    parse_amount,
    period_start,
    summarize,
    weekly_balances,
)

__all__ = [
    "DEFAULT_UTC_OFFSET_MINUTES",
    "CivilClock",
    "days_in_month",
    "WEEKDAY_NAMES",
    "MalformedAmountError",
    "daily_balances",
    "monthly_balances",
    "net_amount",
    "parse_amount",
    "period_start",
    "summarize",
    "weekly_balances",
]
