"""
Period Aggregation Engine

DESIGN DECISION: Reports are PURE functions of

    (transactions, now, target period/year/month, civil clock)

They never read storage, never read the wall clock on their own when
`now` is given, and never raise for data-shape problems:

- an empty list gives zeros (or an empty series for future periods)
- an unknown summary period means "no lower bound"
- a malformed amount contributes 0 and is logged
- any type other than income counts as an expense

Four shapes are produced:

1. summarize()         income / expense / balance / count since a boundary
2. daily_balances()    net flow per day of one month
3. monthly_balances()  net flow per month of one year
4. weekly_balances()   net flow per day of the current Monday-Sunday week

In the three series, days or months after "today" (civil time) always
report 0, and a target period entirely in the future yields [].
"""

import math
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, Optional, Union

import structlog

from moneybook.models.reports import (
    DailyBalance,
    MonthlyBalance,
    PeriodSummary,
    SummaryPeriod,
    WeekdayBalance,
)
from moneybook.models.transaction import Transaction
from moneybook.reports.civil import CivilClock, days_in_month


logger = structlog.get_logger(__name__)

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


class MalformedAmountError(ValueError):
    """A stored amount cannot be read as a number."""
    pass


# =============================================================================
# AMOUNTS
# =============================================================================

def parse_amount(value: Any) -> float:
    """
    Read a stored amount (number or numeric string) as a float.

    Raises:
        MalformedAmountError: For None, booleans, non-numeric text, NaN
                              and infinities
    """
    if value is None or isinstance(value, bool):
        raise MalformedAmountError(f"Not an amount: {value!r}")

    try:
        amount = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        raise MalformedAmountError(f"Not an amount: {value!r}")

    if not math.isfinite(amount):
        raise MalformedAmountError(f"Not a finite amount: {value!r}")
    return amount


def _amount_or_zero(transaction: Transaction) -> float:
    try:
        return parse_amount(transaction.amount)
    except MalformedAmountError:
        logger.warning(
            "malformed_amount",
            transaction_id=transaction.id,
            amount=repr(transaction.amount),
        )
        return 0.0


def net_amount(transaction: Transaction) -> float:
    """+amount for income, -amount for anything else."""
    amount = _amount_or_zero(transaction)
    if transaction.is_income:
        return amount
    return -amount


def _defaults(
    now: Optional[datetime],
    clock: Optional[CivilClock],
) -> tuple[datetime, CivilClock]:
    return now or datetime.now(timezone.utc), clock or CivilClock()


# =============================================================================
# SCALAR SUMMARY
# =============================================================================

def period_start(
    period: SummaryPeriod,
    now: datetime,
    clock: CivilClock,
) -> Optional[datetime]:
    """
    UTC instant at which a summary period begins, None for no bound.

    daily:   civil midnight today
    weekly:  civil midnight of this week's Monday
    monthly: civil midnight of the 1st
    yearly:  civil midnight of January 1st
    """
    today = clock.today(now)

    if period == SummaryPeriod.DAILY:
        return clock.midnight(today)
    elif period == SummaryPeriod.WEEKLY:
        return clock.midnight(clock.monday_of(today))
    elif period == SummaryPeriod.MONTHLY:
        return clock.midnight(today.replace(day=1))
    elif period == SummaryPeriod.YEARLY:
        return clock.midnight(date(today.year, 1, 1))
    elif period == SummaryPeriod.ALL:
        return None

    raise ValueError(f"Unhandled summary period: {period!r}")


def summarize(
    transactions: Iterable[Transaction],
    period: Union[SummaryPeriod, str] = SummaryPeriod.DAILY,
    now: Optional[datetime] = None,
    clock: Optional[CivilClock] = None,
) -> PeriodSummary:
    """
    Totals of the transactions made since the start of a period.

    Args:
        transactions: The user's transactions
        period: daily, weekly, monthly, yearly; anything else means all time
        now: Reference instant (defaults to the current time)
        clock: Civil timezone (defaults to UTC+8)

    Returns:
        PeriodSummary echoing the requested period name
    """
    now, clock = _defaults(now, clock)

    if isinstance(period, SummaryPeriod):
        period_name = period.value
        resolved = period
    else:
        period_name = period
        resolved = SummaryPeriod.resolve(period)
        if resolved.value != period:
            logger.debug("unknown_period", period=period)

    start = period_start(resolved, now, clock)

    income = 0.0
    expense = 0.0
    count = 0
    for transaction in transactions:
        if start is not None and transaction.timestamp < start:
            continue

        count += 1
        amount = _amount_or_zero(transaction)
        if transaction.is_income:
            income += amount
        else:
            expense += amount

    return PeriodSummary(
        total_income=income,
        total_expense=expense,
        balance=income - expense,
        transaction_count=count,
        period=period_name,
    )


# =============================================================================
# SERIES
# =============================================================================

def daily_balances(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
    now: Optional[datetime] = None,
    clock: Optional[CivilClock] = None,
) -> list[DailyBalance]:
    """
    Net flow for every day of a month.

    Returns [] for a month after the current civil month or for an
    invalid year/month. In the current month, days after today are 0.
    """
    now, clock = _defaults(now, clock)

    if not 1 <= month <= 12 or year < 1:
        return []

    today = clock.today(now)
    if (year, month) > (today.year, today.month):
        return []

    flows: dict[int, float] = defaultdict(float)
    for transaction in transactions:
        local = clock.civil(transaction.timestamp)
        if local.year == year and local.month == month:
            flows[local.day] += net_amount(transaction)

    is_current_month = (year, month) == (today.year, today.month)

    series = []
    for day in range(1, days_in_month(year, month) + 1):
        balance = flows.get(day, 0.0)
        if is_current_month and day > today.day:
            balance = 0.0
        series.append(
            DailyBalance(
                day=day,
                date=f"{year:04d}-{month:02d}-{day:02d}",
                balance=balance,
            )
        )
    return series


def monthly_balances(
    transactions: Iterable[Transaction],
    year: int,
    now: Optional[datetime] = None,
    clock: Optional[CivilClock] = None,
) -> list[MonthlyBalance]:
    """
    Net flow for every month of a year.

    Returns [] for a year after the current civil year. In the current
    year, months after this month are 0.
    """
    now, clock = _defaults(now, clock)

    if year < 1:
        return []

    today = clock.today(now)
    if year > today.year:
        return []

    flows: dict[int, float] = defaultdict(float)
    for transaction in transactions:
        local = clock.civil(transaction.timestamp)
        if local.year == year:
            flows[local.month] += net_amount(transaction)

    series = []
    for month in range(1, 13):
        balance = flows.get(month, 0.0)
        if year == today.year and month > today.month:
            balance = 0.0
        series.append(MonthlyBalance(month=month, balance=balance))
    return series


def weekly_balances(
    transactions: Iterable[Transaction],
    now: Optional[datetime] = None,
    clock: Optional[CivilClock] = None,
) -> list[WeekdayBalance]:
    """
    Net flow for each day of the current civil week, Monday first.

    Always 7 entries. Days after today are 0.
    """
    now, clock = _defaults(now, clock)

    today = clock.today(now)
    monday = clock.monday_of(today)
    week = [monday + timedelta(days=offset) for offset in range(7)]

    flows: dict[date, float] = defaultdict(float)
    for transaction in transactions:
        day = clock.civil(transaction.timestamp).date()
        if week[0] <= day <= week[-1]:
            flows[day] += net_amount(transaction)

    series = []
    for index, day in enumerate(week):
        balance = 0.0 if day > today else flows.get(day, 0.0)
        series.append(
            WeekdayBalance(
                day=WEEKDAY_NAMES[index],
                weekday=index + 1,
                date=day.isoformat(),
                balance=balance,
            )
        )
    return series
