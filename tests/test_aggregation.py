"""
Tests for the period aggregation engine

All tests pin `now` and use a UTC+8 civil clock, so results never
depend on the machine's clock or timezone.
"""

from datetime import date, datetime, timezone

import pytest

from moneybook.models.reports import SummaryPeriod
from moneybook.reports import (
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
from tests.conftest import make_transaction


NOW = datetime(2024, 3, 20, 0, 0, tzinfo=timezone.utc)  # Wed 2024-03-20 08:00 civil

PERIODS = ["daily", "weekly", "monthly", "yearly"]


@pytest.fixture
def march():
    return [
        make_transaction("income", 100, "2024-03-01T08:00:00Z", id="a"),
        make_transaction("expense", 40, "2024-03-15T08:00:00Z", id="b"),
    ]


class TestParseAmount:
    """Tests for reading stored amounts."""

    @pytest.mark.parametrize("value,expected", [
        (100, 100.0),
        (12.5, 12.5),
        ("12.5", 12.5),
        (" 7 ", 7.0),
        ("1e2", 100.0),
    ])
    def test_numeric_values(self, value, expected):
        assert parse_amount(value) == expected

    @pytest.mark.parametrize("value", [None, True, "", "abc", "12abc", "nan", "inf", [1]])
    def test_malformed_values(self, value):
        with pytest.raises(MalformedAmountError):
            parse_amount(value)

    def test_malformed_is_value_error(self):
        assert issubclass(MalformedAmountError, ValueError)

    def test_net_amount_sign(self):
        assert net_amount(make_transaction("income", 5, "2024-03-01T00:00:00Z")) == 5
        assert net_amount(make_transaction("expense", 5, "2024-03-01T00:00:00Z")) == -5


class TestPeriodStart:
    """Tests for summary period boundaries."""

    def test_boundaries(self, civil):
        assert period_start(SummaryPeriod.DAILY, NOW, civil) == datetime(
            2024, 3, 19, 16, tzinfo=timezone.utc
        )
        assert period_start(SummaryPeriod.WEEKLY, NOW, civil) == datetime(
            2024, 3, 17, 16, tzinfo=timezone.utc
        )
        assert period_start(SummaryPeriod.MONTHLY, NOW, civil) == datetime(
            2024, 2, 29, 16, tzinfo=timezone.utc
        )
        assert period_start(SummaryPeriod.YEARLY, NOW, civil) == datetime(
            2023, 12, 31, 16, tzinfo=timezone.utc
        )
        assert period_start(SummaryPeriod.ALL, NOW, civil) is None

    @pytest.mark.parametrize("now", [
        NOW,
        datetime(2024, 3, 31, 17, 0, tzinfo=timezone.utc),  # Mon 2024-04-01 civil
        datetime(2024, 1, 1, 2, 0, tzinfo=timezone.utc),    # Mon 2024-01-01 civil
        datetime(2024, 12, 31, 15, 59, tzinfo=timezone.utc),
        datetime(2024, 3, 2, 12, 0, tzinfo=timezone.utc),   # Sat, week began in February
    ])
    def test_boundaries_nest(self, civil, now):
        """Test yearly <= monthly <= daily and yearly <= weekly <= daily."""
        yearly = period_start(SummaryPeriod.YEARLY, now, civil)
        monthly = period_start(SummaryPeriod.MONTHLY, now, civil)
        weekly = period_start(SummaryPeriod.WEEKLY, now, civil)
        daily = period_start(SummaryPeriod.DAILY, now, civil)

        assert yearly <= monthly <= daily
        assert yearly <= weekly <= daily

    def test_week_can_start_before_month(self, civil):
        """Test that early in a month the week boundary precedes the month boundary."""
        now = datetime(2024, 3, 2, 12, 0, tzinfo=timezone.utc)  # Sat 2024-03-02 civil
        weekly = period_start(SummaryPeriod.WEEKLY, now, civil)
        monthly = period_start(SummaryPeriod.MONTHLY, now, civil)
        assert weekly < monthly


class TestSummarize:
    """Tests for the scalar period summary."""

    @pytest.mark.parametrize("period", PERIODS)
    def test_empty_list_is_zero(self, civil, period):
        summary = summarize([], period, now=NOW, clock=civil)
        assert summary.total_income == 0
        assert summary.total_expense == 0
        assert summary.balance == 0
        assert summary.transaction_count == 0
        assert summary.period == period

    def test_monthly_scenario(self, civil, march):
        summary = summarize(march, "monthly", now=NOW, clock=civil)
        assert summary.total_income == 100
        assert summary.total_expense == 40
        assert summary.balance == 60
        assert summary.transaction_count == 2
        assert summary.period == "monthly"

    def test_default_period_is_daily(self, civil, march):
        summary = summarize(march, now=NOW, clock=civil)
        assert summary.period == "daily"
        assert summary.transaction_count == 0

    def test_daily_uses_civil_midnight(self, civil):
        """Test that 17:00 UTC yesterday is already civil today."""
        transactions = [
            make_transaction("expense", 10, "2024-03-19T15:59:59Z", id="yesterday"),
            make_transaction("expense", 20, "2024-03-19T16:00:00Z", id="today"),
        ]
        summary = summarize(transactions, "daily", now=NOW, clock=civil)
        assert summary.transaction_count == 1
        assert summary.total_expense == 20

    def test_weekly_includes_monday(self, civil):
        transactions = [
            make_transaction("income", 1, "2024-03-17T15:00:00Z", id="sunday"),
            make_transaction("income", 2, "2024-03-17T16:00:00Z", id="monday"),
        ]
        summary = summarize(transactions, "weekly", now=NOW, clock=civil)
        assert summary.total_income == 2

    def test_yearly(self, civil):
        transactions = [
            make_transaction("income", 1, "2023-12-31T15:00:00Z", id="last-year"),
            make_transaction("income", 2, "2023-12-31T16:00:00Z", id="this-year"),
        ]
        summary = summarize(transactions, "yearly", now=NOW, clock=civil)
        assert summary.total_income == 2
        assert summary.transaction_count == 1

    def test_unknown_period_includes_everything(self, civil, march):
        old = make_transaction("expense", 5, "2001-01-01T00:00:00Z", id="old")
        summary = summarize(march + [old], "fortnightly", now=NOW, clock=civil)
        assert summary.transaction_count == 3
        assert summary.balance == 55
        assert summary.period == "fortnightly"

    def test_enum_period(self, civil, march):
        summary = summarize(march, SummaryPeriod.MONTHLY, now=NOW, clock=civil)
        assert summary.period == "monthly"
        assert summary.transaction_count == 2

    @pytest.mark.parametrize("period", PERIODS + ["all"])
    def test_partition(self, civil, period):
        """Test balance == income - expense and count matches the boundary."""
        transactions = [
            make_transaction("income", 10, "2024-03-19T20:00:00Z", id="1"),
            make_transaction("expense", 3.5, "2024-03-18T01:00:00Z", id="2"),
            make_transaction("income", 7, "2024-03-05T01:00:00Z", id="3"),
            make_transaction("expense", 2, "2024-01-10T01:00:00Z", id="4"),
            make_transaction("expense", 9, "2023-06-01T01:00:00Z", id="5"),
        ]
        summary = summarize(transactions, period, now=NOW, clock=civil)
        start = period_start(SummaryPeriod.resolve(period), NOW, civil)
        expected = [t for t in transactions if start is None or t.timestamp >= start]

        assert summary.balance == pytest.approx(summary.total_income - summary.total_expense)
        assert summary.transaction_count == len(expected)

    def test_malformed_amount_counts_as_zero(self, civil):
        transactions = [
            make_transaction("income", "abc", "2024-03-19T20:00:00Z", id="bad"),
            make_transaction("income", None, "2024-03-19T20:00:00Z", id="missing"),
            make_transaction("income", "25.5", "2024-03-19T20:00:00Z", id="text"),
        ]
        summary = summarize(transactions, "daily", now=NOW, clock=civil)
        assert summary.total_income == 25.5
        assert summary.transaction_count == 3


class TestDailyBalances:
    """Tests for the month view series."""

    def test_scenario(self, civil, march):
        series = daily_balances(march, 2024, 3, now=NOW, clock=civil)

        assert len(series) == 31
        assert [point.day for point in series] == list(range(1, 32))
        balances = {point.day: point.balance for point in series}
        assert balances[1] == 100
        assert balances[15] == -40
        assert all(balance == 0 for day, balance in balances.items() if day not in (1, 15))

    def test_date_keys(self, civil, march):
        series = daily_balances(march, 2024, 3, now=NOW, clock=civil)
        assert series[0].date == "2024-03-01"
        assert series[-1].date == "2024-03-31"

    def test_leap_february(self, civil):
        assert len(daily_balances([], 2024, 2, now=NOW, clock=civil)) == 29

    def test_non_leap_february(self, civil):
        assert len(daily_balances([], 2023, 2, now=NOW, clock=civil)) == 28

    def test_future_days_suppressed(self, civil):
        """Test that days after civil today report 0 even with data."""
        transactions = [
            make_transaction("income", 5, "2024-03-19T20:00:00Z", id="today"),
            make_transaction("income", 50, "2024-03-25T04:00:00Z", id="future"),
        ]
        series = daily_balances(transactions, 2024, 3, now=NOW, clock=civil)
        balances = {point.day: point.balance for point in series}

        assert balances[20] == 5
        assert all(balances[day] == 0 for day in range(21, 32))

    def test_future_month_is_empty(self, civil, march):
        assert daily_balances(march, 2024, 4, now=NOW, clock=civil) == []
        assert daily_balances(march, 2025, 1, now=NOW, clock=civil) == []

    def test_invalid_month_is_empty(self, civil):
        assert daily_balances([], 2024, 0, now=NOW, clock=civil) == []
        assert daily_balances([], 2024, 13, now=NOW, clock=civil) == []

    def test_buckets_by_civil_date(self, civil):
        """Test that 2024-02-29T17:00Z lands on March 1st civil."""
        transactions = [make_transaction("expense", 8, "2024-02-29T17:00:00Z")]

        march = daily_balances(transactions, 2024, 3, now=NOW, clock=civil)
        february = daily_balances(transactions, 2024, 2, now=NOW, clock=civil)

        assert march[0].balance == -8
        assert all(point.balance == 0 for point in february)

    def test_past_month_not_suppressed(self, civil):
        transactions = [make_transaction("income", 3, "2024-02-28T04:00:00Z")]
        series = daily_balances(transactions, 2024, 2, now=NOW, clock=civil)
        assert series[27].balance == 3

    def test_same_day_transactions_net(self, civil):
        transactions = [
            make_transaction("income", 30, "2024-03-10T01:00:00Z", id="1"),
            make_transaction("expense", 12, "2024-03-10T09:00:00Z", id="2"),
        ]
        series = daily_balances(transactions, 2024, 3, now=NOW, clock=civil)
        assert series[9].balance == 18


class TestMonthlyBalances:
    """Tests for the year view series."""

    def test_twelve_months(self, civil, march):
        series = monthly_balances(march, 2024, now=NOW, clock=civil)
        assert [point.month for point in series] == list(range(1, 13))
        assert series[2].balance == 60

    def test_future_months_suppressed(self, civil):
        transactions = [make_transaction("income", 9, "2024-07-01T00:00:00Z")]
        series = monthly_balances(transactions, 2024, now=NOW, clock=civil)
        assert all(point.balance == 0 for point in series[3:])

    def test_past_year_not_suppressed(self, civil):
        transactions = [make_transaction("income", 9, "2023-11-11T00:00:00Z")]
        series = monthly_balances(transactions, 2023, now=NOW, clock=civil)
        assert series[10].balance == 9

    def test_future_year_is_empty(self, civil, march):
        assert monthly_balances(march, 2025, now=NOW, clock=civil) == []

    def test_new_year_civil_bucket(self, civil):
        """Test that 2023-12-31T16:00Z is January 2024 civil."""
        transactions = [make_transaction("income", 4, "2023-12-31T16:00:00Z")]
        assert monthly_balances(transactions, 2024, now=NOW, clock=civil)[0].balance == 4
        assert monthly_balances(transactions, 2023, now=NOW, clock=civil)[11].balance == 0


class TestWeeklyBalances:
    """Tests for the current week series."""

    @pytest.mark.parametrize("now", [
        NOW,
        datetime(2024, 3, 17, 16, 0, tzinfo=timezone.utc),  # Monday 00:00 civil
        datetime(2024, 3, 24, 15, 59, tzinfo=timezone.utc),  # Sunday 23:59 civil
        datetime(2024, 2, 29, 20, 0, tzinfo=timezone.utc),  # Friday 2024-03-01 civil
    ])
    def test_seven_days_monday_first(self, civil, now):
        series = weekly_balances([], now=now, clock=civil)

        assert len(series) == 7
        assert [point.day for point in series] == list(WEEKDAY_NAMES)
        assert [point.weekday for point in series] == list(range(1, 8))
        assert series[0].date == min(point.date for point in series)
        assert date.fromisoformat(series[0].date).isoweekday() == 1

    def test_week_dates(self, civil):
        series = weekly_balances([], now=NOW, clock=civil)
        assert [point.date for point in series] == [
            "2024-03-18", "2024-03-19", "2024-03-20", "2024-03-21",
            "2024-03-22", "2024-03-23", "2024-03-24",
        ]

    def test_sunday_belongs_to_previous_monday(self, civil):
        now = datetime(2024, 3, 24, 12, 0, tzinfo=timezone.utc)  # Sunday civil
        series = weekly_balances([], now=now, clock=civil)
        assert series[0].date == "2024-03-18"
        assert series[-1].date == "2024-03-24"

    def test_buckets_and_suppression(self, civil):
        transactions = [
            make_transaction("income", 10, "2024-03-17T16:30:00Z", id="mon"),
            make_transaction("expense", 4, "2024-03-19T17:00:00Z", id="wed"),
            make_transaction("income", 99, "2024-03-21T02:00:00Z", id="thu-future"),
            make_transaction("income", 7, "2024-03-17T15:00:00Z", id="last-sunday"),
        ]
        series = weekly_balances(transactions, now=NOW, clock=civil)
        balances = [point.balance for point in series]
        assert balances == [10, 0, -4, 0, 0, 0, 0]

    def test_week_spanning_months(self, civil):
        now = datetime(2024, 3, 1, 4, 0, tzinfo=timezone.utc)  # Friday 2024-03-01 civil
        transactions = [make_transaction("income", 6, "2024-02-26T04:00:00Z")]
        series = weekly_balances(transactions, now=now, clock=civil)
        assert series[0].date == "2024-02-26"
        assert series[0].balance == 6


class TestMalformedAmountsInSeries:
    """Tests that unparseable amounts contribute 0 to every series."""

    @pytest.fixture
    def mixed(self):
        return [
            make_transaction("income", 10, "2024-03-19T20:00:00Z", id="good"),
            make_transaction("income", "abc", "2024-03-19T21:00:00Z", id="text"),
            make_transaction("expense", True, "2024-03-19T22:00:00Z", id="bool"),
            make_transaction("expense", {"v": 1}, "2024-03-19T23:00:00Z", id="object"),
            make_transaction("income", None, "2024-03-18T04:00:00Z", id="missing"),
        ]

    def test_daily_balances(self, civil, mixed):
        series = daily_balances(mixed, 2024, 3, now=NOW, clock=civil)
        assert series[19].balance == 10
        assert series[17].balance == 0

    def test_monthly_balances(self, civil, mixed):
        series = monthly_balances(mixed, 2024, now=NOW, clock=civil)
        assert series[2].balance == 10

    def test_weekly_balances(self, civil, mixed):
        series = weekly_balances(mixed, now=NOW, clock=civil)
        assert [point.balance for point in series] == [0, 0, 10, 0, 0, 0, 0]

    def test_unknown_type_is_expense_in_series(self, civil):
        transactions = [make_transaction("refund", 6, "2024-03-19T20:00:00Z")]
        assert daily_balances(transactions, 2024, 3, now=NOW, clock=civil)[19].balance == -6
        assert weekly_balances(transactions, now=NOW, clock=civil)[2].balance == -6
