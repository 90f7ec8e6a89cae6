"""
Main Orchestrator for Moneybook

This module ties together all the components and defines the flows
shared by the HTTP service and the dashboard:

1. Login (password -> session token)
2. Bookkeeping (list / append / remove transactions)
3. Reports (fetch the user's list -> run a pure report over it)

DESIGN DECISION: The orchestrator is the only place that knows about
both storage and reports. Reports never see the store, the store never
sees a report. The user id is always passed in by the caller.
"""

from datetime import datetime, timezone
from typing import Callable, Optional, Union

import structlog

from moneybook.auth import LoginRateLimiter, SessionAuthenticator, SharedPasswordVerifier
from moneybook.config import AppSettings, AuthSettings, StoreSettings, get_settings
from moneybook.models.reports import (
    DailyBalance,
    MonthlyBalance,
    PeriodSummary,
    SummaryPeriod,
    WeekdayBalance,
)
from moneybook.reports import (
    CivilClock,
    daily_balances,
    monthly_balances,
    summarize,
    weekly_balances,
)
from moneybook.repository import TransactionRepository
from moneybook.services.storage import (
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    RecordStoreInterface,
    StoreUnavailableError,
)


logger = structlog.get_logger(__name__)

ChartSeries = Union[list[DailyBalance], list[MonthlyBalance], list[WeekdayBalance]]


class ReportFlow:
    """
    Orchestrates report requests.

    Flow:
    1. Load the user's transactions (one store round-trip)
    2. Resolve the reference time in civil terms
    3. Run the pure aggregation

    Missing year/month arguments default to the current civil ones.
    """

    def __init__(
        self,
        repository: TransactionRepository,
        clock: Optional[CivilClock] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
    ):
        self._repository = repository
        self._clock = clock or CivilClock()
        self._now_fn = now_fn or (lambda: datetime.now(timezone.utc))

    @property
    def clock(self) -> CivilClock:
        return self._clock

    def current_year_month(self) -> tuple[int, int]:
        today = self._clock.today(self._now_fn())
        return today.year, today.month

    async def summary(self, user_id: str, period: str = "daily") -> PeriodSummary:
        transactions = await self._repository.list_transactions(user_id)
        return summarize(transactions, period, now=self._now_fn(), clock=self._clock)

    async def daily(
        self,
        user_id: str,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> list[DailyBalance]:
        current_year, current_month = self.current_year_month()
        transactions = await self._repository.list_transactions(user_id)
        return daily_balances(
            transactions,
            year if year is not None else current_year,
            month if month is not None else current_month,
            now=self._now_fn(),
            clock=self._clock,
        )

    async def monthly(self, user_id: str, year: Optional[int] = None) -> list[MonthlyBalance]:
        current_year, _ = self.current_year_month()
        transactions = await self._repository.list_transactions(user_id)
        return monthly_balances(
            transactions,
            year if year is not None else current_year,
            now=self._now_fn(),
            clock=self._clock,
        )

    async def weekly(self, user_id: str) -> list[WeekdayBalance]:
        transactions = await self._repository.list_transactions(user_id)
        return weekly_balances(transactions, now=self._now_fn(), clock=self._clock)

    async def chart_series(self, user_id: str, period: str) -> Optional[ChartSeries]:
        """
        The series that goes with a summary period on the dashboard.

        weekly -> this week by day, monthly -> this month by day,
        yearly -> this year by month. Daily and all-time have no chart.
        """
        resolved = SummaryPeriod.resolve(period)
        if resolved == SummaryPeriod.WEEKLY:
            return await self.weekly(user_id)
        elif resolved == SummaryPeriod.MONTHLY:
            return await self.daily(user_id)
        elif resolved == SummaryPeriod.YEARLY:
            return await self.monthly(user_id)
        return None


class AppComponents:
    """Everything an entry point needs, built once per process."""

    def __init__(
        self,
        store: RecordStoreInterface,
        authenticator: SessionAuthenticator,
        repository: TransactionRepository,
        reports: ReportFlow,
        app_settings: AppSettings,
        auth_settings: AuthSettings,
    ):
        self.store = store
        self.authenticator = authenticator
        self.repository = repository
        self.reports = reports
        self.app_settings = app_settings
        self.auth_settings = auth_settings


def create_record_store(store_settings: Optional[StoreSettings] = None) -> RecordStoreInterface:
    """
    Build the configured record store.

    Raises:
        StoreUnavailableError: If Google Sheets is selected but not configured
    """
    store_settings = store_settings or get_settings().store

    if store_settings.backend == "google_sheets":
        try:
            return GoogleSheetsRecordStore()
        except Exception as e:
            raise StoreUnavailableError(f"Google Sheets storage not configured: {e}")

    logger.warning(
        "memory_store_selected",
        detail="Data is kept in process memory and lost on restart",
    )
    return InMemoryRecordStore()


def create_app_components(
    store: Optional[RecordStoreInterface] = None,
    app_settings: Optional[AppSettings] = None,
    auth_settings: Optional[AuthSettings] = None,
    store_settings: Optional[StoreSettings] = None,
    now_fn: Optional[Callable[[], datetime]] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        store: Record store to use. Built from settings when omitted.
        app_settings: Overrides for tests; loaded from the environment otherwise
        auth_settings: Overrides for tests; loaded from the environment otherwise
        store_settings: Backend selection when `store` is omitted
        now_fn: Clock shared by sessions and reports

    Returns:
        AppComponents
    """
    settings = get_settings()
    app_settings = app_settings or settings.app
    auth_settings = auth_settings or settings.auth
    store = store or create_record_store(store_settings)

    rate_limiter = None
    if auth_settings.rate_limit_enabled:
        rate_limiter = LoginRateLimiter(
            store,
            max_attempts=auth_settings.max_login_attempts,
            lockout_seconds=auth_settings.lockout_seconds,
        )

    authenticator = SessionAuthenticator(
        store=store,
        verifier=SharedPasswordVerifier(auth_settings.password),
        user_id=app_settings.default_user_id,
        ttl_seconds=auth_settings.session_ttl_seconds,
        rate_limiter=rate_limiter,
        clock=now_fn,
    )

    repository = TransactionRepository(store, clock=now_fn)
    reports = ReportFlow(
        repository,
        clock=CivilClock(app_settings.utc_offset_minutes),
        now_fn=now_fn,
    )

    return AppComponents(
        store=store,
        authenticator=authenticator,
        repository=repository,
        reports=reports,
        app_settings=app_settings,
        auth_settings=auth_settings,
    )
