"""
Streamlit Frontend for Moneybook

The single-page dashboard the owner uses every day:
- log in with the shared password
- pick a period and see income, expense and balance
- see the net-flow chart for that period
- add a transaction or delete one

DESIGN PRINCIPLES:
1. Same flows as the HTTP service (orchestrator), no logic of its own
2. Every mutation re-reads and re-renders the full list
3. Clear error messages, no hidden actions
"""

import asyncio
import html
from typing import Union

import streamlit as st
from pydantic import ValidationError

from moneybook.auth import InvalidCredentialError, RateLimitedError
from moneybook.config import get_settings
from moneybook.logs import configure_logging
from moneybook.models.reports import DailyBalance, MonthlyBalance, WeekdayBalance
from moneybook.models.transaction import TransactionDraft, TransactionType
from moneybook.orchestrator import AppComponents, create_app_components
from moneybook.services.storage import StorageError


# Page configuration
st.set_page_config(
    page_title="Moneybook",
    page_icon="💰",
    layout="centered",
    initial_sidebar_state="expanded",
)

PERIODS = ["daily", "weekly", "monthly", "yearly"]

CATEGORIES = {
    TransactionType.EXPENSE: [
        "Food", "Transport", "Shopping", "Housing",
        "Entertainment", "Health", "Education", "Other",
    ],
    TransactionType.INCOME: [
        "Salary", "Bonus", "Investment", "Part-time", "Gift", "Other",
    ],
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    app_settings = get_settings().app
    configure_logging(app_settings.log_level, json_output=app_settings.log_json)
    return create_app_components()


def format_money(value: float) -> str:
    return f"{value:,.2f}"


def chart_label(point: Union[DailyBalance, MonthlyBalance, WeekdayBalance]):
    # Labels must sort in series order on the chart axis
    if isinstance(point, WeekdayBalance):
        return f"{point.weekday} {point.day[:3]}"
    if isinstance(point, MonthlyBalance):
        return point.month
    return point.day


def main():
    """Main application entry point."""
    try:
        components = get_components()
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        st.info("Check your .env file (AUTH_PASSWORD and the storage settings).")
        st.stop()

    st.sidebar.title("💰 Moneybook")
    st.sidebar.markdown("---")

    token = st.session_state.get("auth_token")
    session = run_async(components.authenticator.get_session(token))
    if session is None:
        st.session_state.pop("auth_token", None)
        render_login_page(components)
        return

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Log out"):
        run_async(components.authenticator.logout(token))
        st.session_state.pop("auth_token", None)
        st.rerun()

    if page == "📊 Dashboard":
        render_dashboard_page(components, session.user_id)
    elif page == "⚙️ Settings":
        render_settings_page(components)


def render_login_page(components: AppComponents):
    """Render the password form."""
    st.title("🔒 Log in")

    with st.form("login"):
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in", type="primary")

    if submitted:
        try:
            st.session_state.auth_token = run_async(
                components.authenticator.login(password)
            )
            st.rerun()
        except InvalidCredentialError:
            st.error("Incorrect password")
        except RateLimitedError as e:
            st.error(str(e))
        except StorageError as e:
            st.error(f"Could not reach storage: {e}")


def render_dashboard_page(components: AppComponents, user_id: str):
    """Render summary, chart, add form and transaction list."""
    st.title("📊 Dashboard")

    period = st.radio(
        "Period",
        PERIODS,
        index=0,
        horizontal=True,
        format_func=lambda p: p.title(),
    )

    try:
        summary = run_async(components.reports.summary(user_id, period))
        series = run_async(components.reports.chart_series(user_id, period))
        transactions = run_async(components.repository.list_transactions(user_id))
    except StorageError as e:
        st.error(f"Could not load your data: {e}")
        st.stop()

    # Summary metrics
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Income", format_money(summary.total_income))
    col2.metric("Expense", format_money(summary.total_expense))
    col3.metric("Balance", format_money(summary.balance))
    col4.metric("Transactions", summary.transaction_count)

    # Net-flow chart
    if series:
        labels = [chart_label(point) for point in series]
        st.bar_chart(
            {"label": labels, "net flow": [point.balance for point in series]},
            x="label",
            y="net flow",
        )

    st.markdown("---")
    render_add_form(components, user_id)

    st.markdown("---")
    st.subheader("🧾 Transactions")

    if not transactions:
        st.info("No transactions yet. Add your first one above.")
        return

    clock = components.reports.clock
    for transaction in sorted(transactions, key=lambda t: t.timestamp, reverse=True):
        sign = "+" if transaction.is_income else "-"
        when = clock.civil(transaction.timestamp).strftime("%Y-%m-%d %H:%M")
        label = html.unescape(transaction.category)
        if transaction.description:
            label += f" · {html.unescape(transaction.description)}"

        col1, col2, col3 = st.columns([4, 2, 1])
        col1.markdown(f"**{label}**  \n{when}")
        col2.markdown(f"{sign}{transaction.amount}")
        if col3.button("🗑️", key=f"delete_{transaction.id}", help="Delete"):
            try:
                run_async(components.repository.remove(user_id, transaction.id))
                st.rerun()
            except StorageError as e:
                st.error(f"Failed to delete: {e}")


def render_add_form(components: AppComponents, user_id: str):
    """Render the add-transaction form."""
    st.subheader("➕ Add transaction")

    tx_type = st.radio(
        "Type",
        list(TransactionType),
        horizontal=True,
        format_func=lambda t: t.value.title(),
        key="new_type",
    )

    with st.form("add_transaction", clear_on_submit=True):
        amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f")
        category = st.selectbox("Category", CATEGORIES[tx_type])
        description = st.text_input("Note (optional)")
        submitted = st.form_submit_button("Save", type="primary")

    if submitted:
        try:
            draft = TransactionDraft(
                type=tx_type,
                amount=amount,
                category=category,
                description=description or None,
            )
        except ValidationError as e:
            st.error(f"Invalid transaction: {e.errors()[0]['msg']}")
            return

        try:
            run_async(components.repository.append(user_id, draft))
            st.rerun()
        except StorageError as e:
            st.error(f"Failed to save: {e}")


def render_settings_page(components: AppComponents):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    from moneybook.config import validate_all_settings

    status = validate_all_settings()

    sections = [
        ("Login", "auth"),
        ("Storage backend", "store"),
        ("Google Sheets", "google_sheets"),
        ("Application", "app"),
    ]

    for name, key in sections:
        if key not in status:
            continue
        if status[key]:
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    offset = components.app_settings.utc_offset_minutes
    sign = "+" if offset >= 0 else "-"
    hours, minutes = divmod(abs(offset), 60)
    st.markdown(f"**Reporting timezone:** UTC{sign}{hours:02d}:{minutes:02d}")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
