"""
Streamlit Frontend for Personal Ledger

The screen a user keeps open to record money coming in and going out.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Clear error messages in simple language
3. The balance on screen always catches up with the real balance
4. Nothing is shown as saved unless storage accepted it

Every change goes through LedgerSession, which validates, saves and
only then updates the balance.
"""

import asyncio
import time
from datetime import date, datetime, time as dt_time, timedelta
from uuid import UUID

import streamlit as st

from src.config import get_settings, validate_all_settings
from src.ledger import BalanceAnimator
from src.ledger.formatters import (
    amount_tone,
    capitalize_first,
    format_currency,
    format_datetime,
    format_signed_amount,
)
from src.models.transaction import TransactionDraft
from src.orchestrator import AuthFlow, LedgerSession, create_app_components


OFFLINE_USER_ID = "local"


# Page configuration
st.set_page_config(
    page_title="Personal Ledger",
    page_icon="💰",
    layout="centered",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .error-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
    .income { color: #28a745; }
    .expense { color: #dc3545; }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        return create_app_components(use_storage=False)


def start_session(user_id: str) -> None:
    """Open a ledger session for the signed-in user."""
    _, storage, audit_logger = get_components()
    session = LedgerSession(user_id, storage=storage, audit_logger=audit_logger)
    result = run_async(session.start())
    if not result.success:
        st.error(result.error)

    app_settings = get_settings().app
    st.session_state.session = session
    st.session_state.animator = BalanceAnimator(
        steps=app_settings.balance_animation_steps,
        interval=app_settings.balance_animation_interval,
    )


def end_session(auth_flow: AuthFlow) -> None:
    session = st.session_state.get("session")
    if session is not None:
        run_async(session.end())
    if auth_flow is not None:
        run_async(auth_flow.sign_out())
    st.session_state.session = None
    st.session_state.animator = None


def main():
    """Main application entry point."""
    auth_flow, _, _ = get_components()

    if "session" not in st.session_state:
        st.session_state.session = None
    if "auth_page" not in st.session_state:
        st.session_state.auth_page = "login"  # login, signup, reset

    if st.session_state.session is None:
        render_auth_page(auth_flow)
        return

    # Sidebar navigation
    st.sidebar.title("💰 Personal Ledger")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["💸 Transactions", "📊 Summary", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **How to use:**
        1. Enter a name and a signed amount
        2. Use **+** for money in, **-** for money out
        3. Pick when it happened and save
        """
    )

    if st.sidebar.button("🚪 Sign Out"):
        end_session(auth_flow)
        st.rerun()

    session: LedgerSession = st.session_state.session
    if page == "💸 Transactions":
        render_transactions_page(session)
    elif page == "📊 Summary":
        render_summary_page(session)
    elif page == "⚙️ Settings":
        render_settings_page()


# =============================================================================
# AUTH PAGES
# =============================================================================

def render_auth_page(auth_flow: AuthFlow):
    """Render login / sign-up / password reset."""
    st.title("💰 Personal Ledger")

    if auth_flow is None:
        st.warning(
            "Sign-in is not configured. Your transactions will only be kept "
            "until you close this page."
        )
        if st.button("Continue Offline", type="primary"):
            start_session(OFFLINE_USER_ID)
            st.rerun()
        return

    page = st.session_state.auth_page
    if page == "signup":
        render_signup_form(auth_flow)
    elif page == "reset":
        render_reset_form(auth_flow)
    else:
        render_login_form(auth_flow)


def render_login_form(auth_flow: AuthFlow):
    st.subheader("Sign In")

    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign In", type="primary")

    if submitted:
        with st.spinner("Signing in..."):
            result = run_async(auth_flow.sign_in(email.strip(), password))
        if result.success:
            start_session(result.user_id)
            st.rerun()
        else:
            st.error(result.error)

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Create an account"):
            st.session_state.auth_page = "signup"
            st.rerun()
    with col2:
        if st.button("Forgot password?"):
            st.session_state.auth_page = "reset"
            st.rerun()


def render_signup_form(auth_flow: AuthFlow):
    st.subheader("Create Account")

    with st.form("signup_form"):
        username = st.text_input("Username")
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        confirm = st.text_input("Confirm Password", type="password")
        submitted = st.form_submit_button("Sign Up", type="primary")

    if submitted:
        with st.spinner("Creating your account..."):
            result = run_async(
                auth_flow.sign_up(
                    email=email.strip(),
                    password=password,
                    confirm=confirm,
                    username=username.strip(),
                )
            )
        if not result.success:
            st.error(result.error)
        elif result.needs_confirmation:
            st.markdown("""
            <div class="success-box">
                <h4>📧 Check your email</h4>
                <p>Confirm your address, then sign in.</p>
            </div>
            """, unsafe_allow_html=True)
        else:
            start_session(result.user_id)
            st.rerun()

    if st.button("Back to sign in"):
        st.session_state.auth_page = "login"
        st.rerun()


def render_reset_form(auth_flow: AuthFlow):
    st.subheader("Reset Password")

    email = st.text_input("Email")
    if st.button("Send reset link", type="primary"):
        result = run_async(auth_flow.reset_password(email.strip()))
        if result.success:
            st.success("If that address has an account, a reset link is on its way.")
        else:
            st.error(result.error)

    if st.button("Back to sign in"):
        st.session_state.auth_page = "login"
        st.rerun()


# =============================================================================
# LEDGER PAGES
# =============================================================================

def render_balance(session: LedgerSession):
    """Show the balance, counting towards the real value after a change."""
    animator: BalanceAnimator = st.session_state.animator
    currency = get_settings().app.currency_symbol
    animator.set_target(session.balance)
    placeholder = st.empty()

    def draw(value):
        placeholder.markdown(
            f'<div class="big-number {amount_tone(value)}">{format_currency(value, currency)}</div>',
            unsafe_allow_html=True,
        )

    draw(animator.current)
    for value in animator.frames():
        time.sleep(animator.interval)
        draw(value)


def render_transactions_page(session: LedgerSession):
    st.title("💸 Transactions")

    st.markdown("### Current Balance")
    render_balance(session)

    st.markdown("---")
    render_add_form(session)

    st.markdown("---")
    render_history(session)


def render_add_form(session: LedgerSession):
    st.subheader("Add Transaction")

    with st.form("add_transaction", clear_on_submit=True):
        name = st.text_input("Name *", placeholder="e.g., Salary")
        amount = st.text_input(
            "Amount *",
            placeholder="+5000 or -250",
            help="Start with + for money in or - for money out",
        )
        col1, col2 = st.columns(2)
        with col1:
            on_date = st.date_input("Date *", value=date.today(), max_value=date.today())
        with col2:
            at_time = st.time_input("Time *", value=datetime.now().time().replace(second=0, microsecond=0))
        category = st.text_input("Category (optional)")
        description = st.text_area("Description (optional)")
        submitted = st.form_submit_button("💾 Save", type="primary")

    if submitted:
        occurred_at = datetime.combine(on_date, at_time or dt_time())
        draft = TransactionDraft(
            name=name,
            description=description,
            amount=amount,
            occurred_at=occurred_at.isoformat(),
            category=category or None,
        )
        with st.spinner("Saving..."):
            result = run_async(session.add_transaction(draft))
        if result.success:
            st.success(f"Saved {result.transaction.name}")
            st.rerun()
        else:
            for issue in result.issues or [result.error]:
                st.error(issue)


def render_history(session: LedgerSession):
    transactions = session.transactions
    currency = get_settings().app.currency_symbol

    with st.expander(f"📜 History ({len(transactions)})", expanded=True):
        if not transactions:
            st.info("No transactions yet. Add your first one above.")
            return

        for tx in transactions:
            col1, col2, col3 = st.columns([4, 2, 1])
            with col1:
                st.markdown(f"**{tx.name}**")
                caption = tx.display_time
                if tx.category:
                    caption = f"{capitalize_first(tx.category)} · {caption}"
                st.caption(caption)
                if tx.description:
                    st.caption(tx.description)
            with col2:
                st.markdown(
                    f'<span class="{amount_tone(tx.amount)}">{format_signed_amount(tx.amount, currency)}</span>',
                    unsafe_allow_html=True,
                )
            with col3:
                if st.button("🗑️", key=f"delete_{tx.id}", help="Delete"):
                    delete_transaction(session, tx.id)


def delete_transaction(session: LedgerSession, transaction_id: UUID):
    result = run_async(session.remove_transaction(transaction_id))
    if result.success:
        st.rerun()
    else:
        st.error(result.error)


def render_summary_page(session: LedgerSession):
    st.title("📊 Summary")
    currency = get_settings().app.currency_symbol

    today = date.today()
    date_range = st.date_input(
        "Date Range",
        value=[today.replace(day=1), today],
        help="Select date range",
    )
    if len(date_range) != 2:
        st.info("Pick a start and end date.")
        return

    start = datetime.combine(date_range[0], dt_time.min).astimezone()
    end = datetime.combine(date_range[1] + timedelta(days=1), dt_time.min).astimezone()

    summary = run_async(session.summary(start, end))
    if summary is None:
        st.error("Summary is unavailable right now.")
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Income", format_currency(summary.total_income, currency))
    col2.metric("Expenses", format_currency(summary.total_expenses, currency))
    col3.metric("Net", format_currency(summary.net_balance, currency))
    st.caption(f"{summary.transaction_count} transactions · updated {format_datetime(datetime.now())}")

    expenses = run_async(session.category_expenses(start, end))
    if expenses:
        st.markdown("### Spending by Category")
        for row in expenses:
            st.markdown(f"- **{capitalize_first(row.category)}**: {format_currency(row.total_amount, currency)}")


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    app_settings = get_settings().app
    st.markdown(f"**Environment:** {app_settings.app_environment}")
    if app_settings.debug_mode:
        st.markdown(f"**Signed in as:** `{st.session_state.session.owner_id}`")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Supabase (Accounts & Transactions)", "supabase"),
        ("Google Sheets (Audit Log)", "google_sheets"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your keys. "
        "See `.env.example` for the required variables."
    )


if __name__ == "__main__":
    main()
