import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import logging

import streamlit as st
import pandas as pd
import plotly.express as px

from tracker.api import ApiClient, ApiError, AuthClient
from tracker.config import Settings
from tracker.derived import category_label, format_money, signed_amount
from tracker.domain import INCOME, TRANSACTION_TYPES
from tracker.manager import TransactionManager
from tracker.session import TokenHolder, TokenStorage

COLORS = [
    "#0ea5e9", "#22c55e", "#f59e0b", "#ef4444", "#8b5cf6",
    "#14b8a6", "#e11d48", "#a3e635", "#06b6d4", "#fb7185",
]

settings = Settings.from_env()
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("expense-tracker")

st.set_page_config(page_title="Expense Tracker", layout="wide", page_icon="💸")


def run(coro):
    return asyncio.run(coro)


if "tokens" not in st.session_state:
    storage = TokenStorage(settings.token_file)
    st.session_state.storage = storage
    st.session_state.tokens = TokenHolder(storage.load())
    st.session_state.api = ApiClient(
        st.session_state.tokens,
        verify=settings.verify_tls,
        timeout=settings.request_timeout,
    )
    st.session_state.auth = AuthClient(
        st.session_state.api, settings.login_url, settings.register_url, storage
    )
    st.session_state.is_register = False
    st.session_state.pending_delete = None
    st.session_state.form_nonce = 0

tokens: TokenHolder = st.session_state.tokens


def login_page():
    is_register = st.session_state.is_register
    _, middle, _ = st.columns([1, 2, 1])
    with middle:
        st.title("Register" if is_register else "Login")
        with st.form("auth_form", clear_on_submit=False):
            email = st.text_input("Email", key="auth_email")
            password = st.text_input("Password", type="password", key="auth_password")
            submitted = st.form_submit_button("Register" if is_register else "Login")

        if submitted:
            if is_register:
                try:
                    st.session_state.auth.register(email, password)
                except ApiError as e:
                    logger.error("Register failed: %s", e)
                    st.error("Error registering user.")
                else:
                    st.session_state.is_register = False
                    for k in ("auth_email", "auth_password"):
                        st.session_state.pop(k, None)
                    st.success("User registered successfully. You can now log in.")
            else:
                try:
                    st.session_state.auth.login(email, password)
                except ApiError as e:
                    logger.error("Login failed: %s", e)
                    st.error("Login failed")
                else:
                    st.rerun()

        toggle = "You have an account? Log in" if is_register else "You don't have an account? Register"
        if st.button(toggle, key="btn_toggle_auth"):
            st.session_state.is_register = not is_register
            st.rerun()


def get_manager() -> TransactionManager:
    if "manager" not in st.session_state:
        manager = TransactionManager(
            st.session_state.api, settings.transactions_url, settings.categories_url
        )
        run(manager.mount())
        st.session_state.manager = manager
    return st.session_state.manager


def header(state):
    left, right = st.columns([3, 1])
    with left:
        st.title("Expense Tracker")
        st.caption("Add expenses and income")
    with right:
        color = "green" if state.budget >= 0 else "red"
        st.caption("Current Budget")
        st.markdown(f"## :{color}[{format_money(state.budget, settings.currency)}]")


def transaction_form(manager: TransactionManager):
    state = manager.state
    nonce = st.session_state.form_nonce
    cat_options = [""] + [str(c.id) for c in state.categories]

    st.subheader("New Transaction")
    with st.form(f"tx_form_{nonce}"):
        c1, c2, c3, c4 = st.columns([2, 3, 3, 3])
        with c1:
            tx_type = st.selectbox(
                "Type", TRANSACTION_TYPES,
                index=TRANSACTION_TYPES.index(state.form.type),
                format_func=str.capitalize,
            )
        with c2:
            category_id = st.selectbox(
                "Category", cat_options,
                format_func=lambda v: ("Loading…" if state.cat_loading else "Select a category")
                if v == "" else state.category_map.get(v, v),
                disabled=state.cat_loading,
            )
        with c3:
            amount = st.text_input("Amount", placeholder="0.00")
        with c4:
            description = st.text_input("Description", placeholder="Optional")
        submitted = st.form_submit_button(
            "Saving…" if state.loading else "Add", disabled=state.loading
        )

    if submitted:
        manager.update_form(category_id=category_id, type=tx_type, amount=amount, description=description)
        if run(manager.submit()):
            st.session_state.form_nonce += 1
            st.rerun()

    if state.error:
        st.error(state.error)


def pie_chart(manager: TransactionManager):
    state = manager.state
    head, button = st.columns([4, 1])
    with head:
        st.subheader("Expenses by Category")
    with button:
        if st.button("Updating…" if state.pie_loading else "Refresh", key="btn_refresh_pie",
                     disabled=state.pie_loading):
            run(manager.refresh_pie())
            st.rerun()

    if not state.pie and not state.pie_loading:
        st.info("No expense data")
        return

    df = pd.DataFrame([{"name": s.name, "value": s.value} for s in state.pie])
    fig = px.pie(df, names="name", values="value", hole=0.55, color_discrete_sequence=COLORS)
    fig.update_traces(hovertemplate="%{label}: %{value:,.2f} " + settings.currency)
    fig.update_layout(margin=dict(t=10, b=10, l=10, r=10), height=320)
    st.plotly_chart(fig, use_container_width=True)


def transactions_table(manager: TransactionManager):
    state = manager.state
    head, button = st.columns([4, 1])
    with head:
        st.subheader("Transactions")
    with button:
        if st.button("Updating…" if state.loading else "Refresh", key="btn_refresh_tx",
                     disabled=state.loading):
            run(manager.refresh_transactions())
            st.rerun()

    if not state.transactions and not state.loading:
        st.info("No transactions.")
        return

    widths = [2, 1, 2, 3, 2, 1]
    for col, title in zip(st.columns(widths), ["Date", "Type", "Category", "Description", "Amount", "Actions"]):
        col.markdown(f"**{title}**")

    for i, t in enumerate(state.transactions):
        date_col, type_col, cat_col, desc_col, amt_col, act_col = st.columns(widths)
        date_col.write(t.date.strftime("%Y-%m-%d %H:%M") if t.date is not None else "-")
        type_col.markdown(f":{'green' if t.type == INCOME else 'red'}[{t.type}]")
        cat_col.write(category_label(state.category_map, t.category_id))
        desc_col.write(t.description or "—")
        amt_col.write(format_money(signed_amount(t), settings.currency))
        if act_col.button("Delete", key=f"del_{i}_{t.transaction_id}"):
            st.session_state.pending_delete = t.transaction_id
            st.rerun()

    pending = st.session_state.pending_delete
    if pending is not None:
        st.warning("Delete this transaction?")
        yes, no = st.columns(2)
        answer = None
        if yes.button("Yes, delete", key="btn_confirm_delete"):
            answer = True
        if no.button("Cancel", key="btn_cancel_delete"):
            answer = False
        if answer is not None:
            st.session_state.pending_delete = None
            run(manager.delete(pending, confirm=lambda: answer))
            st.rerun()


if not tokens.is_authenticated():
    login_page()
    st.stop()

manager = get_manager()
header(manager.state)
st.divider()
transaction_form(manager)
st.divider()
pie_chart(manager)
st.divider()
transactions_table(manager)
