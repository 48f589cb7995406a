"""VTI Valuation Dashboard - Main Entry Point.

Wiring layer connecting valuation logic and views.
Run with: streamlit run src/app/main.py
"""

import streamlit as st
from loguru import logger

from src.app.logic.session import get_session
from src.app.logic.valuation import calculate_valuation
from src.app.views.valuation import (
    SHARES_WIDGET_KEY,
    render_disclaimer,
    render_error_banner,
    render_header,
    render_holdings_input,
    render_price_card,
    render_sources,
    render_totals,
)
from src.core.config import get_settings
from src.core.domain_models import FetchStatus
from src.core.logging import configure_logging
from src.etl.extract import QuoteFetcher

REFRESH_REQUEST_KEY = "refresh_requested"

st.set_page_config(
    page_title="VTI 評価額計算",
    page_icon="📈",
    layout="centered",
)


@st.cache_resource
def get_quote_fetcher() -> QuoteFetcher:
    """One fetcher (and Gemini client) per server process."""
    return QuoteFetcher(get_settings())


settings = get_settings()
configure_logging(settings.log_level)

session = get_session(st.session_state, settings.default_shares)
if SHARES_WIDGET_KEY not in st.session_state:
    st.session_state[SHARES_WIDGET_KEY] = session.shares


def request_refresh() -> None:
    st.session_state[REFRESH_REQUEST_KEY] = True


def handle_shares_change() -> None:
    if not session.update_shares(st.session_state[SHARES_WIDGET_KEY]):
        st.session_state[SHARES_WIDGET_KEY] = session.shares


# Initial load, or refresh button clicked on the previous run
if session.status == FetchStatus.IDLE or st.session_state.pop(REFRESH_REQUEST_KEY, False):
    session.begin_loading()

render_header(session, settings.ticker, on_refresh=request_refresh)
render_error_banner(session)

valuation = calculate_valuation(session.shares, session.quote)

col1, col2 = st.columns(2)
with col1:
    render_price_card(
        session.quote,
        settings.ticker,
        show_placeholder=session.show_placeholder,
        price=valuation.price,
        exchange_rate=valuation.exchange_rate,
    )
with col2:
    render_holdings_input(settings.ticker, on_change=handle_shares_change)

render_totals(valuation)
render_sources(session.quote)
render_disclaimer()

# Fetch after rendering so the stale quote and disabled button stay visible
if session.status == FetchStatus.LOADING:
    with st.spinner("最新価格を取得中..."):
        status = session.refresh(get_quote_fetcher())
    logger.info(f"Refresh finished with status {status.value}")
    st.rerun()
