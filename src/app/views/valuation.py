"""View components for the holding valuation page.

Pure rendering - values are computed in src.app.logic.valuation.
"""

from collections.abc import Callable

import streamlit as st

from src.app.logic.session import ValuationSession
from src.app.logic.valuation import (
    ValuationResult,
    citations_to_frame,
    format_jpy,
    format_rate,
    format_shares,
    format_update_time,
    format_usd,
)
from src.core.domain_models import Quote
from src.core.mapper import clean_summary

SHARES_WIDGET_KEY = "shares_input"

DISCLAIMER_TEXT = (
    "**免責事項:** 本アプリケーションはAIと検索機能を使用して金融データを取得しています。"
    "価格や為替レートには遅延や誤りが含まれる可能性があります。"
    "投資判断の根拠として使用しないでください。正確な情報は証券会社等でご確認ください。"
)


def render_header(session: ValuationSession, ticker: str, on_refresh: Callable[[], None]) -> None:
    """Render page title and the refresh button.

    The button is disabled while a fetch is in flight.
    """
    col1, col2 = st.columns([4, 1], vertical_alignment="center")
    with col1:
        st.title(f"📈 {ticker} 評価額計算")
    with col2:
        label = "⏳ 更新中..." if session.is_refresh_disabled else "🔄 最新価格に更新"
        st.button(
            label,
            key="refresh_button",
            disabled=session.is_refresh_disabled,
            on_click=on_refresh,
            type="primary",
        )


def render_error_banner(session: ValuationSession) -> None:
    if session.error_message:
        st.error(session.error_message)


def render_price_card(
    quote: Quote | None,
    ticker: str,
    show_placeholder: bool,
    price: float,
    exchange_rate: float,
) -> None:
    """Render current price, exchange rate, update time and market summary.

    Args:
        quote: Latest quote or None before the first successful fetch
        ticker: Fund ticker shown in the labels
        show_placeholder: Show skeleton values during the first load
        price: Price to display (0 when unknown)
        exchange_rate: Rate to display (0 when unknown)
    """
    with st.container(border=True):
        st.caption("現在の価格情報")
        col1, col2 = st.columns(2)
        with col1:
            st.metric(
                label=f"{ticker} 株価 (USD)",
                value="..." if show_placeholder else format_usd(price),
            )
        with col2:
            st.metric(
                label="為替レート (USD/JPY)",
                value="..." if show_placeholder else format_rate(exchange_rate),
            )

        if quote is not None:
            st.caption(f"最終更新: {format_update_time(quote.last_updated)}")
        else:
            st.caption("データ待機中...")

        if quote is not None and quote.summary:
            st.divider()
            st.write(clean_summary(quote.summary))


def render_holdings_input(ticker: str, on_change: Callable[[], None]) -> None:
    """Render the share count text input.

    The widget value lives in ``st.session_state[SHARES_WIDGET_KEY]``;
    ``on_change`` validates it and restores the previous value on rejection.
    """
    with st.container(border=True):
        st.caption("保有状況")
        st.text_input(
            "保有株数",
            key=SHARES_WIDGET_KEY,
            placeholder="0",
            on_change=on_change,
            help="半角数字と小数点1つまで入力できます",
        )
        st.caption(
            f"現在保有している{ticker}の総株数を入力してください。"
            "自動的に円換算で評価額を計算します。"
        )


def render_totals(valuation: ValuationResult) -> None:
    """Render the JPY total with USD total and calculation breakdown."""
    with st.container(border=True):
        col1, col2 = st.columns([3, 2])
        with col1:
            st.caption("推定評価額 (円換算)")
            st.header(format_jpy(valuation.total_value_local))
            st.markdown(f"`{format_usd(valuation.total_value_base)} (USD)`")
        with col2:
            st.markdown("**🪙 計算内訳**")
            st.markdown(
                f"- 株数: `{format_shares(valuation.shares)} 株`\n"
                f"- 株価: `{format_usd(valuation.price)}`\n"
                f"- レート: `{format_rate(valuation.exchange_rate)}`"
            )


def render_sources(quote: Quote | None) -> None:
    """Render grounding sources as a link table, if there are any."""
    if quote is None or not quote.sources:
        return

    st.subheader("🔗 情報ソース")
    st.dataframe(
        citations_to_frame(quote.sources),
        column_config={
            "title": "Title",
            "uri": st.column_config.LinkColumn("Link"),
        },
        hide_index=True,
    )


def render_disclaimer() -> None:
    st.warning(DISCLAIMER_TEXT, icon="⚠️")
