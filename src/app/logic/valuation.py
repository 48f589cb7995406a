"""Logic layer for the holding valuation page.

Share count validation, derived totals and currency formatting.
Pure Python - no Streamlit UI calls.
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Context, Decimal

import polars as pl

from src.core.domain_models import Citation, Quote

# Empty, or digits with at most one decimal point
SHARE_INPUT_PATTERN = re.compile(r"^\d*\.?\d*$")

CITATION_SCHEMA = {"title": pl.Utf8, "uri": pl.Utf8}

# Enough digits to quantize any finite float (up to ~1.8e308) to cents
_ROUNDING_CONTEXT = Context(prec=330)


@dataclass(frozen=True)
class ValuationResult:
    """Inputs and derived totals of one valuation."""

    shares: float
    price: float
    exchange_rate: float
    total_value_base: float  # USD
    total_value_local: float  # JPY


def is_valid_share_input(text: str) -> bool:
    """Check whether ``text`` is acceptable as share count input."""
    return text == "" or SHARE_INPUT_PATTERN.fullmatch(text) is not None


def parse_share_count(text: str) -> float:
    """Parse share count text, treating empty or invalid input as 0."""
    if not is_valid_share_input(text):
        return 0.0
    try:
        return float(text)
    except ValueError:
        # "" and "." pass validation but are not numbers
        return 0.0


def calculate_valuation(shares_text: str, quote: Quote | None) -> ValuationResult:
    """Derive USD and JPY totals for the entered share count.

    Missing price or exchange rate (or no quote at all) count as 0, so the
    totals degrade to 0 instead of failing.

    Args:
        shares_text: Raw share count input
        quote: Latest quote, if any

    Returns:
        ValuationResult with both totals
    """
    shares = parse_share_count(shares_text)
    price = (quote.price if quote else None) or 0.0
    exchange_rate = (quote.exchange_rate if quote else None) or 0.0

    # A missing factor zeroes the total, even against an infinite share count
    total_value_base = shares * price if shares and price else 0.0
    total_value_local = (
        total_value_base * exchange_rate if total_value_base and exchange_rate else 0.0
    )

    return ValuationResult(
        shares=shares,
        price=price,
        exchange_rate=exchange_rate,
        total_value_base=total_value_base,
        total_value_local=total_value_local,
    )


def _round_half_up(value: float, digits: int) -> Decimal:
    quantum = Decimal(1).scaleb(-digits)
    return Decimal(repr(value)).quantize(
        quantum, rounding=ROUND_HALF_UP, context=_ROUNDING_CONTEXT
    )


def _format_currency(value: float, symbol: str, digits: int) -> str:
    # Decimal cannot quantize inf/nan, render them like Intl.NumberFormat
    if math.isnan(value):
        return f"{symbol}NaN"
    if math.isinf(value):
        return f"{'-' if value < 0 else ''}{symbol}∞"

    amount = _round_half_up(value, digits)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.{digits}f}"


def format_usd(value: float) -> str:
    """Format as US dollars, e.g. ``$2,654.00``."""
    return _format_currency(value, "$", 2)


def format_jpy(value: float) -> str:
    """Format as whole yen, e.g. ``￥399,427``."""
    return _format_currency(value, "￥", 0)


def format_rate(value: float) -> str:
    """Format the USD/JPY rate, e.g. ``¥150.50``."""
    return f"¥{value:.2f}"


def format_shares(value: float) -> str:
    """Render a share count without a trailing ``.0`` for whole numbers."""
    if value.is_integer():
        return f"{int(value)}"
    return str(value)


def citations_to_frame(sources: list[Citation]) -> pl.DataFrame:
    """Tabulate citations in their original order for display."""
    if not sources:
        return pl.DataFrame(schema=CITATION_SCHEMA)
    return pl.DataFrame([s.model_dump() for s in sources], schema=CITATION_SCHEMA)


def format_update_time(value: datetime) -> str:
    """Render a timestamp as ``H:MM:SS`` with an unpadded hour."""
    return f"{value.hour}:{value:%M:%S}"
