"""Tests for share input handling, derived totals and formatting."""

import math
from datetime import datetime

import pytest

from src.app.logic.valuation import (
    calculate_valuation,
    citations_to_frame,
    format_jpy,
    format_rate,
    format_shares,
    format_update_time,
    format_usd,
    is_valid_share_input,
    parse_share_count,
)
from src.core.domain_models import Citation, Quote


def _quote(price: float | None, rate: float | None) -> Quote:
    return Quote(price=price, exchange_rate=rate, last_updated=datetime(2026, 1, 1))


@pytest.mark.parametrize("text", ["", "10", "1.2", ".5", "3.", "007"])
def test_valid_share_input(text: str) -> None:
    assert is_valid_share_input(text)


@pytest.mark.parametrize("text", ["1.2.3", "abc", "-1", "1e3", " 1", "1,000"])
def test_invalid_share_input(text: str) -> None:
    assert not is_valid_share_input(text)


def test_parse_share_count_defaults_to_zero() -> None:
    assert parse_share_count("10") == 10.0
    assert parse_share_count("2.5") == 2.5
    assert parse_share_count("") == 0.0
    assert parse_share_count(".") == 0.0
    assert parse_share_count("1.2.3") == 0.0


def test_reference_valuation() -> None:
    result = calculate_valuation("10", _quote(265.40, 150.50))

    assert result.total_value_base == pytest.approx(2654.00)
    assert result.total_value_local == pytest.approx(399427.00)
    assert format_usd(result.total_value_base) == "$2,654.00"
    assert format_jpy(result.total_value_local) == "￥399,427"


def test_missing_rate_gives_zero_local_total() -> None:
    result = calculate_valuation("10", _quote(265.40, None))

    assert result.total_value_base == pytest.approx(2654.00)
    assert result.exchange_rate == 0.0
    assert result.total_value_local == 0.0


def test_missing_price_gives_zero_totals() -> None:
    result = calculate_valuation("10", _quote(None, 150.50))

    assert result.total_value_base == 0.0
    assert result.total_value_local == 0.0


def test_no_quote_gives_zero_totals() -> None:
    result = calculate_valuation("10", None)

    assert result.shares == 10.0
    assert result.total_value_base == 0.0
    assert result.total_value_local == 0.0


def test_formatting() -> None:
    assert format_usd(0) == "$0.00"
    assert format_usd(1234567.891) == "$1,234,567.89"
    assert format_jpy(0) == "￥0"
    assert format_jpy(1234.5) == "￥1,235"
    assert format_rate(150.5) == "¥150.50"
    assert format_shares(10.0) == "10"
    assert format_shares(2.5) == "2.5"


def test_citations_to_frame_keeps_order() -> None:
    sources = [
        Citation(title="b", uri="https://b.example"),
        Citation(title="a", uri="https://a.example"),
    ]
    df = citations_to_frame(sources)

    assert df.columns == ["title", "uri"]
    assert df["title"].to_list() == ["b", "a"]
    assert citations_to_frame([]).is_empty()


@pytest.mark.parametrize(
    "value, usd, jpy",
    [
        (math.inf, "$∞", "￥∞"),
        (-math.inf, "-$∞", "-￥∞"),
        (math.nan, "$NaN", "￥NaN"),
    ],
)
def test_non_finite_formatting(value: float, usd: str, jpy: str) -> None:
    assert format_usd(value) == usd
    assert format_jpy(value) == jpy


def test_huge_finite_values_format() -> None:
    assert format_usd(1e300).startswith("$1,000,000")
    assert format_usd(1e300).endswith(".00")
    assert format_jpy(1e30).startswith("￥1,000,000")


def test_long_digit_share_count() -> None:
    shares = "9" * 400
    assert is_valid_share_input(shares)

    result = calculate_valuation(shares, _quote(265.40, 150.50))
    assert math.isinf(result.total_value_base)
    assert format_usd(result.total_value_base) == "$∞"
    assert format_jpy(result.total_value_local) == "￥∞"

    no_quote = calculate_valuation(shares, None)
    assert no_quote.total_value_base == 0.0
    assert no_quote.total_value_local == 0.0
    assert format_jpy(no_quote.total_value_local) == "￥0"


def test_format_update_time_hour_not_padded() -> None:
    assert format_update_time(datetime(2026, 10, 16, 9, 5, 7)) == "9:05:07"
    assert format_update_time(datetime(2026, 10, 16, 21, 30, 0)) == "21:30:00"
