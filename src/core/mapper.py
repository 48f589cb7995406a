"""
Mapping Layer: Transforms the free-text Gemini answer into domain models.

The model is asked to answer in a fixed template:

    PRICE: <number>
    RATE: <number>
    SUMMARY: <free text>

Nothing enforces that template on the remote side, so every field is
extracted independently and missing values become None instead of errors.
"""

import re
from collections.abc import Iterable, Mapping
from datetime import datetime

from loguru import logger

from src.core.domain_models import Citation, Quote

DEFAULT_SOURCE_TITLE = "Source"

# Numeric literal with optional thousands separators, e.g. "1,234.56"
_NUMBER = r"([\d,]+\.?\d*)"
PRICE_PATTERN = re.compile(rf"PRICE:\s*\$?{_NUMBER}", re.IGNORECASE)
RATE_PATTERN = re.compile(rf"RATE:\s*¥?{_NUMBER}", re.IGNORECASE)
SUMMARY_PATTERN = re.compile(r"SUMMARY:\s*(.*)", re.IGNORECASE | re.DOTALL)


def parse_number(raw: str | None) -> float | None:
    """
    Parse a numeric literal, ignoring thousands separators.

    Returns None for anything float() rejects (e.g. a bare ",").
    """
    if not raw:
        return None
    try:
        return float(raw.replace(",", ""))
    except ValueError:
        logger.warning(f"Could not parse numeric value '{raw}'")
        return None


def _extract_number(pattern: re.Pattern[str], text: str) -> float | None:
    match = pattern.search(text)
    if match is None:
        return None
    return parse_number(match.group(1))


def extract_summary(text: str) -> str:
    """Return the text after the SUMMARY marker, or the whole text verbatim."""
    match = SUMMARY_PATTERN.search(text)
    if match is None:
        return text
    return match.group(1).strip()


def clean_summary(summary: str) -> str:
    """Strip template lines the model sometimes repeats inside the summary."""
    cleaned = re.sub(r"^PRICE:.*$", "", summary, count=1, flags=re.MULTILINE)
    cleaned = re.sub(r"^RATE:.*$", "", cleaned, count=1, flags=re.MULTILINE)
    cleaned = re.sub(r"^SUMMARY:", "", cleaned, count=1, flags=re.MULTILINE)
    return cleaned.strip()


def normalize_citations(chunks: Iterable[Mapping[str, str | None]]) -> list[Citation]:
    """
    Convert raw grounding entries into Citations.

    Entries without a link are dropped, a missing title falls back to a
    generic label. Order is preserved and duplicates are kept.
    """
    citations: list[Citation] = []
    for chunk in chunks:
        uri = (chunk.get("uri") or "").strip()
        if not uri:
            continue
        title = (chunk.get("title") or "").strip() or DEFAULT_SOURCE_TITLE
        citations.append(Citation(title=title, uri=uri))
    return citations


def parse_quote_response(
    raw_text: str,
    citations: Iterable[Mapping[str, str | None]] = (),
    retrieved_at: datetime | None = None,
) -> Quote:
    """
    Build a Quote from the raw answer text and its grounding citations.

    Args:
        raw_text: Free-text answer from the model
        citations: Raw {title, uri} entries in service order
        retrieved_at: Timestamp to stamp on the quote (defaults to now)

    Returns:
        Quote with price/exchange_rate set to None where extraction failed
    """
    quote = Quote(
        price=_extract_number(PRICE_PATTERN, raw_text),
        exchange_rate=_extract_number(RATE_PATTERN, raw_text),
        summary=extract_summary(raw_text),
        sources=normalize_citations(citations),
        last_updated=retrieved_at or datetime.now(),
    )
    if not quote.is_complete:
        logger.warning(
            "Quote response incomplete: price={}, rate={}", quote.price, quote.exchange_rate
        )
    return quote
