"""Tests for the valuation page fetch state machine."""

from datetime import datetime

import pytest

from src.app.logic.session import (
    FETCH_ERROR_MESSAGE,
    SESSION_KEY,
    ValuationSession,
    get_session,
)
from src.core.domain_models import FetchStatus, Quote
from src.etl.extract import NetworkError, ServiceError


def _quote(price: float) -> Quote:
    return Quote(price=price, exchange_rate=150.0, summary="s", last_updated=datetime(2026, 1, 1))


class StubFetcher:
    def __init__(self, outcome: Quote | Exception) -> None:
        self.outcome = outcome
        self.calls = 0

    def fetch(self) -> Quote:
        self.calls += 1
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def test_initial_state_is_idle() -> None:
    session = ValuationSession()

    assert session.status == FetchStatus.IDLE
    assert session.quote is None
    assert not session.is_refresh_disabled


def test_first_load_shows_placeholder_and_disables_refresh() -> None:
    session = ValuationSession()
    session.begin_loading()

    assert session.status == FetchStatus.LOADING
    assert session.is_refresh_disabled
    assert session.show_placeholder


def test_successful_refresh() -> None:
    session = ValuationSession()
    quote = _quote(265.40)
    fetcher = StubFetcher(quote)

    status = session.refresh(fetcher)

    assert status == FetchStatus.SUCCESS
    assert session.quote == quote
    assert session.error_message is None
    assert fetcher.calls == 1


def test_reload_keeps_stale_quote_visible() -> None:
    session = ValuationSession()
    session.complete(_quote(265.40))
    session.fail(NetworkError("offline"))

    session.begin_loading()

    assert session.quote is not None
    assert session.error_message is None
    assert not session.show_placeholder


def test_failed_refresh_keeps_prior_quote_and_hides_detail() -> None:
    session = ValuationSession()
    prior = _quote(265.40)
    session.complete(prior)

    status = session.refresh(StubFetcher(ServiceError("quota exceeded: secret detail")))

    assert status == FetchStatus.ERROR
    assert session.quote == prior
    assert session.error_message == FETCH_ERROR_MESSAGE
    assert "secret detail" not in session.error_message


def test_refresh_after_error_clears_message() -> None:
    session = ValuationSession()
    session.refresh(StubFetcher(NetworkError("offline")))
    assert session.status == FetchStatus.ERROR

    session.refresh(StubFetcher(_quote(270.0)))

    assert session.status == FetchStatus.SUCCESS
    assert session.error_message is None
    assert session.quote is not None and session.quote.price == 270.0


def test_unexpected_exceptions_propagate() -> None:
    session = ValuationSession()

    with pytest.raises(KeyError):
        session.refresh(StubFetcher(KeyError("bug")))


@pytest.mark.parametrize(
    "outcomes, expected",
    [
        (["a", "b"], FetchStatus.SUCCESS),
        (["a", "error"], FetchStatus.ERROR),
        (["error", "b"], FetchStatus.SUCCESS),
    ],
)
def test_overlapping_refreshes_last_resolution_wins(
    outcomes: list[str], expected: FetchStatus
) -> None:
    session = ValuationSession()
    quotes = {"a": _quote(1.0), "b": _quote(2.0)}

    # Two requests started before either resolves
    session.begin_loading()
    session.begin_loading()
    for outcome in outcomes:
        if outcome == "error":
            session.fail(NetworkError("timeout"))
        else:
            session.complete(quotes[outcome])

    assert session.status == expected
    if outcomes[-1] != "error":
        assert session.quote == quotes[outcomes[-1]]


def test_share_input_rejects_invalid_keystroke() -> None:
    session = ValuationSession(shares="1.2")

    assert not session.update_shares("1.2.3")
    assert session.shares == "1.2"

    assert not session.update_shares("1.2a")
    assert session.shares == "1.2"

    assert session.update_shares("1.25")
    assert session.shares == "1.25"

    assert session.update_shares("")
    assert session.shares == ""


def test_get_session_creates_once() -> None:
    state: dict[str, object] = {}

    session = get_session(state, default_shares="10")
    session.update_shares("7")

    assert state[SESSION_KEY] is session
    assert get_session(state).shares == "7"


def test_get_session_ignores_invalid_default() -> None:
    assert get_session({}, default_shares="ten").shares == ""
