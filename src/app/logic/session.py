"""Per-session fetch state for the valuation page.

Holds the current quote, fetch status and share input, and implements the
Idle -> Loading -> Success/Error transitions. Pure Python - the page stores
one instance in ``st.session_state``.
"""

from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any, Protocol

from loguru import logger

from src.app.logic.valuation import is_valid_share_input
from src.core.domain_models import FetchStatus, Quote
from src.etl.extract import QuoteFetchError

SESSION_KEY = "valuation_session"
FETCH_ERROR_MESSAGE = "データの取得に失敗しました。もう一度お試しください。"


class SupportsQuoteFetch(Protocol):
    def fetch(self) -> Quote: ...


@dataclass
class ValuationSession:
    """Mutable state container owned by one browser session.

    The last quote stays visible while a refresh is running and after a
    failed refresh. Completions overwrite state in the order they arrive.
    """

    shares: str = "10"
    quote: Quote | None = None
    status: FetchStatus = FetchStatus.IDLE
    error_message: str | None = None

    @property
    def is_refresh_disabled(self) -> bool:
        return self.status == FetchStatus.LOADING

    @property
    def show_placeholder(self) -> bool:
        """True during the first load, before any quote exists."""
        return self.status == FetchStatus.LOADING and self.quote is None

    def begin_loading(self) -> None:
        self.status = FetchStatus.LOADING
        self.error_message = None

    def complete(self, quote: Quote) -> None:
        self.quote = quote
        self.status = FetchStatus.SUCCESS
        self.error_message = None

    def fail(self, error: Exception) -> None:
        # Detail goes to the log only, the page shows a generic message
        logger.error("Quote refresh failed: {!r}", error)
        self.status = FetchStatus.ERROR
        self.error_message = FETCH_ERROR_MESSAGE

    def refresh(self, fetcher: SupportsQuoteFetch) -> FetchStatus:
        """Run one fetch and record its outcome.

        Args:
            fetcher: Object providing ``fetch() -> Quote``

        Returns:
            Status after the fetch resolved
        """
        self.begin_loading()
        try:
            quote = fetcher.fetch()
        except QuoteFetchError as e:
            self.fail(e)
        else:
            self.complete(quote)
        return self.status

    def update_shares(self, value: str) -> bool:
        """Accept ``value`` if it is valid share input.

        Returns:
            True if accepted, False if rejected (stored value unchanged)
        """
        if not is_valid_share_input(value):
            logger.debug(f"Rejected share input '{value}'")
            return False
        self.shares = value
        return True


def get_session(state: MutableMapping[str, Any], default_shares: str = "10") -> ValuationSession:
    """Return the session stored in ``state``, creating it on first access."""
    if SESSION_KEY not in state:
        initial = default_shares if is_valid_share_input(default_shares) else ""
        state[SESSION_KEY] = ValuationSession(shares=initial)
    session: ValuationSession = state[SESSION_KEY]
    return session
