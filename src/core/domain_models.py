from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class FetchStatus(str, Enum):
    """Lifecycle of the quote fetch shown on the page."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


# --- Domain Models ---


class Citation(BaseModel):
    """A titled link the search-grounded answer was based on."""

    model_config = ConfigDict(frozen=True)

    title: str
    uri: str


class RawQuoteResponse(BaseModel):
    """
    Unparsed payload of one Gemini call.

    Citations are kept exactly as the service returned them; filtering of
    incomplete entries happens in the mapping layer.
    """

    model_config = ConfigDict(frozen=True)

    text: str = ""
    citations: list[dict[str, str | None]] = Field(default_factory=list)


class Quote(BaseModel):
    """
    Price, exchange rate and market summary derived from one fetch.

    Design Choice:
    - price and exchange_rate are independently optional. Extraction from free
      text can fail for either one; consumers treat a missing value as zero.
    - A Quote is never merged with a previous one, a refresh replaces it.
    """

    model_config = ConfigDict(frozen=True)

    price: float | None = None  # USD per share
    exchange_rate: float | None = None  # JPY per USD
    summary: str = ""
    sources: list[Citation] = Field(default_factory=list)
    last_updated: datetime

    @property
    def is_complete(self) -> bool:
        """True when both numeric fields were extracted."""
        return self.price is not None and self.exchange_rate is not None
