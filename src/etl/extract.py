"""Quote extraction layer wrapping the Gemini search-grounded API.

Sends one fixed prompt per fetch and hands the raw answer to the mapping
layer. Remote failures are translated into QuoteFetchError subclasses so the
page never has to know about SDK exception types.
"""

from typing import Any

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from loguru import logger
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)
from tenacity.wait import wait_base

from src.core.config import Settings
from src.core.domain_models import Quote, RawQuoteResponse
from src.core.mapper import parse_quote_response

QUOTE_PROMPT_TEMPLATE = """
{ticker} (Vanguard Total Stock Market ETF) の現在の株価(USD)と、最新のドル円(USD/JPY)為替レートを検索してください。

回答は以下の形式のみで行ってください：
"PRICE: <株価の数値>"
"RATE: <為替レートの数値>"
"SUMMARY: <市場状況の簡潔な日本語サマリー>"

例:
PRICE: 265.40
RATE: 150.50
SUMMARY: 本日の{ticker}はハイテク株主導で上昇しており、ドル円は米金利上昇を受けて円安傾向です。
"""


class QuoteFetchError(RuntimeError):
    """Raised when a quote could not be fetched from the remote service."""


class NetworkError(QuoteFetchError):
    """The request never got a response (connection, DNS, timeout)."""


class ServiceError(QuoteFetchError):
    """The service answered with an error or could not be called at all."""


def build_quote_prompt(ticker: str = "VTI") -> str:
    """Return the fixed Japanese prompt asking for price, rate and summary."""
    return QUOTE_PROMPT_TEMPLATE.format(ticker=ticker)


def extract_grounding_citations(response: Any) -> list[dict[str, str | None]]:
    """
    Collect {title, uri} pairs from the first candidate's grounding chunks.

    Chunks without web metadata are skipped. Title and uri are passed through
    as-is (possibly None); the mapper decides what is usable.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []

    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    citations: list[dict[str, str | None]] = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        if web is None:
            continue
        citations.append({"title": getattr(web, "title", None), "uri": getattr(web, "uri", None)})
    return citations


class QuoteFetcher:
    """Fetches the current quote from Gemini with Google Search grounding."""

    def __init__(
        self,
        settings: Settings,
        client: Any | None = None,
        retry_wait: wait_base | None = None,
    ) -> None:
        """Initialize fetcher.

        Args:
            settings: Application settings (API key, model, retry attempts)
            client: Pre-built genai client, mainly for tests. Built lazily
                from the API key when omitted.
            retry_wait: Wait strategy between attempts
        """
        self.settings = settings
        self._client = client
        self.retry_wait = retry_wait or wait_random_exponential(multiplier=1, max=10)

    @property
    def client(self) -> Any:
        if self._client is None:
            if not self.settings.gemini_api_key:
                raise ServiceError("GEMINI_API_KEY is not set")
            self._client = genai.Client(api_key=self.settings.gemini_api_key)
        return self._client

    def _generate(self) -> Any:
        """Single remote call, translating SDK failures into QuoteFetchError."""
        try:
            return self.client.models.generate_content(
                model=self.settings.gemini_model,
                contents=build_quote_prompt(self.settings.ticker),
                config=types.GenerateContentConfig(
                    tools=[types.Tool(google_search=types.GoogleSearch())],
                    temperature=self.settings.gemini_temperature,
                ),
            )
        except QuoteFetchError:
            raise
        except (httpx.TransportError, ConnectionError, TimeoutError) as e:
            logger.opt(exception=e).error("Gemini request failed (network): {}", e)
            raise NetworkError(f"Network error while contacting Gemini: {e}") from e
        except genai_errors.APIError as e:
            logger.opt(exception=e).error("Gemini API error {}: {}", e.code, e)
            raise ServiceError(f"Gemini API error {e.code}") from e
        except Exception as e:
            logger.opt(exception=e).error("Gemini API Error: {}", e)
            raise ServiceError(f"Unexpected Gemini failure: {e}") from e

    def fetch_raw(self) -> RawQuoteResponse:
        """
        Fetch the raw answer text and grounding citations.

        Performs one remote call per attempt; with fetch_max_attempts=1
        (the default) there is no retry.

        Raises:
            NetworkError: Transport failure on the last attempt
            ServiceError: API failure on the last attempt or missing API key
        """
        logger.info(
            f"[{self.settings.ticker}] Fetching quote via {self.settings.gemini_model} "
            f"(max {self.settings.fetch_max_attempts} attempts)"
        )
        # Resolve the client up front so a missing key fails without retrying
        _ = self.client

        retrying = Retrying(
            stop=stop_after_attempt(self.settings.fetch_max_attempts),
            wait=self.retry_wait,
            retry=retry_if_exception_type(QuoteFetchError),
            reraise=True,
        )
        response = retrying(self._generate)

        text = getattr(response, "text", None) or ""
        citations = extract_grounding_citations(response)
        logger.debug(f"Received {len(text)} characters and {len(citations)} grounding chunks")
        return RawQuoteResponse(text=text, citations=citations)

    def fetch(self) -> Quote:
        """Fetch and parse the current quote."""
        raw = self.fetch_raw()
        quote = parse_quote_response(raw.text, raw.citations)
        logger.success(
            f"[{self.settings.ticker}] Quote fetched: price={quote.price}, "
            f"rate={quote.exchange_rate}, sources={len(quote.sources)}"
        )
        return quote
