"""Quote sources.

- StaticQuoteSource: built-in table of well known tickers with an optional
  +/-0.5% jitter to simulate a moving market.
- HttpQuoteSource: Finnhub-style ``/quote`` endpoint (current price in ``c``),
  cached per symbol in a TTLCache.

Both expose ``quote(symbol) -> Quote`` and ``price(symbol) -> Decimal`` and
raise QuoteNotFound for unknown symbols.
"""
from __future__ import annotations
import logging
import random
import threading
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, Optional

import httpx
from cachetools import TTLCache

from config import settings
from services.errors import InvalidOrder, QuoteNotFound, QuoteUnavailable
from services.orders import normalize_symbol

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

@dataclass(frozen=True)
class Quote:
    symbol: str
    price: Decimal
    name: Optional[str] = None
    sector: Optional[str] = None
    source: str = "static"


STATIC_QUOTES: Dict[str, dict] = {
    "AAPL": {"name": "Apple Inc.", "sector": "Technology", "price": Decimal("175.50")},
    "GOOGL": {"name": "Alphabet Inc.", "sector": "Technology", "price": Decimal("140.20")},
    "MSFT": {"name": "Microsoft Corp.", "sector": "Technology", "price": Decimal("340.75")},
    "AMZN": {"name": "Amazon.com, Inc.", "sector": "Consumer Cyclical", "price": Decimal("135.10")},
    "TSLA": {"name": "Tesla, Inc.", "sector": "Consumer Cyclical", "price": Decimal("250.80")},
    "JPM": {"name": "JPMorgan Chase & Co.", "sector": "Financial Services", "price": Decimal("155.45")},
    "V": {"name": "Visa Inc.", "sector": "Financial Services", "price": Decimal("240.90")},
    "SPY": {"name": "SPDR S&P 500 ETF", "sector": "ETF", "price": Decimal("450.30")},
    "QQQ": {"name": "Invesco QQQ Trust", "sector": "ETF", "price": Decimal("380.60")},
}


def _symbol(symbol: str) -> str:
    try:
        return normalize_symbol(symbol)
    except InvalidOrder:
        raise QuoteNotFound(str(symbol))


class StaticQuoteSource:
    def __init__(self, table: Dict[str, dict] | None = None, jitter: float = 0.005, rng: Callable[[], float] | None = None):
        self.table = table if table is not None else STATIC_QUOTES
        self.jitter = jitter
        self._rng = rng or random.random

    def quote(self, symbol: str) -> Quote:
        sym = _symbol(symbol)
        row = self.table.get(sym)
        if row is None:
            raise QuoteNotFound(sym)
        base = Decimal(row["price"])
        if self.jitter:
            # rng() in [0, 1) maps to a factor in [1 - jitter, 1 + jitter)
            factor = Decimal(1) + (Decimal(str(self._rng())) - Decimal("0.5")) * Decimal(str(self.jitter * 2))
            base = base * factor
        return Quote(symbol=sym, price=base.quantize(CENT, rounding=ROUND_HALF_UP), name=row.get("name"), sector=row.get("sector"))

    def price(self, symbol: str) -> Decimal:
        return self.quote(symbol).price


class HttpQuoteSource:
    def __init__(self, base_url: str, api_key: str | None, timeout: float = 8.0, cache_ttl: int = 30, client: httpx.Client | None = None):
        self.base_url = base_url
        self.api_key = api_key
        self._client = client or httpx.Client(timeout=timeout)
        self._cache: TTLCache = TTLCache(maxsize=512, ttl=cache_ttl)
        self._cache_lock = threading.Lock()

    def quote(self, symbol: str) -> Quote:
        sym = _symbol(symbol)
        with self._cache_lock:
            cached = self._cache.get(sym)
        if cached is not None:
            return cached
        params = {"symbol": sym}
        if self.api_key:
            params["token"] = self.api_key
        try:
            r = self._client.get(self.base_url, params=params)
            r.raise_for_status()
            data = r.json()
        except httpx.HTTPError as e:
            logger.warning("Quote provider error for %s: %s", sym, e)
            raise QuoteUnavailable(f"Quote provider error: {e}") from e
        except ValueError as e:
            raise QuoteUnavailable("Quote provider returned malformed JSON") from e
        # Finnhub returns current price in `c`; 0 means unknown symbol
        c = data.get("c") if isinstance(data, dict) else None
        if c in (None, 0):
            raise QuoteNotFound(sym)
        quote = Quote(symbol=sym, price=Decimal(str(c)), source="live")
        with self._cache_lock:
            self._cache[sym] = quote
        return quote

    def price(self, symbol: str) -> Decimal:
        return self.quote(symbol).price


_quote_source = None
_quote_source_lock = threading.Lock()


def get_quote_source():
    """FastAPI dependency: the configured process-wide quote source."""
    global _quote_source
    with _quote_source_lock:
        if _quote_source is None:
            if settings.QUOTE_SOURCE == "http":
                _quote_source = HttpQuoteSource(
                    settings.QUOTE_API_URL,
                    settings.QUOTE_API_KEY,
                    timeout=settings.QUOTE_TIMEOUT_SECONDS,
                    cache_ttl=settings.QUOTE_CACHE_TTL_SECONDS,
                )
            else:
                _quote_source = StaticQuoteSource()
        return _quote_source
