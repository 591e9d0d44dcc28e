"""
Current quotes for NSE / BSE listed stocks from Yahoo Finance.

Yahoo lists NSE stocks with a ``.NS`` suffix and BSE stocks with ``.BO``.
Symbols are fetched in fixed-size batches that run in parallel; a failed
symbol or batch is logged and skipped so the caller still gets every quote
that did come back.
"""
from __future__ import annotations

import concurrent.futures
import logging
import math
import time
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

import requests
import yfinance as yf

from config import PriceFeedConfig

logger = logging.getLogger(__name__)


class PriceFetchError(RuntimeError):
    """Raised when not a single quote could be fetched."""


@dataclass(frozen=True)
class Quote:
    last_price: float
    change: float = 0.0
    p_change: float = 0.0


class QuoteFetcher:
    """
    Usage
    -----
    fetcher = QuoteFetcher()
    quotes = fetcher.fetch(["RELIANCE", "TCS"], exchanges={"TCS": "BSE"})
    quotes["RELIANCE"].last_price
    """

    def __init__(self, config: Optional[PriceFeedConfig] = None) -> None:
        self.config = config or PriceFeedConfig()
        self.errors: list[str] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def fetch(
        self,
        symbols: Iterable[str],
        exchanges: Optional[Mapping[str, str]] = None,
    ) -> dict[str, Quote]:
        """
        Return ``{symbol: Quote}`` for every symbol that could be priced.

        ``exchanges`` maps a symbol to its exchange so the matching Yahoo
        suffix is tried first. Raises PriceFetchError only if symbols were
        requested and none of them returned a quote.
        """
        symbols = list(dict.fromkeys(s.strip() for s in symbols if s and s.strip()))
        exchanges = dict(exchanges or {})
        self.errors = []
        if not symbols:
            return {}

        size = max(self.config.batch_size, 1)
        batches = [symbols[i:i + size] for i in range(0, len(symbols), size)]
        logger.info(
            "Fetching quotes for %d symbols in %d parallel batches",
            len(symbols), len(batches),
        )

        quotes: dict[str, Quote] = {}
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            future_to_batch = {
                pool.submit(self._fetch_batch, batch, exchanges): batch for batch in batches
            }
            for future in concurrent.futures.as_completed(future_to_batch):
                batch = future_to_batch[future]
                try:
                    batch_quotes, batch_errors = future.result(timeout=self.config.request_timeout)
                except concurrent.futures.TimeoutError:
                    logger.error("Timeout fetching batch %s", batch)
                    self.errors.extend(f"{s}: timeout" for s in batch)
                    continue
                except requests.exceptions.RequestException as exc:
                    logger.error("Batch fetch failed for %s: %s", batch, exc)
                    self.errors.extend(f"{s}: {exc}" for s in batch)
                    continue
                quotes.update(batch_quotes)
                self.errors.extend(batch_errors)

        if self.errors:
            logger.warning("Failed to fetch quotes for some symbols: %s", self.errors)
        if not quotes:
            raise PriceFetchError("Could not fetch prices for any symbols. Please try again.")
        return quotes

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _fetch_batch(self, batch: list[str], exchanges: Mapping[str, str]):
        quotes, errors = {}, []
        for symbol in batch:
            quote = self._fetch_with_retry(symbol, exchanges.get(symbol))
            if quote is None:
                errors.append(f"{symbol}: No data found")
            else:
                quotes[symbol] = quote
        return quotes, errors

    def _suffixes(self, exchange: Optional[str]) -> list[str]:
        preferred = self.config.exchange_suffixes.get((exchange or "").upper())
        suffixes = [preferred] if preferred else []
        suffixes += [s for s in self.config.fallback_suffixes if s not in suffixes]
        return suffixes

    def _fetch_with_retry(self, symbol: str, exchange: Optional[str]) -> Optional[Quote]:
        delay = self.config.initial_retry_delay
        for attempt in range(self.config.max_retries + 1):
            for suffix in self._suffixes(exchange):
                quote = self._fetch_one(f"{symbol.upper()}{suffix}")
                if quote is not None:
                    logger.debug("Got quote for %s%s: %s", symbol, suffix, quote.last_price)
                    return quote
            if attempt < self.config.max_retries:
                logger.debug("All suffixes failed for %s, retrying in %.1fs", symbol, delay)
                time.sleep(delay)
                delay *= 2
        return None

    def _fetch_one(self, yahoo_symbol: str) -> Optional[Quote]:
        try:
            info = yf.Ticker(yahoo_symbol).fast_info
            last_price = info.last_price
            previous_close = info.previous_close
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.debug("Data parse error for %r: %r", yahoo_symbol, exc)
            return None
        except requests.exceptions.RequestException as exc:
            logger.debug("Network error fetching %r: %r", yahoo_symbol, exc)
            return None

        if last_price is None or math.isnan(float(last_price)) or float(last_price) <= 0:
            return None
        last_price = float(last_price)
        previous_close = float(previous_close) if previous_close and not math.isnan(float(previous_close)) else last_price
        change = last_price - previous_close
        p_change = change / previous_close * 100 if previous_close else 0.0
        return Quote(last_price=last_price, change=change, p_change=p_change)
