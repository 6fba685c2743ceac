"""
Throttled Fetch Scheduler

Issues one ticker request per (exchange, symbol) pair while respecting
exchange rate limits:
- A RateLimiter spaces request starts by a fixed minimum interval, so the
  aggregate request rate never exceeds one request per interval
- A semaphore bounds the number of requests in flight
- Each request fails on its own; a failure is logged and skipped
- Anything other than a QuoteError cancels the remaining requests and propagates
"""

import asyncio
import logging
import time
from typing import Callable, Iterable, Optional

from exchanges.base import Quote, QuoteError
from src.core.scan_log import ScanLog
from engine import aggregate_quotes
from config import REQUEST_INTERVAL, MAX_CONCURRENT_REQUESTS

logger = logging.getLogger(__name__)


class RateLimiter:
    """Minimum spacing between consecutive acquisitions"""

    def __init__(self, interval: float = REQUEST_INTERVAL, clock: Callable[[], float] = time.monotonic):
        if interval < 0:
            raise ValueError("interval must be >= 0")
        self.interval = interval
        self._clock = clock
        self._lock = asyncio.Lock()
        self._next_slot: Optional[float] = None

    async def acquire(self):
        """Wait for the next free slot"""
        async with self._lock:
            now = self._clock()
            if self._next_slot is not None and now < self._next_slot:
                await asyncio.sleep(self._next_slot - now)
                now = self._clock()
            self._next_slot = now + self.interval


def unique_pairs(exchanges: Iterable[str], symbols: Iterable[str]) -> list[tuple[str, str]]:
    """E x S in iteration order, each (exchange, symbol) once"""
    symbols = list(dict.fromkeys(symbols))
    pairs = []
    for exchange in dict.fromkeys(exchanges):
        for symbol in symbols:
            pairs.append((exchange, symbol))
    return pairs


class ThrottledFetchScheduler:
    """
    Fetches quotes for every selected (exchange, symbol) pair.

    Results come back in E x S order regardless of which request finished
    first, so downstream tie-breaks stay deterministic.
    """

    def __init__(
        self,
        quote_source,
        scan_log: Optional[ScanLog] = None,
        interval: float = REQUEST_INTERVAL,
        max_concurrency: int = MAX_CONCURRENT_REQUESTS,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.quote_source = quote_source
        self.scan_log = scan_log
        self.max_concurrency = max_concurrency
        self.rate_limiter = rate_limiter or RateLimiter(interval)

        # Statistics
        self.total_requests = 0
        self.total_failures = 0

    async def _fetch_one(self, semaphore: asyncio.Semaphore, exchange: str, symbol: str) -> Optional[Quote]:
        async with semaphore:
            await self.rate_limiter.acquire()
            self.total_requests += 1
            try:
                quote = await self.quote_source.fetch_quote(exchange, symbol)
            except QuoteError as e:
                self.total_failures += 1
                self._log_failure(exchange, symbol, e)
                return None

        if self.scan_log is not None:
            self.scan_log.success(
                f"Fetched {symbol} from {exchange}: bid ${quote.bid:.2f}, ask ${quote.ask:.2f}"
            )
        return quote

    def _log_failure(self, exchange: str, symbol: str, error: Exception):
        message = f"Failed to fetch {symbol} from {exchange}: {error}"
        if self.scan_log is not None:
            self.scan_log.warning(message)
        else:
            logger.warning(message)

    async def fetch_quotes(self, exchanges: Iterable[str], symbols: Iterable[str]) -> list[Quote]:
        """Fetch every pair; failed requests are left out"""
        pairs = unique_pairs(exchanges, symbols)
        if not pairs:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency)
        tasks = [
            asyncio.ensure_future(self._fetch_one(semaphore, exchange, symbol))
            for exchange, symbol in pairs
        ]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            # No request may outlive the scan that issued it
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        quotes = [q for q in results if q is not None]
        logger.info(f"Fetched {len(quotes)}/{len(pairs)} quotes")
        return quotes

    async def fetch_all(self, exchanges: Iterable[str], symbols: Iterable[str]) -> dict[str, list[Quote]]:
        """Fetch every pair and group the results by symbol"""
        return aggregate_quotes(await self.fetch_quotes(exchanges, symbols))

    def get_stats(self) -> dict:
        return {
            "total_requests": self.total_requests,
            "total_failures": self.total_failures,
            "interval": self.rate_limiter.interval,
            "max_concurrency": self.max_concurrency,
        }
