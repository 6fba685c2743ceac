"""
Pytest configuration and fixtures for SpreadScout tests.
"""

import asyncio
from decimal import Decimal
from typing import Dict, Iterable, Optional, Tuple

import pytest

from exchanges.base import FetchError, Quote, QuoteError
from engine import ArbitrageEngine
from engine_scheduler import ThrottledFetchScheduler
from engine_scanner import ScanOrchestrator, ScanSelection
from src.core.scan_log import ScanLog
from src.portfolio.service import PortfolioService


def make_quote(exchange: str, symbol: str, bid, ask, volume="1") -> Quote:
    """Build a Quote from plain numbers"""
    return Quote(
        exchange=exchange,
        symbol=symbol,
        bid=Decimal(str(bid)),
        ask=Decimal(str(ask)),
        volume=Decimal(str(volume)),
    )


class FakeQuoteSource:
    """
    In-memory quote source.

    Serves the given quotes, raises the configured error for pairs listed in
    `failures`, and FetchError for anything it does not know. Optionally
    waits on `gate` before answering so tests can hold a scan in flight.
    """

    def __init__(
        self,
        quotes: Iterable[Quote] = (),
        failures: Optional[Dict[Tuple[str, str], QuoteError]] = None,
        delay: float = 0.0,
    ):
        self.quotes = {(q.exchange, q.symbol): q for q in quotes}
        self.failures = failures or {}
        self.delay = delay
        self.gate: Optional[asyncio.Event] = None
        self.calls: list = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_quote(self, exchange: str, symbol: str) -> Quote:
        self.calls.append((exchange, symbol))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.delay:
                await asyncio.sleep(self.delay)
            if (exchange, symbol) in self.failures:
                raise self.failures[(exchange, symbol)]
            quote = self.quotes.get((exchange, symbol))
            if quote is None:
                raise FetchError(f"no quote for {symbol} on {exchange}")
            return quote
        finally:
            self.in_flight -= 1

    async def close(self):
        pass


@pytest.fixture
def engine() -> ArbitrageEngine:
    """Fresh engine with the configured link templates"""
    return ArbitrageEngine()


@pytest.fixture
def scan_log() -> ScanLog:
    return ScanLog()


@pytest.fixture
def btc_quotes():
    """Binance cheap, Kraken rich"""
    return [
        make_quote("binance", "BTC/USDT", 50100, 50120),
        make_quote("kraken", "BTC/USDT", 50300, 50310),
    ]


@pytest.fixture
def quote_source(btc_quotes) -> FakeQuoteSource:
    return FakeQuoteSource(btc_quotes)


@pytest.fixture
def orchestrator(quote_source: FakeQuoteSource, scan_log: ScanLog) -> ScanOrchestrator:
    """Orchestrator scanning binance+kraken on BTC/USDT without pacing delays"""
    return ScanOrchestrator(
        quote_source,
        scheduler=ThrottledFetchScheduler(quote_source, scan_log=scan_log, interval=0),
        scan_log=scan_log,
        selection=ScanSelection(exchanges=["binance", "kraken"], symbols=["BTC/USDT"]),
    )


@pytest.fixture
def fresh_portfolio_service(scan_log: ScanLog) -> PortfolioService:
    """Create a fresh portfolio service for isolated tests"""
    return PortfolioService(scan_log=scan_log, reference_exchange="binance")
