"""Quote source dispatching ticker requests to the per-exchange clients"""
import logging
from typing import Optional, Protocol

import aiohttp

from .base import BaseExchange, FetchError, Quote
from .binance import BinanceExchange
from .bitget import BitgetExchange
from .bitmart import BitmartExchange
from .bybit import BybitExchange
from .gateio import GateioExchange
from .huobi import HuobiExchange
from .kraken import KrakenExchange
from .kucoin import KucoinExchange
from .mexc import MexcExchange
from .okx import OKXExchange
from .simulator import SimulatedQuoteSource
from config import REQUEST_TIMEOUT, SKIP_SSL_VERIFY

logger = logging.getLogger(__name__)


class QuoteSource(Protocol):
    """Anything that can produce a Quote for (exchange, symbol)"""

    async def fetch_quote(self, exchange: str, symbol: str) -> Quote:
        ...


EXCHANGE_CLIENTS = {
    "binance": BinanceExchange,
    "kucoin": KucoinExchange,
    "kraken": KrakenExchange,
    "huobi": HuobiExchange,
    "bybit": BybitExchange,
    "gateio": GateioExchange,
    "okx": OKXExchange,
    "bitget": BitgetExchange,
    "mexc": MexcExchange,
    "bitmart": BitmartExchange,
}


def create_exchange_clients() -> dict[str, BaseExchange]:
    return {name: client() for name, client in EXCHANGE_CLIENTS.items()}


class ExchangeQuoteSource:
    """
    Live quote source backed by the exchanges' public REST tickers.

    One aiohttp session is shared by every client and created lazily on the
    first request; call close() (or use as an async context manager) on shutdown.
    """

    def __init__(
        self,
        exchanges: Optional[dict[str, BaseExchange]] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.exchanges = exchanges if exchanges is not None else create_exchange_clients()
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(ssl=False) if SKIP_SSL_VERIFY else None
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                connector=connector,
            )
            self._owns_session = True
        return self._session

    async def fetch_quote(self, exchange: str, symbol: str) -> Quote:
        client = self.exchanges.get(exchange)
        if client is None:
            raise FetchError(f"No ticker client for exchange '{exchange}'")

        session = await self._get_session()
        return await client.fetch_quote(session, symbol)

    async def close(self):
        if self._session and self._owns_session and not self._session.closed:
            await self._session.close()
            logger.info("Closed exchange HTTP session")
        self._session = None

    async def __aenter__(self) -> "ExchangeQuoteSource":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()


def create_quote_source(mode: str):
    """Build the quote source for the configured operation mode"""
    if mode == "simulation":
        logger.info("🎮 Using SIMULATED quote source")
        return SimulatedQuoteSource()
    if mode == "live":
        logger.info("🌐 Using live REST quote source")
        return ExchangeQuoteSource()
    raise ValueError(f"Unknown mode '{mode}' (expected 'live' or 'simulation')")
