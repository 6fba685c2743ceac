"""Base exchange REST ticker client"""
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import aiohttp

logger = logging.getLogger(__name__)


class QuoteError(Exception):
    """A single ticker request could not produce a quote"""


class FetchError(QuoteError):
    """Network, transport, timeout or exchange-side rejection"""


class ParseError(QuoteError):
    """Malformed response or unusable numeric fields"""


@dataclass(frozen=True)
class Quote:
    """Standardized best bid/ask snapshot from any exchange"""
    exchange: str
    symbol: str  # Normalized pair format (e.g., "BTC/USDT")
    bid: Decimal  # Best bid price
    ask: Decimal  # Best ask price
    volume: Decimal = Decimal("0")  # Size available at the best bid
    timestamp: datetime = field(default_factory=datetime.now, compare=False)

    def __post_init__(self):
        if self.bid < 0 or self.ask <= 0:
            raise ParseError(
                f"[{self.exchange}] Invalid quote for {self.symbol}: bid={self.bid} ask={self.ask}"
            )

    @property
    def mid(self) -> Decimal:
        """Mid-market price"""
        return (self.bid + self.ask) / 2

    @property
    def spread(self) -> Decimal:
        """Bid-ask spread"""
        return self.ask - self.bid

    def to_dict(self) -> dict:
        return {
            "exchange": self.exchange,
            "symbol": self.symbol,
            "bid": float(self.bid),
            "ask": float(self.ask),
            "volume": float(self.volume),
            "mid": float(self.mid),
            "timestamp": self.timestamp.isoformat(),
        }


def parse_price(value: Any, field_name: str) -> Decimal:
    """Parse a bid/ask field that may arrive as a string; fails on garbage"""
    if value is None or isinstance(value, bool):
        raise ParseError(f"Missing {field_name}")
    try:
        price = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ParseError(f"Unparsable {field_name}: {value!r}") from e
    if not price.is_finite():
        raise ParseError(f"Non-finite {field_name}: {value!r}")
    return price


def parse_volume(value: Any) -> Decimal:
    """Parse a volume field, defaulting to 0 when it is missing or unparsable"""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        volume = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return volume if volume.is_finite() else Decimal("0")


class BaseExchange(ABC):
    """Base class for exchange book-ticker REST clients"""

    # How the exchange spells "BTC/USDT": joined with a separator, optionally
    # lowercased, with per-asset renames (Kraken's XBT)
    symbol_separator = ""
    lowercase_symbols = False
    asset_aliases: dict[str, str] = {}

    def __init__(self, name: str, rest_url: str):
        self.name = name
        self.rest_url = rest_url

    def format_symbol(self, symbol: str) -> str:
        """Convert a normalized pair to the exchange's API notation"""
        assets = [self.asset_aliases.get(a, a) for a in symbol.upper().split("/")]
        market = self.symbol_separator.join(assets)
        return market.lower() if self.lowercase_symbols else market

    @abstractmethod
    def _build_params(self, market: str) -> dict:
        """Query parameters for the ticker request - exchange specific"""
        pass

    @abstractmethod
    def _parse_ticker(self, data: Any, symbol: str) -> Quote:
        """Parse exchange-specific ticker payload into a Quote"""
        pass

    def _build_quote(self, symbol: str, bid: Any, ask: Any, volume: Any = None) -> Quote:
        return Quote(
            exchange=self.name,
            symbol=symbol,
            bid=parse_price(bid, "bid"),
            ask=parse_price(ask, "ask"),
            volume=parse_volume(volume),
        )

    def _reject(self, symbol: str, reason: Any) -> FetchError:
        return FetchError(f"[{self.name}] {symbol} rejected: {reason}")

    async def fetch_quote(self, session: aiohttp.ClientSession, symbol: str) -> Quote:
        """Fetch the current best bid/ask for a normalized symbol"""
        params = self._build_params(self.format_symbol(symbol))
        logger.debug(f"[{self.name}] GET {self.rest_url} {params}")

        try:
            async with session.get(self.rest_url, params=params) as resp:
                if not 200 <= resp.status < 300:
                    raise FetchError(f"[{self.name}] HTTP {resp.status} for {symbol}")
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(f"[{self.name}] Request failed for {symbol}: {e!r}") from e
        except ValueError as e:
            raise ParseError(f"[{self.name}] Invalid JSON for {symbol}: {e}") from e

        try:
            return self._parse_ticker(data, symbol)
        except QuoteError:
            raise
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise ParseError(f"[{self.name}] Unexpected response for {symbol}: {e!r}") from e
