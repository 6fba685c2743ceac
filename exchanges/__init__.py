"""Exchange REST ticker clients"""
from .base import BaseExchange, Quote, QuoteError, FetchError, ParseError
from .binance import BinanceExchange
from .kucoin import KucoinExchange
from .kraken import KrakenExchange
from .huobi import HuobiExchange
from .bybit import BybitExchange
from .gateio import GateioExchange
from .okx import OKXExchange
from .bitget import BitgetExchange
from .mexc import MexcExchange
from .bitmart import BitmartExchange
from .simulator import SimulatedQuoteSource
from .source import (
    EXCHANGE_CLIENTS,
    ExchangeQuoteSource,
    QuoteSource,
    create_exchange_clients,
    create_quote_source,
)

__all__ = [
    "BaseExchange",
    "Quote",
    "QuoteError",
    "FetchError",
    "ParseError",
    "BinanceExchange",
    "KucoinExchange",
    "KrakenExchange",
    "HuobiExchange",
    "BybitExchange",
    "GateioExchange",
    "OKXExchange",
    "BitgetExchange",
    "MexcExchange",
    "BitmartExchange",
    "SimulatedQuoteSource",
    "EXCHANGE_CLIENTS",
    "ExchangeQuoteSource",
    "QuoteSource",
    "create_exchange_clients",
    "create_quote_source",
]
