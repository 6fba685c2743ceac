"""MEXC REST book ticker client"""
from .binance import BinanceExchange
from config import EXCHANGE_REST_URLS


class MexcExchange(BinanceExchange):
    """MEXC exposes a Binance-compatible /api/v3/ticker/bookTicker"""

    def __init__(self):
        super().__init__(name="mexc", rest_url=EXCHANGE_REST_URLS["mexc"])
