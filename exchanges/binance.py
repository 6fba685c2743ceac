"""Binance REST book ticker client"""
import logging
from typing import Any

from .base import BaseExchange, ParseError, Quote
from config import EXCHANGE_REST_URLS

logger = logging.getLogger(__name__)


class BinanceExchange(BaseExchange):
    """Binance spot book ticker (best bid/ask)"""

    def __init__(self, name: str = "binance", rest_url: str = EXCHANGE_REST_URLS["binance"]):
        super().__init__(name=name, rest_url=rest_url)

    def _build_params(self, market: str) -> dict:
        return {"symbol": market}

    def _parse_ticker(self, data: Any, symbol: str) -> Quote:
        """Parse Binance bookTicker payload"""
        # {"symbol":"BTCUSDT","bidPrice":"50000.00","bidQty":"1.5","askPrice":"50001.00","askQty":"2.0"}
        if not isinstance(data, dict):
            raise ParseError(f"[{self.name}] Unexpected payload for {symbol}")
        if "code" in data and "bidPrice" not in data:
            raise self._reject(symbol, data.get("msg", data["code"]))

        return self._build_quote(symbol, data.get("bidPrice"), data.get("askPrice"), data.get("bidQty"))
