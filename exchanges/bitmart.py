"""BitMart REST ticker client"""
import logging
from typing import Any

from .base import BaseExchange, ParseError, Quote
from config import EXCHANGE_REST_URLS

logger = logging.getLogger(__name__)


class BitmartExchange(BaseExchange):
    """BitMart v3 spot ticker"""

    symbol_separator = "_"

    def __init__(self):
        super().__init__(name="bitmart", rest_url=EXCHANGE_REST_URLS["bitmart"])

    def _build_params(self, market: str) -> dict:
        return {"symbol": market}

    def _parse_ticker(self, data: Any, symbol: str) -> Quote:
        """Parse BitMart ticker payload"""
        # {"code":1000,"data":{"symbol":"BTC_USDT","bid_px":"50000","bid_sz":"0.2","ask_px":"50001",...}}
        if not isinstance(data, dict):
            raise ParseError(f"[{self.name}] Unexpected payload for {symbol}")
        if data.get("code") != 1000:
            raise self._reject(symbol, data.get("message", data.get("code")))

        ticker = data.get("data")
        if not ticker:
            raise ParseError(f"[{self.name}] No ticker for {symbol}")

        return self._build_quote(symbol, ticker.get("bid_px"), ticker.get("ask_px"), ticker.get("bid_sz"))
