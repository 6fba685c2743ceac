"""Bybit REST ticker client"""
import logging
from typing import Any

from .base import BaseExchange, ParseError, Quote
from config import EXCHANGE_REST_URLS

logger = logging.getLogger(__name__)


class BybitExchange(BaseExchange):
    """Bybit v5 spot tickers"""

    def __init__(self):
        super().__init__(name="bybit", rest_url=EXCHANGE_REST_URLS["bybit"])

    def _build_params(self, market: str) -> dict:
        return {"category": "spot", "symbol": market}

    def _parse_ticker(self, data: Any, symbol: str) -> Quote:
        """Parse Bybit v5 tickers payload"""
        # {"retCode":0,"result":{"list":[{"symbol":"BTCUSDT","bid1Price":"50000","bid1Size":"1.2","ask1Price":"50001",...}]}}
        if not isinstance(data, dict):
            raise ParseError(f"[{self.name}] Unexpected payload for {symbol}")
        if data.get("retCode") != 0:
            raise self._reject(symbol, data.get("retMsg", data.get("retCode")))

        tickers = (data.get("result") or {}).get("list") or []
        if not tickers:
            raise ParseError(f"[{self.name}] No ticker for {symbol}")

        ticker = tickers[0]
        return self._build_quote(symbol, ticker.get("bid1Price"), ticker.get("ask1Price"), ticker.get("bid1Size"))
