"""KuCoin REST level-1 order book client"""
import logging
from typing import Any

from .base import BaseExchange, ParseError, Quote
from config import EXCHANGE_REST_URLS

logger = logging.getLogger(__name__)


class KucoinExchange(BaseExchange):
    """KuCoin level-1 order book (best bid/ask)"""

    symbol_separator = "-"

    def __init__(self):
        super().__init__(name="kucoin", rest_url=EXCHANGE_REST_URLS["kucoin"])

    def _build_params(self, market: str) -> dict:
        return {"symbol": market}

    def _parse_ticker(self, data: Any, symbol: str) -> Quote:
        """Parse KuCoin level1 payload"""
        # {"code":"200000","data":{"price":"50000.5","bestBid":"50000","bestBidSize":"0.3","bestAsk":"50001",...}}
        if not isinstance(data, dict):
            raise ParseError(f"[{self.name}] Unexpected payload for {symbol}")
        if data.get("code") != "200000":
            raise self._reject(symbol, data.get("msg", data.get("code")))

        ticker = data.get("data")
        if not ticker:
            raise ParseError(f"[{self.name}] No ticker data for {symbol}")

        return self._build_quote(symbol, ticker.get("bestBid"), ticker.get("bestAsk"), ticker.get("bestBidSize"))
