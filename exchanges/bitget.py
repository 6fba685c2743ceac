"""Bitget REST ticker client"""
import logging
from typing import Any

from .base import BaseExchange, ParseError, Quote
from config import EXCHANGE_REST_URLS

logger = logging.getLogger(__name__)


class BitgetExchange(BaseExchange):
    """Bitget v2 spot tickers"""

    def __init__(self):
        super().__init__(name="bitget", rest_url=EXCHANGE_REST_URLS["bitget"])

    def _build_params(self, market: str) -> dict:
        return {"symbol": market}

    def _parse_ticker(self, data: Any, symbol: str) -> Quote:
        """Parse Bitget tickers payload"""
        # {"code":"00000","data":[{"symbol":"BTCUSDT","bidPr":"50000","askPr":"50001","bidSz":"0.7",...}]}
        if not isinstance(data, dict):
            raise ParseError(f"[{self.name}] Unexpected payload for {symbol}")
        if data.get("code") != "00000":
            raise self._reject(symbol, data.get("msg", data.get("code")))

        tickers = data.get("data") or []
        if not tickers:
            raise ParseError(f"[{self.name}] No ticker for {symbol}")

        ticker = tickers[0]
        return self._build_quote(symbol, ticker.get("bidPr"), ticker.get("askPr"), ticker.get("bidSz"))
