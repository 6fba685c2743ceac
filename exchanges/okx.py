"""OKX REST ticker client"""
import logging
from typing import Any

from .base import BaseExchange, ParseError, Quote
from config import EXCHANGE_REST_URLS

logger = logging.getLogger(__name__)


class OKXExchange(BaseExchange):
    """OKX v5 market ticker"""

    symbol_separator = "-"

    def __init__(self):
        super().__init__(name="okx", rest_url=EXCHANGE_REST_URLS["okx"])

    def _build_params(self, market: str) -> dict:
        return {"instId": market}

    def _parse_ticker(self, data: Any, symbol: str) -> Quote:
        """Parse OKX ticker payload"""
        # {"code":"0","data":[{"instId":"BTC-USDT","bidPx":"50000","bidSz":"0.5","askPx":"50001",...}]}
        if not isinstance(data, dict):
            raise ParseError(f"[{self.name}] Unexpected payload for {symbol}")
        if data.get("code") != "0":
            raise self._reject(symbol, data.get("msg") or data.get("code"))

        tickers = data.get("data") or []
        if not tickers:
            raise ParseError(f"[{self.name}] No ticker for {symbol}")

        ticker = tickers[0]
        return self._build_quote(symbol, ticker.get("bidPx"), ticker.get("askPx"), ticker.get("bidSz"))
