"""Gate.io REST ticker client"""
import logging
from typing import Any

from .base import BaseExchange, ParseError, Quote
from config import EXCHANGE_REST_URLS

logger = logging.getLogger(__name__)


class GateioExchange(BaseExchange):
    """Gate.io v4 spot tickers"""

    symbol_separator = "_"

    def __init__(self):
        super().__init__(name="gateio", rest_url=EXCHANGE_REST_URLS["gateio"])

    def _build_params(self, market: str) -> dict:
        return {"currency_pair": market}

    def _parse_ticker(self, data: Any, symbol: str) -> Quote:
        """Parse Gate.io tickers payload"""
        # [{"currency_pair":"BTC_USDT","highest_bid":"50000","lowest_ask":"50001","highest_size":"0.4",...}]
        if isinstance(data, dict) and "label" in data:
            raise self._reject(symbol, data.get("message", data["label"]))
        if not isinstance(data, list) or not data:
            raise ParseError(f"[{self.name}] No ticker for {symbol}")

        ticker = data[0]
        return self._build_quote(
            symbol,
            ticker.get("highest_bid"),
            ticker.get("lowest_ask"),
            ticker.get("highest_size", ticker.get("base_volume")),
        )
