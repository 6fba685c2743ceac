"""Huobi (HTX) REST merged ticker client"""
import logging
from typing import Any

from .base import BaseExchange, ParseError, Quote
from config import EXCHANGE_REST_URLS

logger = logging.getLogger(__name__)


class HuobiExchange(BaseExchange):
    """HTX merged market detail (best bid/ask)"""

    lowercase_symbols = True

    def __init__(self):
        super().__init__(name="huobi", rest_url=EXCHANGE_REST_URLS["huobi"])

    def _build_params(self, market: str) -> dict:
        return {"symbol": market}

    def _parse_ticker(self, data: Any, symbol: str) -> Quote:
        """Parse HTX detail/merged payload"""
        # {"status":"ok","tick":{"bid":[50000.0,0.5],"ask":[50001.0,1.2],...}}
        if not isinstance(data, dict):
            raise ParseError(f"[{self.name}] Unexpected payload for {symbol}")
        if data.get("status") != "ok":
            raise self._reject(symbol, data.get("err-msg", data.get("status")))

        tick = data.get("tick")
        if not tick:
            raise ParseError(f"[{self.name}] No tick for {symbol}")

        return self._build_quote(symbol, tick["bid"][0], tick["ask"][0], tick["bid"][1])
