"""Kraken REST ticker client"""
import logging
from typing import Any

from .base import BaseExchange, ParseError, Quote
from config import EXCHANGE_REST_URLS

logger = logging.getLogger(__name__)


class KrakenExchange(BaseExchange):
    """Kraken public Ticker endpoint"""

    asset_aliases = {"BTC": "XBT", "DOGE": "XDG"}

    def __init__(self):
        super().__init__(name="kraken", rest_url=EXCHANGE_REST_URLS["kraken"])

    def _build_params(self, market: str) -> dict:
        return {"pair": market}

    def _parse_ticker(self, data: Any, symbol: str) -> Quote:
        """Parse Kraken Ticker payload"""
        # {"error":[],"result":{"XXBTZUSD":{"a":["50001.0","1","1.000"],"b":["50000.0","2","2.000"],...}}}
        if not isinstance(data, dict):
            raise ParseError(f"[{self.name}] Unexpected payload for {symbol}")
        errors = data.get("error")
        if errors:
            if isinstance(errors, list):
                errors = ", ".join(str(e) for e in errors)
            raise self._reject(symbol, errors)

        result = data.get("result") or {}
        if not result:
            raise ParseError(f"[{self.name}] Empty result for {symbol}")

        # Kraken answers with its own canonical pair name, one entry per request
        ticker = next(iter(result.values()))
        return self._build_quote(symbol, ticker["b"][0], ticker["a"][0], ticker["b"][2])
