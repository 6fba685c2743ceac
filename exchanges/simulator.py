"""Simulated quote source for testing when real connections are blocked"""
import asyncio
import logging
import random
from datetime import datetime
from decimal import Decimal
from typing import Optional

from .base import FetchError, Quote

logger = logging.getLogger(__name__)


# Realistic base prices for simulation
BASE_PRICES = {
    "BTC/USDT": 97500.0,
    "ETH/USDT": 3250.0,
    "XRP/USDT": 3.15,
    "ADA/USDT": 1.05,
    "DOGE/USDT": 0.38,
    "BNB/USDT": 690.0,
    "SOL/USDT": 245.0,
    "LTC/USDT": 105.0,
    "LINK/USDT": 24.5,
    "MATIC/USDT": 0.52,
}

# Per-exchange premium in percent; the offsets create crossings for the engine to find
EXCHANGE_OFFSETS = {
    "binance": 0.0,
    "kucoin": 0.02,
    "kraken": -0.03,
    "huobi": 0.04,
    "bybit": -0.01,
    "gateio": 0.05,
    "okx": 0.01,
    "bitget": -0.02,
    "mexc": 0.03,
    "bitmart": -0.04,
}


class SimulatedQuoteSource:
    """
    Generates quotes with realistic price movements.
    Useful when network restrictions block real exchange connections.
    """

    def __init__(
        self,
        failure_rate: float = 0.0,
        latency: tuple[float, float] = (0.01, 0.05),
        seed: Optional[int] = None,
    ):
        """
        Args:
            failure_rate: Probability (0-1) that a request fails with FetchError
            latency: Min/max simulated network delay in seconds
            seed: Random seed for reproducible runs
        """
        self.failure_rate = failure_rate
        self.latency = latency
        self._random = random.Random(seed)
        self.current_prices = dict(BASE_PRICES)

    async def fetch_quote(self, exchange: str, symbol: str) -> Quote:
        """Simulate one ticker request"""
        await asyncio.sleep(self._random.uniform(*self.latency))

        if symbol not in self.current_prices:
            raise FetchError(f"[{exchange}-SIM] Unknown symbol {symbol}")
        if self._random.random() < self.failure_rate:
            raise FetchError(f"[{exchange}-SIM] Simulated timeout for {symbol}")

        # Small random movement (-0.1% to +0.1%)
        movement = self._random.uniform(-0.001, 0.001)
        new_price = self.current_prices[symbol] * (1 + movement)
        self.current_prices[symbol] = new_price

        # Apply exchange-specific offset
        adjusted_price = new_price * (1 + EXCHANGE_OFFSETS.get(exchange, 0.0) / 100)

        # Create realistic spread (0.01% to 0.05%)
        spread_percent = self._random.uniform(0.0001, 0.0005)
        half_spread = adjusted_price * spread_percent / 2

        return Quote(
            exchange=exchange,
            symbol=symbol,
            bid=_to_decimal(adjusted_price - half_spread),
            ask=_to_decimal(adjusted_price + half_spread),
            volume=_to_decimal(self._random.uniform(0.1, 25.0)),
            timestamp=datetime.now(),
        )

    async def close(self):
        logger.info("Simulation stopped")


def _to_decimal(value: float) -> Decimal:
    return Decimal(f"{value:.8f}")
