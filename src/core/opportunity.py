"""
Data classes for arbitrage opportunities.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List


@dataclass(frozen=True)
class Opportunity:
    """Represents a detected cross-exchange arbitrage opportunity"""
    symbol: str
    buy_exchange: str
    sell_exchange: str
    buy_price: Decimal  # Best ask, on the buy exchange
    sell_price: Decimal  # Best bid, on the sell exchange
    spread: Decimal  # sell_price - buy_price
    spread_percent: Decimal  # Relative to buy_price
    buy_link: str = ""
    sell_link: str = ""

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "buy_exchange": self.buy_exchange,
            "sell_exchange": self.sell_exchange,
            "buy_price": float(self.buy_price),
            "sell_price": float(self.sell_price),
            "spread": float(self.spread),
            "spread_percent": round(float(self.spread_percent), 4),
            "buy_link": self.buy_link,
            "sell_link": self.sell_link,
        }

    def to_csv_row(self) -> List[str]:
        """Convert to CSV row for export"""
        return [
            self.symbol,
            self.buy_exchange,
            self.sell_exchange,
            str(self.buy_price),
            str(self.sell_price),
            str(self.spread),
            str(round(self.spread_percent, 4)),
            self.buy_link,
            self.sell_link,
        ]

    @staticmethod
    def csv_headers() -> List[str]:
        """CSV headers for export"""
        return [
            "symbol",
            "buy_exchange",
            "sell_exchange",
            "buy_price",
            "sell_price",
            "spread",
            "spread_percent",
            "buy_link",
            "sell_link",
        ]
