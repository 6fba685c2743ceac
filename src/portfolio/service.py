"""
Portfolio management service.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Dict, Iterable

from exchanges.base import QuoteError
from src.core.scan_log import ScanLog
from config import PORTFOLIO_REFERENCE_EXCHANGE

from .models import PortfolioAsset, PortfolioAssetCreate, PortfolioSummary

logger = logging.getLogger(__name__)


class PortfolioService:
    """
    Tracks held assets and re-prices them from the quote source.

    Provides:
    - Holding management (add / remove / list)
    - Price refresh from one reference exchange, asset by asset
    - P&L totals
    """

    def __init__(
        self,
        scan_log: Optional[ScanLog] = None,
        reference_exchange: str = PORTFOLIO_REFERENCE_EXCHANGE,
    ):
        self.scan_log = scan_log if scan_log is not None else ScanLog()
        self.reference_exchange = reference_exchange
        # In-memory storage, one holding per symbol
        self._assets: List[PortfolioAsset] = []
        self.last_refresh: Optional[datetime] = None

    def load_seed(self, seed: Iterable[Dict]) -> int:
        """Load holdings from configuration; returns how many were added"""
        count = 0
        for item in seed:
            self.add_asset(PortfolioAssetCreate(**item))
            count += 1
        logger.info(f"Loaded {count} portfolio assets from seed")
        return count

    def add_asset(self, data: PortfolioAssetCreate) -> PortfolioAsset:
        """Add a holding; symbols are unique"""
        symbol = data.symbol.upper()
        if self.get_asset(symbol) is not None:
            raise ValueError(f"Asset {symbol} already exists")

        asset = PortfolioAsset(
            symbol=symbol,
            amount=data.amount,
            average_price=data.average_price,
            current_price=data.current_price if data.current_price is not None else data.average_price,
        )
        self._assets.append(asset)
        logger.info(f"Added {asset.amount} {asset.symbol} @ {asset.average_price}")
        return asset

    def remove_asset(self, symbol: str) -> bool:
        asset = self.get_asset(symbol)
        if asset is None:
            return False
        self._assets.remove(asset)
        return True

    def get_asset(self, symbol: str) -> Optional[PortfolioAsset]:
        for asset in self._assets:
            if asset.symbol == symbol.upper():
                return asset
        return None

    def get_assets(self) -> List[PortfolioAsset]:
        return list(self._assets)

    async def refresh_prices(self, quote_source) -> int:
        """
        Re-price every asset at the mid of the reference exchange's quote.

        A failed request keeps the previous price and is logged as a warning;
        it does not stop the remaining assets. Returns the number updated.
        """
        updated = 0
        for asset in self._assets:
            try:
                quote = await quote_source.fetch_quote(self.reference_exchange, asset.symbol)
            except QuoteError as e:
                self.scan_log.warning(f"Failed to update price for {asset.symbol}: {e}")
                continue

            asset.reprice((quote.bid + quote.ask) / 2)
            updated += 1

        self.last_refresh = datetime.now()
        logger.info(f"Refreshed {updated}/{len(self._assets)} portfolio prices")
        return updated

    def get_summary(self) -> PortfolioSummary:
        """Totals across all holdings"""
        total_value = sum((a.value for a in self._assets), Decimal("0"))
        total_cost = sum((a.average_price * a.amount for a in self._assets), Decimal("0"))
        total_pnl = total_value - total_cost
        total_pnl_percent = (total_pnl / total_cost * 100) if total_cost > 0 else Decimal("0")

        return PortfolioSummary(
            assets=self.get_assets(),
            total_value=total_value,
            total_cost=total_cost,
            total_profit_loss=total_pnl,
            total_profit_loss_percent=total_pnl_percent,
            last_refresh=self.last_refresh,
        )
