"""
Portfolio tracking for SpreadScout.

Provides:
- Held asset records with derived P&L
- Price refresh from a reference exchange
"""

from .models import PortfolioAsset, PortfolioAssetCreate, PortfolioSummary
from .service import PortfolioService

__all__ = [
    "PortfolioAsset",
    "PortfolioAssetCreate",
    "PortfolioSummary",
    "PortfolioService",
]
