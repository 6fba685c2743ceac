"""
Portfolio data models.
"""

from decimal import Decimal
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, computed_field


class PortfolioAssetCreate(BaseModel):
    """Add a holding to the portfolio"""
    symbol: str = Field(..., min_length=3, max_length=20, pattern=r"^[A-Za-z0-9]+/[A-Za-z0-9]+$")
    amount: Decimal = Field(..., gt=0)
    average_price: Decimal = Field(..., ge=0)
    current_price: Optional[Decimal] = Field(None, ge=0)


class PortfolioAsset(BaseModel):
    """
    Held position.

    Everything but the current price is fixed at creation; the price is
    changed only through reprice() by the portfolio refresher.
    """
    model_config = ConfigDict(validate_assignment=True)

    symbol: str = Field(frozen=True)
    amount: Decimal = Field(frozen=True)
    average_price: Decimal = Field(frozen=True)
    current_price: Decimal
    price_updated_at: Optional[datetime] = None

    def reprice(self, price: Decimal):
        """Set a freshly observed market price"""
        self.current_price = price
        self.price_updated_at = datetime.now()

    @computed_field
    @property
    def value(self) -> Decimal:
        return self.current_price * self.amount

    @computed_field
    @property
    def profit_loss(self) -> Decimal:
        return (self.current_price - self.average_price) * self.amount

    @computed_field
    @property
    def profit_loss_percent(self) -> Decimal:
        if self.average_price == 0:
            return Decimal("0")
        return (self.current_price - self.average_price) / self.average_price * 100


class PortfolioSummary(BaseModel):
    """Portfolio with computed totals"""
    assets: List[PortfolioAsset]
    total_value: Decimal
    total_cost: Decimal
    total_profit_loss: Decimal
    total_profit_loss_percent: Decimal
    last_refresh: Optional[datetime] = None
