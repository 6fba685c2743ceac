"""Arbitrage calculation engine"""
import logging
from collections import defaultdict
from decimal import Decimal
from typing import Callable, Iterable, Mapping, Optional, Union

from exchanges.base import Quote
from src.core.opportunity import Opportunity
from config import EXCHANGE_TRADE_URLS, EXCHANGE_LINK_SEPARATORS, DEFAULT_LINK_SEPARATOR

logger = logging.getLogger(__name__)

HUNDRED = Decimal(100)


def aggregate_quotes(
    quotes: Union[Iterable[Quote], Mapping[str, Iterable[Quote]]],
) -> dict[str, list[Quote]]:
    """
    Group quotes by trading pair.

    Accepts a flat iterable or an already grouped mapping. Every quote is kept
    and input order is preserved inside each group.
    """
    if isinstance(quotes, Mapping):
        quotes = (q for group in quotes.values() for q in group)

    grouped: dict[str, list[Quote]] = defaultdict(list)
    for quote in quotes:
        grouped[quote.symbol].append(quote)
    return dict(grouped)


def rank_opportunities(opportunities: Iterable[Opportunity]) -> list[Opportunity]:
    """Order by absolute spread, largest first; equal spreads keep their order"""
    # sorted() stays stable with reverse=True
    return sorted(opportunities, key=lambda o: o.spread, reverse=True)


class ArbitrageEngine:
    """
    Detects cross-exchange crossings for each trading pair.

    Arbitrage opportunity exists when:
    - The best bid on one exchange is above the best ask on another
    - Best bid and best ask come from two different exchanges

    spread  = best_bid - best_ask
    spread% = spread / best_ask * 100

    Ties on the best bid or best ask go to the quote seen first, so the result
    is fully determined by input order.
    """

    def __init__(
        self,
        trade_urls: Optional[Mapping[str, str]] = None,
        link_separators: Optional[Mapping[str, str]] = None,
    ):
        self.trade_urls = dict(EXCHANGE_TRADE_URLS if trade_urls is None else trade_urls)
        self.link_separators = dict(EXCHANGE_LINK_SEPARATORS if link_separators is None else link_separators)
        # Callbacks for each opportunity as it is found
        self._on_opportunity_callbacks: list[Callable[[Opportunity], None]] = []

    def on_opportunity(self, callback: Callable[[Opportunity], None]):
        """Register callback for new opportunities"""
        self._on_opportunity_callbacks.append(callback)

    def trade_link(self, exchange: str, symbol: str) -> str:
        """Deep link to the exchange's trade page for a pair"""
        template = self.trade_urls.get(exchange)
        if not template:
            return ""

        separator = self.link_separators.get(exchange, DEFAULT_LINK_SEPARATOR)
        market = symbol.replace("/", separator)
        if "{symbol}" in template:
            return template.replace("{symbol}", market)
        return template + market

    def detect_symbol(self, symbol: str, quotes: list[Quote]) -> Optional[Opportunity]:
        """Check one trading pair for a profitable crossing"""
        if len(quotes) < 2:
            return None

        # max()/min() return the first of several equal candidates
        best_bid = max(quotes, key=lambda q: q.bid)
        best_ask = min(quotes, key=lambda q: q.ask)

        if best_bid.exchange == best_ask.exchange:
            return None
        if best_bid.bid <= best_ask.ask:
            return None

        spread = best_bid.bid - best_ask.ask
        return Opportunity(
            symbol=symbol,
            buy_exchange=best_ask.exchange,
            sell_exchange=best_bid.exchange,
            buy_price=best_ask.ask,
            sell_price=best_bid.bid,
            spread=spread,
            spread_percent=spread / best_ask.ask * HUNDRED,
            buy_link=self.trade_link(best_ask.exchange, symbol),
            sell_link=self.trade_link(best_bid.exchange, symbol),
        )

    def detect(self, grouped: Mapping[str, list[Quote]]) -> list[Opportunity]:
        """Find at most one opportunity per trading pair, in pair order"""
        opportunities = []

        for symbol, quotes in grouped.items():
            opp = self.detect_symbol(symbol, quotes)
            if opp is None:
                continue

            opportunities.append(opp)
            logger.debug(
                f"🎯 ARBITRAGE: {opp.symbol} | "
                f"Buy@{opp.buy_exchange} ${opp.buy_price:.2f} → "
                f"Sell@{opp.sell_exchange} ${opp.sell_price:.2f} | "
                f"Spread: {opp.spread_percent:.3f}%"
            )

            for callback in self._on_opportunity_callbacks:
                try:
                    callback(opp)
                except Exception as e:
                    logger.error(f"Opportunity callback error: {e}")

        return opportunities

    def process(self, quotes: Union[Iterable[Quote], Mapping[str, Iterable[Quote]]]) -> list[Opportunity]:
        """Aggregate, detect and rank in one go"""
        return rank_opportunities(self.detect(aggregate_quotes(quotes)))
