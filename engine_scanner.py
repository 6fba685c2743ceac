"""
Scan Orchestrator

Owns the scan lifecycle:

    IDLE --scan()--> SCANNING --(done or failed)--> IDLE

A scan fetches quotes for the current selection, groups them per pair,
detects crossings and ranks them. A scan() call while another scan is in
flight returns immediately and changes nothing. Failures are reported only
through the audit log; the orchestrator always ends up IDLE again.
"""

import logging
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from engine import ArbitrageEngine, aggregate_quotes, rank_opportunities
from engine_scheduler import ThrottledFetchScheduler
from src.core.opportunity import Opportunity
from src.core.scan_log import ScanLog
from config import AVAILABLE_EXCHANGES, AVAILABLE_SYMBOLS, DEFAULT_EXCHANGES, DEFAULT_SYMBOLS

logger = logging.getLogger(__name__)


class ScanState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"


class StateError(Exception):
    """Scan requested while one is already running"""


class ScanAbortedError(Exception):
    """The scan pipeline cannot produce a result at all"""


class ScanSelection:
    """
    User-adjustable set of exchanges and symbols to scan.

    Kept in catalogue order whatever order names were selected in, so the
    fetch order (and with it every tie-break) does not depend on UI clicks.
    """

    def __init__(
        self,
        exchanges: Iterable[str] = DEFAULT_EXCHANGES,
        symbols: Iterable[str] = DEFAULT_SYMBOLS,
        available_exchanges: Iterable[str] = AVAILABLE_EXCHANGES,
        available_symbols: Iterable[str] = AVAILABLE_SYMBOLS,
    ):
        self.available_exchanges = list(dict.fromkeys(available_exchanges))
        self.available_symbols = list(dict.fromkeys(available_symbols))
        self._exchanges: set[str] = set()
        self._symbols: set[str] = set()
        self.set_exchanges(exchanges)
        self.set_symbols(symbols)

    @property
    def exchanges(self) -> List[str]:
        return [e for e in self.available_exchanges if e in self._exchanges]

    @property
    def symbols(self) -> List[str]:
        return [s for s in self.available_symbols if s in self._symbols]

    def _check(self, names: Iterable[str], available: List[str], kind: str) -> set:
        names = set(names)
        unknown = names - set(available)
        if unknown:
            raise ValueError(f"Unknown {kind}: {', '.join(sorted(unknown))}")
        return names

    def set_exchanges(self, exchanges: Iterable[str]):
        self._exchanges = self._check(exchanges, self.available_exchanges, "exchange")

    def set_symbols(self, symbols: Iterable[str]):
        self._symbols = self._check(symbols, self.available_symbols, "symbol")

    def toggle_exchange(self, exchange: str) -> bool:
        """Flip selection of one exchange; returns whether it is now selected"""
        self._check([exchange], self.available_exchanges, "exchange")
        self._exchanges ^= {exchange}
        return exchange in self._exchanges

    def toggle_symbol(self, symbol: str) -> bool:
        """Flip selection of one symbol; returns whether it is now selected"""
        self._check([symbol], self.available_symbols, "symbol")
        self._symbols ^= {symbol}
        return symbol in self._symbols

    def to_dict(self) -> dict:
        return {
            "exchanges": self.exchanges,
            "symbols": self.symbols,
            "available_exchanges": list(self.available_exchanges),
            "available_symbols": list(self.available_symbols),
        }


class ScanOrchestrator:
    """Runs scans and publishes the ranked opportunity list"""

    def __init__(
        self,
        quote_source,
        engine: Optional[ArbitrageEngine] = None,
        scheduler: Optional[ThrottledFetchScheduler] = None,
        scan_log: Optional[ScanLog] = None,
        selection: Optional[ScanSelection] = None,
    ):
        self.scan_log = scan_log if scan_log is not None else ScanLog()
        self.engine = engine or ArbitrageEngine()
        self.scheduler = scheduler or ThrottledFetchScheduler(quote_source, scan_log=self.scan_log)
        self.selection = selection or ScanSelection()

        self._state = ScanState.IDLE
        self._opportunities: Tuple[Opportunity, ...] = ()
        self.scans_completed = 0
        self.scans_failed = 0

        self.engine.on_opportunity(self._log_opportunity)

        # Callbacks for UI updates
        self._on_state_change_callbacks: list[Callable[[ScanState], None]] = []
        self._on_scan_complete_callbacks: list[Callable[[Tuple[Opportunity, ...]], None]] = []

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def is_scanning(self) -> bool:
        return self._state == ScanState.SCANNING

    @property
    def opportunities(self) -> Tuple[Opportunity, ...]:
        return self._opportunities

    def on_state_change(self, callback: Callable[[ScanState], None]):
        """Register callback fired after every state transition"""
        self._on_state_change_callbacks.append(callback)

    def on_scan_complete(self, callback: Callable[[Tuple[Opportunity, ...]], None]):
        """Register callback fired with the published list after each scan"""
        self._on_scan_complete_callbacks.append(callback)

    def _notify(self, callbacks: list, payload):
        for callback in callbacks:
            try:
                callback(payload)
            except Exception as e:
                logger.error(f"Scan callback error: {e}")

    def _transition(self, new_state: ScanState):
        self._state = new_state
        self._notify(self._on_state_change_callbacks, new_state)

    def _enter_scanning(self):
        if self._state != ScanState.IDLE:
            raise StateError("scan already in progress")
        self._opportunities = ()
        self._transition(ScanState.SCANNING)

    def _log_opportunity(self, opp: Opportunity):
        self.scan_log.success(
            f"Opportunity on {opp.symbol}: buy on {opp.buy_exchange} at ${opp.buy_price:.2f}, "
            f"sell on {opp.sell_exchange} at ${opp.sell_price:.2f} ({opp.spread_percent:.3f}%)"
        )

    async def _run_pipeline(self, exchanges: List[str], symbols: List[str]) -> List[Opportunity]:
        if not exchanges:
            raise ScanAbortedError("no exchanges selected")
        if not symbols:
            raise ScanAbortedError("no symbols selected")

        quotes = await self.scheduler.fetch_quotes(exchanges, symbols)
        if not quotes:
            raise ScanAbortedError("no quotes could be fetched")

        grouped = aggregate_quotes(quotes)
        return rank_opportunities(self.engine.detect(grouped))

    async def scan(self) -> bool:
        """
        Run one full scan.

        Returns False without doing anything when a scan is already running,
        True once a scan has run to completion (successfully or not).
        """
        try:
            self._enter_scanning()
        except StateError:
            logger.debug("Scan requested while scanning, ignoring")
            return False

        # Selection may change while we wait on the network
        exchanges = self.selection.exchanges
        symbols = self.selection.symbols
        self.scan_log.info(
            f"Scan started: {len(exchanges)} exchanges x {len(symbols)} symbols"
        )

        try:
            ranked = await self._run_pipeline(exchanges, symbols)
        except Exception as e:
            self.scans_failed += 1
            self._opportunities = ()
            if not isinstance(e, ScanAbortedError):
                logger.exception("Unexpected scan failure")
            self.scan_log.error(f"Scan failed: {e}")
        else:
            self.scans_completed += 1
            self._opportunities = tuple(ranked)
            self.scan_log.success(f"Scan finished: {len(ranked)} opportunities found")
        finally:
            self._transition(ScanState.IDLE)

        self._notify(self._on_scan_complete_callbacks, self._opportunities)
        return True

    def snapshot(self) -> dict:
        """Get current state for API/dashboard"""
        return {
            "state": self._state.value,
            "opportunities": [o.to_dict() for o in self._opportunities],
            "logs": [entry.to_dict() for entry in self.scan_log.recent()],
            "selection": self.selection.to_dict(),
            "stats": {
                "scans_completed": self.scans_completed,
                "scans_failed": self.scans_failed,
                **self.scheduler.get_stats(),
            },
        }
