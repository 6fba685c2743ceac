"""
Tests for the scan orchestrator and selection.
"""

import asyncio

import pytest

from engine_scanner import ScanOrchestrator, ScanSelection, ScanState
from engine_scheduler import ThrottledFetchScheduler
from exchanges.base import FetchError
from src.core.scan_log import LogSeverity, ScanLog
from conftest import FakeQuoteSource, make_quote


def messages(scan_log, severity=None):
    return [e.message for e in scan_log.entries() if severity is None or e.severity == severity]


def build_orchestrator(source, scan_log, exchanges, symbols):
    return ScanOrchestrator(
        source,
        scheduler=ThrottledFetchScheduler(source, scan_log=scan_log, interval=0),
        scan_log=scan_log,
        selection=ScanSelection(exchanges=exchanges, symbols=symbols),
    )


class TestScanLifecycle:
    """Tests for IDLE -> SCANNING -> IDLE"""

    def test_starts_idle(self, orchestrator):
        assert orchestrator.state == ScanState.IDLE
        assert orchestrator.opportunities == ()

    @pytest.mark.asyncio
    async def test_scan_publishes_ranked_opportunities(self, orchestrator, scan_log):
        started = await orchestrator.scan()

        assert started is True
        assert orchestrator.state == ScanState.IDLE
        assert len(orchestrator.opportunities) == 1

        opp = orchestrator.opportunities[0]
        assert (opp.buy_exchange, opp.sell_exchange) == ("binance", "kraken")

        log = messages(scan_log)
        assert log[0] == "Scan started: 2 exchanges x 1 symbols"
        assert log[-1] == "Scan finished: 1 opportunities found"
        assert any(m.startswith("Opportunity on BTC/USDT: buy on binance") for m in log)

    @pytest.mark.asyncio
    async def test_state_transitions_notified(self, orchestrator):
        states = []
        orchestrator.on_state_change(states.append)

        await orchestrator.scan()

        assert states == [ScanState.SCANNING, ScanState.IDLE]

    @pytest.mark.asyncio
    async def test_scan_complete_callback(self, orchestrator):
        published = []
        orchestrator.on_scan_complete(published.append)

        await orchestrator.scan()

        assert published == [orchestrator.opportunities]

    @pytest.mark.asyncio
    async def test_broken_callback_does_not_break_scan(self, orchestrator):
        def broken(_):
            raise RuntimeError("boom")

        orchestrator.on_state_change(broken)
        orchestrator.on_scan_complete(broken)

        assert await orchestrator.scan() is True
        assert orchestrator.state == ScanState.IDLE

    @pytest.mark.asyncio
    async def test_second_scan_while_running_is_ignored(self, orchestrator, quote_source, scan_log):
        quote_source.gate = asyncio.Event()

        first = asyncio.create_task(orchestrator.scan())
        await asyncio.sleep(0)
        assert orchestrator.is_scanning
        log_size = len(scan_log)

        assert await orchestrator.scan() is False
        assert len(scan_log) == log_size

        quote_source.gate.set()
        assert await first is True
        assert orchestrator.state == ScanState.IDLE
        assert len(quote_source.calls) == 2

    @pytest.mark.asyncio
    async def test_opportunities_cleared_while_scanning(self, orchestrator, quote_source):
        await orchestrator.scan()
        assert orchestrator.opportunities

        quote_source.gate = asyncio.Event()
        task = asyncio.create_task(orchestrator.scan())
        await asyncio.sleep(0)

        assert orchestrator.opportunities == ()

        quote_source.gate.set()
        await task
        assert len(orchestrator.opportunities) == 1

    @pytest.mark.asyncio
    async def test_rescan_replaces_result(self, orchestrator, quote_source):
        await orchestrator.scan()
        quote_source.quotes[("kraken", "BTC/USDT")] = make_quote("kraken", "BTC/USDT", 50110, 50130)

        await orchestrator.scan()

        assert orchestrator.opportunities == ()
        assert orchestrator.scans_completed == 2


class TestScanFailures:

    @pytest.mark.asyncio
    async def test_no_exchanges_selected(self, scan_log):
        orchestrator = build_orchestrator(FakeQuoteSource(), scan_log, [], ["BTC/USDT"])

        assert await orchestrator.scan() is True

        assert orchestrator.state == ScanState.IDLE
        assert orchestrator.opportunities == ()
        assert messages(scan_log, LogSeverity.ERROR) == ["Scan failed: no exchanges selected"]

    @pytest.mark.asyncio
    async def test_no_symbols_selected(self, scan_log):
        orchestrator = build_orchestrator(FakeQuoteSource(), scan_log, ["binance"], [])

        await orchestrator.scan()

        assert messages(scan_log, LogSeverity.ERROR) == ["Scan failed: no symbols selected"]

    @pytest.mark.asyncio
    async def test_every_fetch_failing(self, scan_log):
        source = FakeQuoteSource()
        orchestrator = build_orchestrator(source, scan_log, ["binance", "kraken"], ["BTC/USDT"])

        await orchestrator.scan()

        assert orchestrator.state == ScanState.IDLE
        assert orchestrator.opportunities == ()
        assert orchestrator.scans_failed == 1
        assert len(messages(scan_log, LogSeverity.WARNING)) == 2
        assert messages(scan_log, LogSeverity.ERROR) == ["Scan failed: no quotes could be fetched"]

    @pytest.mark.asyncio
    async def test_partial_failure_still_scans(self, scan_log):
        quotes = [
            make_quote("binance", "BTC/USDT", 50100, 50120),
            make_quote("kraken", "BTC/USDT", 50300, 50310),
            make_quote("okx", "BTC/USDT", 50400, 50410),
        ]
        source = FakeQuoteSource(quotes, failures={("okx", "BTC/USDT"): FetchError("HTTP 500")})
        orchestrator = build_orchestrator(source, scan_log, ["binance", "kraken", "okx"], ["BTC/USDT"])

        await orchestrator.scan()

        assert len(orchestrator.opportunities) == 1
        assert orchestrator.opportunities[0].sell_exchange == "kraken"
        assert "Failed to fetch BTC/USDT from okx: HTTP 500" in messages(scan_log, LogSeverity.WARNING)

    @pytest.mark.asyncio
    async def test_unexpected_error_returns_to_idle(self, scan_log):
        class ExplodingSource(FakeQuoteSource):
            async def fetch_quote(self, exchange, symbol):
                raise RuntimeError("socket on fire")

        source = ExplodingSource()
        orchestrator = build_orchestrator(source, scan_log, ["binance"], ["BTC/USDT"])

        assert await orchestrator.scan() is True

        assert orchestrator.state == ScanState.IDLE
        assert messages(scan_log, LogSeverity.ERROR) == ["Scan failed: socket on fire"]

    @pytest.mark.asyncio
    async def test_failure_summary_is_the_last_entry(self, scan_log):
        """Requests still running when a scan fails are cancelled, not logged later"""
        class BrokenBinanceSource(FakeQuoteSource):
            async def fetch_quote(self, exchange, symbol):
                if exchange == "binance":
                    raise RuntimeError("socket on fire")
                return await super().fetch_quote(exchange, symbol)

        source = BrokenBinanceSource(
            [make_quote(e, "BTC/USDT", 100, 101) for e in ("kucoin", "kraken", "huobi")],
            delay=0.05,
        )
        orchestrator = ScanOrchestrator(
            source,
            scheduler=ThrottledFetchScheduler(source, scan_log=scan_log, interval=0, max_concurrency=4),
            scan_log=scan_log,
            selection=ScanSelection(exchanges=["binance", "kucoin", "kraken", "huobi"], symbols=["BTC/USDT"]),
        )

        await orchestrator.scan()
        assert source.in_flight == 0
        await asyncio.sleep(0.1)

        assert messages(scan_log) == [
            "Scan started: 4 exchanges x 1 symbols",
            "Scan failed: socket on fire",
        ]

    def test_keeps_the_log_it_was_given(self, btc_quotes):
        shared = ScanLog()
        source = FakeQuoteSource(btc_quotes)
        orchestrator = ScanOrchestrator(source, scan_log=shared)

        assert orchestrator.scan_log is shared
        assert orchestrator.scheduler.scan_log is shared

    @pytest.mark.asyncio
    async def test_can_scan_again_after_failure(self, scan_log, btc_quotes):
        source = FakeQuoteSource()
        orchestrator = build_orchestrator(source, scan_log, ["binance", "kraken"], ["BTC/USDT"])
        await orchestrator.scan()

        source.quotes = {(q.exchange, q.symbol): q for q in btc_quotes}
        await orchestrator.scan()

        assert len(orchestrator.opportunities) == 1


class TestScanSelection:

    def test_defaults(self):
        selection = ScanSelection()

        assert selection.exchanges == ["binance", "kucoin", "kraken"]
        assert selection.symbols == ["BTC/USDT", "ETH/USDT", "XRP/USDT"]

    def test_catalogue_order(self):
        selection = ScanSelection(exchanges=["okx", "binance"], symbols=["ETH/USDT", "BTC/USDT"])

        assert selection.exchanges == ["binance", "okx"]
        assert selection.symbols == ["BTC/USDT", "ETH/USDT"]

    def test_unknown_exchange_rejected(self):
        selection = ScanSelection()

        with pytest.raises(ValueError, match="Unknown exchange: nowhere"):
            selection.set_exchanges(["binance", "nowhere"])

        assert selection.exchanges == ["binance", "kucoin", "kraken"]

    def test_unknown_symbol_rejected(self):
        with pytest.raises(ValueError):
            ScanSelection(symbols=["FOO/BAR"])

    def test_toggle(self):
        selection = ScanSelection(exchanges=["binance"])

        assert selection.toggle_exchange("okx") is True
        assert selection.exchanges == ["binance", "okx"]
        assert selection.toggle_exchange("binance") is False
        assert selection.exchanges == ["okx"]
        assert selection.toggle_symbol("BTC/USDT") is False

    def test_to_dict(self):
        data = ScanSelection(exchanges=["binance"], symbols=["BTC/USDT"]).to_dict()

        assert data["exchanges"] == ["binance"]
        assert len(data["available_exchanges"]) == 10
        assert len(data["available_symbols"]) == 10


class TestSnapshot:

    @pytest.mark.asyncio
    async def test_snapshot_contents(self, orchestrator):
        await orchestrator.scan()

        snapshot = orchestrator.snapshot()

        assert snapshot["state"] == "idle"
        assert len(snapshot["opportunities"]) == 1
        assert snapshot["logs"][0]["message"] == "Scan finished: 1 opportunities found"
        assert snapshot["selection"]["symbols"] == ["BTC/USDT"]
        assert snapshot["stats"]["scans_completed"] == 1
        assert snapshot["stats"]["total_requests"] == 2
