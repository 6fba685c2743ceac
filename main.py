"""
SpreadScout - Main Entry Point

Polls public exchange tickers, detects cross-exchange spreads and serves
the results over a small HTTP/WebSocket API.

Features:
- Paced, bounded-concurrency ticker polling across ten exchanges
- Best bid / best ask crossing detection ranked by spread
- Bounded audit log of every scan
- Portfolio re-pricing from a reference exchange
"""
import asyncio
import logging
import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import (
    WEB_HOST, WEB_PORT, MODE, AUTO_SCAN_INTERVAL,
    PORTFOLIO_REFRESH_INTERVAL, PORTFOLIO_SEED,
)
from exchanges import create_quote_source
from engine_scanner import ScanOrchestrator
from src.core.scan_log import ScanLog
from src.portfolio.service import PortfolioService

# Dashboard
from dashboard import app, manager

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)

# Reduce noise from libraries
logging.getLogger('aiohttp.access').setLevel(logging.WARNING)
logging.getLogger('uvicorn.access').setLevel(logging.WARNING)


class SpreadScoutBot:
    """Wires the quote source, scanner and portfolio together"""

    def __init__(self, mode: str = "live"):
        self.mode = mode
        self.quote_source = create_quote_source(mode)
        self.scan_log = ScanLog()
        self.scanner = ScanOrchestrator(self.quote_source, scan_log=self.scan_log)
        self.portfolio = PortfolioService(scan_log=self.scan_log)
        self.portfolio.load_seed(PORTFOLIO_SEED)

        self.tasks: list[asyncio.Task] = []
        self.running = False

    def setup(self):
        """Connect engines to the dashboard"""
        manager.set_scanner(self.scanner)
        manager.set_portfolio(self.portfolio, self.quote_source)

        logger.info(f"Exchanges: {', '.join(self.scanner.selection.exchanges)}")
        logger.info(f"Monitoring pairs: {', '.join(self.scanner.selection.symbols)}")

    async def _scan_loop(self, interval: float):
        while self.running:
            await self.scanner.scan()
            await asyncio.sleep(interval)

    async def _portfolio_loop(self, interval: float):
        while self.running:
            await self.portfolio.refresh_prices(self.quote_source)
            await asyncio.sleep(interval)

    async def start(self):
        """Start background loops"""
        self.running = True
        self.setup()

        logger.info("=" * 60)
        logger.info("🚀 SPREADSCOUT STARTING")
        if self.mode == "simulation":
            logger.info("🎮 SIMULATION MODE - Using mock price data")
        logger.info("=" * 60)

        if AUTO_SCAN_INTERVAL > 0:
            self.tasks.append(asyncio.create_task(self._scan_loop(AUTO_SCAN_INTERVAL)))
            logger.info(f"Auto-scan every {AUTO_SCAN_INTERVAL}s")
        if PORTFOLIO_REFRESH_INTERVAL > 0:
            self.tasks.append(asyncio.create_task(self._portfolio_loop(PORTFOLIO_REFRESH_INTERVAL)))

        logger.info(f"API available at http://localhost:{WEB_PORT}/api/state")
        logger.info("=" * 60)

    async def stop(self):
        """Stop loops and release the HTTP session"""
        self.running = False
        logger.info("Shutting down...")

        for task in self.tasks:
            task.cancel()
        await asyncio.gather(*self.tasks, return_exceptions=True)
        self.tasks.clear()

        await self.quote_source.close()
        logger.info("Bot stopped")


# Global bot instance
bot = SpreadScoutBot(mode=MODE)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan handler"""
    await bot.start()
    yield
    await bot.stop()


def handle_sigint(sig, frame):
    """Handle Ctrl+C gracefully"""
    logger.info("Received SIGINT, shutting down...")
    sys.exit(0)


def main():
    """Main entry point"""
    # Start the bot with the server
    app.router.lifespan_context = lifespan
    signal.signal(signal.SIGINT, handle_sigint)

    print(f"""
    ╔═══════════════════════════════════════════════════════════╗
    ║                                                           ║
    ║     ⚡ SPREADSCOUT - CROSS-EXCHANGE SPREAD SCANNER ⚡      ║
    ║                                                           ║
    ║     Mode: {MODE:<47} ║
    ║                                                           ║
    ║     Endpoints:                                            ║
    ║       State:      http://localhost:{WEB_PORT:<22} ║
    ║       Scan:       POST /api/scan                          ║
    ║       Portfolio:  GET  /api/portfolio                     ║
    ║                                                           ║
    ║     Set SPREADSCOUT_MODE=simulation to use mock data      ║
    ║                                                           ║
    ╚═══════════════════════════════════════════════════════════╝
    """)

    # Run FastAPI server (which starts bot via lifespan)
    uvicorn.run(
        app,
        host=WEB_HOST,
        port=WEB_PORT,
        log_level="warning"
    )


if __name__ == "__main__":
    main()
