"""Web dashboard API for the spread scanner"""
import asyncio
import csv
import io
import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query, Response, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from engine_scanner import ScanOrchestrator, ScanState
from src.core.opportunity import Opportunity
from src.portfolio.models import PortfolioSummary
from src.portfolio.service import PortfolioService

logger = logging.getLogger(__name__)

app = FastAPI(title="SpreadScout", version="1.0.0")


class SelectionUpdate(BaseModel):
    """Replace the scanned exchanges and/or symbols"""
    exchanges: Optional[List[str]] = None
    symbols: Optional[List[str]] = None


class DashboardManager:
    """Manages WebSocket connections to dashboard clients"""

    def __init__(self):
        self.active_connections: list[WebSocket] = []
        self._broadcast_tasks: set[asyncio.Task] = set()
        self.scanner: Optional[ScanOrchestrator] = None
        self.portfolio: Optional[PortfolioService] = None
        self.quote_source = None

    def set_scanner(self, scanner: ScanOrchestrator):
        """Set the scan orchestrator and register callbacks"""
        self.scanner = scanner
        scanner.on_state_change(self._on_state_change)
        scanner.on_scan_complete(self._on_scan_complete)

    def set_portfolio(self, portfolio: PortfolioService, quote_source):
        self.portfolio = portfolio
        self.quote_source = quote_source

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"Dashboard client connected. Total: {len(self.active_connections)}")

        # Send current state
        if self.scanner:
            await websocket.send_json({
                "type": "state",
                "data": self.scanner.snapshot()
            })

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
        logger.info(f"Dashboard client disconnected. Total: {len(self.active_connections)}")

    async def broadcast(self, message: dict):
        """Broadcast message to all connected clients"""
        for connection in list(self.active_connections):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.error(f"Broadcast error: {e}")
                self.disconnect(connection)

    def _schedule_broadcast(self, message: dict):
        if not self.active_connections:
            return
        # Keep a reference until done so the task is not garbage collected
        task = asyncio.get_running_loop().create_task(self.broadcast(message))
        self._broadcast_tasks.add(task)
        task.add_done_callback(self._broadcast_tasks.discard)

    def _on_state_change(self, state: ScanState):
        """Handle scan state transition"""
        self._schedule_broadcast({"type": "scan_state", "data": {"state": state.value}})

    def _on_scan_complete(self, opportunities: tuple[Opportunity, ...]):
        """Handle freshly published opportunity list"""
        self._schedule_broadcast({
            "type": "opportunities",
            "data": [o.to_dict() for o in opportunities],
        })


manager = DashboardManager()


def _require_scanner() -> ScanOrchestrator:
    if not manager.scanner:
        raise HTTPException(status_code=503, detail="Scanner not initialized")
    return manager.scanner


def _require_portfolio() -> PortfolioService:
    if not manager.portfolio:
        raise HTTPException(status_code=503, detail="Portfolio not initialized")
    return manager.portfolio


def generate_csv(headers: List[str], rows: List[List[str]]) -> str:
    """Generate CSV string from headers and rows"""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(headers)
    writer.writerows(rows)
    return output.getvalue()


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await manager.connect(websocket)
    try:
        while True:
            # Keep connection alive, handle any client messages
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        manager.disconnect(websocket)


@app.get("/api/state")
async def get_state():
    """Get current scanner state"""
    state = _require_scanner().snapshot()
    if manager.portfolio:
        state["portfolio"] = manager.portfolio.get_summary().model_dump(mode="json")
    return state


@app.get("/api/opportunities")
async def get_opportunities():
    """Get the latest ranked opportunities"""
    return [o.to_dict() for o in _require_scanner().opportunities]


@app.get("/api/export/opportunities.csv")
async def export_opportunities_csv():
    """Export the latest opportunities as a CSV download"""
    opportunities = _require_scanner().opportunities
    content = generate_csv(Opportunity.csv_headers(), [o.to_csv_row() for o in opportunities])
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=opportunities.csv"},
    )


@app.get("/api/logs")
async def get_logs(limit: int = Query(default=100, ge=1, le=1000)):
    """Get audit log, most recent first"""
    return [entry.to_dict() for entry in _require_scanner().scan_log.recent(limit)]


@app.post("/api/scan")
async def run_scan():
    """Run one scan; a request during a running scan is a no-op"""
    scanner = _require_scanner()
    started = await scanner.scan()
    return {
        "started": started,
        "state": scanner.state.value,
        "opportunities": [o.to_dict() for o in scanner.opportunities],
    }


@app.get("/api/selection")
async def get_selection():
    return _require_scanner().selection.to_dict()


@app.put("/api/selection")
async def update_selection(update: SelectionUpdate):
    """Replace the selected exchanges and/or symbols"""
    selection = _require_scanner().selection
    previous_exchanges, previous_symbols = selection.exchanges, selection.symbols
    try:
        if update.exchanges is not None:
            selection.set_exchanges(update.exchanges)
        if update.symbols is not None:
            selection.set_symbols(update.symbols)
    except ValueError as e:
        # All or nothing
        selection.set_exchanges(previous_exchanges)
        selection.set_symbols(previous_symbols)
        raise HTTPException(status_code=400, detail=str(e))
    return selection.to_dict()


@app.get("/api/portfolio", response_model=PortfolioSummary)
async def get_portfolio():
    """Get held assets with P&L"""
    return _require_portfolio().get_summary()


@app.post("/api/portfolio/refresh", response_model=PortfolioSummary)
async def refresh_portfolio():
    """Re-price held assets from the reference exchange"""
    portfolio = _require_portfolio()
    await portfolio.refresh_prices(manager.quote_source)
    return portfolio.get_summary()
