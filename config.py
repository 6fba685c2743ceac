"""Configuration for the SpreadScout arbitrage scanner"""
import os

# ============================================================
# OPERATION MODE
# ============================================================
# Options:
# - "live": Poll the public REST ticker endpoints of each exchange
# - "simulation": Generate realistic mock quotes (for testing when network is blocked)
MODE = os.getenv("SPREADSCOUT_MODE", "live")

# Exchanges the scanner knows how to query (catalogue order is the tie-break order)
AVAILABLE_EXCHANGES = [
    "binance",
    "kucoin",
    "kraken",
    "huobi",
    "bybit",
    "gateio",
    "okx",
    "bitget",
    "mexc",
    "bitmart",
]

# Trading pairs that can be selected (normalized format)
AVAILABLE_SYMBOLS = [
    "BTC/USDT",
    "ETH/USDT",
    "XRP/USDT",
    "ADA/USDT",
    "DOGE/USDT",
    "BNB/USDT",
    "SOL/USDT",
    "LTC/USDT",
    "LINK/USDT",
    "MATIC/USDT",
]

# Initial selection on startup
DEFAULT_EXCHANGES = AVAILABLE_EXCHANGES[:3]
DEFAULT_SYMBOLS = AVAILABLE_SYMBOLS[:3]

# ============================================================
# REQUEST PACING
# ============================================================
REQUEST_INTERVAL = 0.2  # seconds between request starts
MAX_CONCURRENT_REQUESTS = 4
REQUEST_TIMEOUT = 10  # seconds, per ticker request

# Set to True if you're behind a proxy/firewall with SSL inspection
SKIP_SSL_VERIFY = False

# Public REST ticker endpoints (bid/ask book ticker)
EXCHANGE_REST_URLS = {
    "binance": "https://api.binance.com/api/v3/ticker/bookTicker",
    "kucoin": "https://api.kucoin.com/api/v1/market/orderbook/level1",
    "kraken": "https://api.kraken.com/0/public/Ticker",
    "huobi": "https://api.huobi.pro/market/detail/merged",
    "bybit": "https://api.bybit.com/v5/market/tickers",
    "gateio": "https://api.gateio.ws/api/v4/spot/tickers",
    "okx": "https://www.okx.com/api/v5/market/ticker",
    "bitget": "https://api.bitget.com/api/v2/spot/market/tickers",
    "mexc": "https://api.mexc.com/api/v3/ticker/bookTicker",
    "bitmart": "https://api-cloud.bitmart.com/spot/quotation/v3/ticker",
}

# ============================================================
# DEEP LINKS
# ============================================================
# Trade page per exchange; {symbol} is replaced by the pair in the
# exchange's own notation (appended when the placeholder is missing)
EXCHANGE_TRADE_URLS = {
    "binance": "https://www.binance.com/en/trade/{symbol}",
    "kucoin": "https://www.kucoin.com/trade/{symbol}",
    "kraken": "https://pro.kraken.com/app/trade/{symbol}",
    "huobi": "https://www.htx.com/trade/{symbol}",
    "bybit": "https://www.bybit.com/trade/spot/{symbol}",
    "gateio": "https://www.gate.io/trade/{symbol}",
    "okx": "https://www.okx.com/trade-spot/{symbol}",
    "bitget": "https://www.bitget.com/spot/{symbol}",
    "mexc": "https://www.mexc.com/exchange/{symbol}",
    "bitmart": "https://www.bitmart.com/trade/en-US?symbol={symbol}",
}

# Separator replacing "/" in the trade page symbol
EXCHANGE_LINK_SEPARATORS = {
    "binance": "_",
    "kucoin": "-",
    "kraken": "-",
    "huobi": "_",
    "bybit": "/",
    "gateio": "_",
    "okx": "-",
    "bitget": "",
    "mexc": "_",
    "bitmart": "_",
}
DEFAULT_LINK_SEPARATOR = "_"

# ============================================================
# AUDIT LOG
# ============================================================
MAX_LOG_ENTRIES = 100

# ============================================================
# PORTFOLIO
# ============================================================
PORTFOLIO_REFERENCE_EXCHANGE = "binance"

# Holdings loaded on startup (symbol, amount, average price, last known price)
PORTFOLIO_SEED = [
    {"symbol": "BTC/USDT", "amount": "0.5", "average_price": "50000", "current_price": "52000"},
    {"symbol": "ETH/USDT", "amount": "2.0", "average_price": "3000", "current_price": "3100"},
]

# ============================================================
# BACKGROUND LOOPS
# ============================================================
AUTO_SCAN_INTERVAL = float(os.getenv("SPREADSCOUT_SCAN_INTERVAL", "0"))  # seconds, 0 disables
PORTFOLIO_REFRESH_INTERVAL = 60  # seconds, 0 disables

# Web server settings
WEB_HOST = os.getenv("SPREADSCOUT_HOST", "0.0.0.0")
WEB_PORT = int(os.getenv("SPREADSCOUT_PORT", "8000"))
