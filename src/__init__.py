"""
SpreadScout - Cross-Exchange Spread Scanner

Polls exchange tickers, detects cross-exchange crossings and keeps a
re-priced view of held assets.
"""

__version__ = "1.0.0"
__author__ = "SpreadScout Team"
