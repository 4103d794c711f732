"""
Dual-feed synchronizer and arbitrage evaluation engine.
"""

from arbwatch.engine.arbitrage_engine import ArbitrageEngine
from arbwatch.engine.price_view import PriceView
from arbwatch.engine.profit import calc_adjusted_profit, calc_total_fee

__all__ = [
    "ArbitrageEngine",
    "PriceView",
    "calc_adjusted_profit",
    "calc_total_fee",
]
