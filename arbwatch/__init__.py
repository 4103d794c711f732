"""
arbwatch - cross-exchange arbitrage monitor for a single trading pair.
"""

__version__ = "0.3.0"
