"""
Exchange price feeds.

Each feed opens a PriceStream for one symbol:
1. BinanceFeed - bookTicker WebSocket stream (best bid/ask)
2. OneInchFeed - polled CoinGecko oracle price (ask == bid)
3. SimulatedFeed - random walk for offline runs
"""

from arbwatch.feeds.base import BasePriceFeed, PriceStream
from arbwatch.feeds.binance import BinanceFeed
from arbwatch.feeds.oneinch import OneInchFeed
from arbwatch.feeds.simulator import SimulatedFeed
from arbwatch.feeds.registry import FeedRegistry, default_registry

__all__ = [
    "BasePriceFeed",
    "PriceStream",
    "BinanceFeed",
    "OneInchFeed",
    "SimulatedFeed",
    "FeedRegistry",
    "default_registry",
]
