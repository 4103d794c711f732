"""
Feed registry.

Maps a feed identifier from configuration to the callable that builds it.
The registry is created at composition time and passed to whoever builds
feeds, instead of a global name switch.
"""

from typing import Callable, Dict, List

from arbwatch.config import FeedConfig
from arbwatch.errors import UnknownFeedError
from arbwatch.feeds.base import BasePriceFeed
from arbwatch.feeds.binance import BinanceFeed
from arbwatch.feeds.oneinch import OneInchFeed
from arbwatch.feeds.simulator import SimulatedFeed
from arbwatch.logger import get_logger


logger = get_logger("registry")

FeedFactory = Callable[..., BasePriceFeed]


class FeedRegistry:
    """Identifier to feed constructor mapping."""

    def __init__(self):
        self._factories: Dict[str, FeedFactory] = {}

    def register(self, name: str, factory: FeedFactory) -> None:
        """
        Register a feed constructor.

        The factory is called with keyword arguments fees, testing, api_key
        and api_secret.
        """
        key = name.strip().lower()
        if key in self._factories:
            logger.warning(f"Replacing feed registration: {key}")
        self._factories[key] = factory

    def unregister(self, name: str) -> None:
        self._factories.pop(name.strip().lower(), None)

    def names(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, name: str) -> bool:
        return name.strip().lower() in self._factories

    def create(self, name: str, **kwargs) -> BasePriceFeed:
        """
        Build the feed registered under name.

        Raises:
            UnknownFeedError: nothing is registered under name
        """
        factory = self._factories.get(name.strip().lower())
        if factory is None:
            raise UnknownFeedError(name, self._factories)
        return factory(**kwargs)

    def from_config(self, config: FeedConfig) -> BasePriceFeed:
        """Build a feed from a FEED_A_* / FEED_B_* config section."""
        return self.create(
            config.name,
            fees=config.fees,
            testing=config.testing,
            api_key=config.api_key,
            api_secret=config.api_secret,
        )


def default_registry() -> FeedRegistry:
    """Registry with the built-in feeds."""
    registry = FeedRegistry()
    registry.register(BinanceFeed.NAME, BinanceFeed)
    registry.register(OneInchFeed.NAME, OneInchFeed)
    registry.register(SimulatedFeed.NAME, SimulatedFeed)
    return registry
