"""
Exception types raised across the monitor.

Only startup errors (configuration, feed open, readiness) are expected to
reach the caller of the engine. Price data errors are handled by the feed
consumers and never leave them.
"""

from typing import Iterable, Optional


class ArbwatchError(Exception):
    """Base class for all arbwatch errors."""


class ConfigurationError(ArbwatchError):
    """Configuration is missing or invalid."""


class UnknownFeedError(ConfigurationError):
    """No feed is registered under the requested identifier."""

    def __init__(self, name: str, known: Iterable[str] = ()):
        self.name = name
        self.known = sorted(known)
        hint = f" (known feeds: {', '.join(self.known)})" if self.known else ""
        super().__init__(f"unknown feed: {name!r}{hint}")


class FeedOpenError(ArbwatchError):
    """A price feed could not be opened."""


class InvalidSymbolError(FeedOpenError):
    """Ticker symbol does not match the {base}[:-_]{quote} pattern."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"invalid ticker symbol format: {symbol!r}")


class FeedNotReadyError(ArbwatchError):
    """A feed has not delivered its first quote in time."""

    def __init__(self, exchanges: Iterable[str], timeout: Optional[float] = None):
        self.exchanges = list(exchanges)
        self.timeout = timeout
        names = ", ".join(self.exchanges)
        if timeout is None:
            super().__init__(f"feed not ready: {names}")
        else:
            super().__init__(f"feed not ready after {timeout:g}s: {names}")


class PriceDataError(ArbwatchError):
    """A quote received from a feed is malformed."""
