"""
Tests for the feed registry.
"""

from decimal import Decimal

import pytest

from arbwatch.config import FeedConfig
from arbwatch.errors import ConfigurationError, UnknownFeedError
from arbwatch.feeds import BinanceFeed, FeedRegistry, OneInchFeed, SimulatedFeed, default_registry
from arbwatch.symbols import parse_symbol


class TestFeedRegistry:
    """Tests for feed construction by identifier."""

    def test_builtin_feeds(self):
        registry = default_registry()

        assert registry.names() == ["1inch", "binance", "simulated"]
        assert isinstance(registry.create("binance"), BinanceFeed)
        assert isinstance(registry.create("1inch"), OneInchFeed)
        assert isinstance(registry.create("simulated"), SimulatedFeed)

    def test_lookup_is_case_insensitive(self):
        registry = default_registry()

        assert "Binance" in registry
        assert isinstance(registry.create(" BINANCE "), BinanceFeed)

    def test_unknown_feed(self):
        with pytest.raises(UnknownFeedError) as exc_info:
            default_registry().create("kraken")

        assert isinstance(exc_info.value, ConfigurationError)
        assert exc_info.value.known == ["1inch", "binance", "simulated"]

    def test_register_custom_feed(self, scripted_feed):
        registry = FeedRegistry()
        registry.register("scripted", lambda **kwargs: scripted_feed("custom", **kwargs))

        feed = registry.create("scripted", fees="0.004")

        assert feed.name == "custom"
        assert feed.fees == Decimal("0.004")

    def test_unregister(self):
        registry = default_registry()
        registry.unregister("1inch")

        assert "1inch" not in registry

    def test_from_config_passes_settings(self):
        config = FeedConfig(name="binance", fees=Decimal("0.00075"), testing=True)

        feed = default_registry().from_config(config)

        assert isinstance(feed, BinanceFeed)
        assert feed.fees == Decimal("0.00075")
        assert feed.testing is True
        assert feed.stream_url(parse_symbol("BTC-USDT")).startswith(BinanceFeed.WS_TESTNET_URL)
