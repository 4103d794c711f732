"""
Pytest configuration and shared fixtures.
"""

import asyncio
import os
from decimal import Decimal
from typing import Iterable, Optional

import pytest

# Set test environment
os.environ["DEBUG_MODE"] = "true"
os.environ["ENABLE_NOTIFICATIONS"] = "false"
os.environ["FEED_A_NAME"] = "simulated"
os.environ["FEED_B_NAME"] = "simulated"

from arbwatch.feeds.base import BasePriceFeed, PriceStream
from arbwatch.models import EngineConfig, Price, Symbol


class ScriptedFeed(BasePriceFeed):
    """In-memory feed whose quotes are pushed by the test."""

    NAME = "scripted"

    def __init__(
        self,
        label: str,
        quotes: Iterable[Price] = (),
        fees="0",
        fail_open: Optional[Exception] = None,
    ):
        super().__init__(fees=fees)
        self._label = label
        self.quotes = list(quotes)
        self.fail_open = fail_open
        self.stream: Optional[PriceStream] = None

    @property
    def name(self) -> str:
        return self._label

    async def _start(self, symbol: Symbol, interval: float, stream: PriceStream) -> None:
        if self.fail_open is not None:
            raise self.fail_open
        self.stream = stream
        for quote in self.quotes:
            stream.publish(quote)

    def push(self, ask, bid) -> None:
        self.stream.publish(Price(ask=Decimal(str(ask)), bid=Decimal(str(bid))))


async def wait_until(predicate, timeout: float = 2.0, step: float = 0.005) -> None:
    """Poll predicate until true or fail the test."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            pytest.fail("condition not met in time")
        await asyncio.sleep(step)


@pytest.fixture
def feed_a():
    """Exchange A from the worked example: ask 110, bid 100, fee 0.1%."""
    return ScriptedFeed("A", [Price(ask=Decimal("110"), bid=Decimal("100"))], fees="0.001")


@pytest.fixture
def feed_b():
    """Exchange B from the worked example: ask 105, bid 95, fee 0.2%."""
    return ScriptedFeed("B", [Price(ask=Decimal("105"), bid=Decimal("95"))], fees="0.002")


@pytest.fixture
def make_config():
    """Build an EngineConfig around two feeds."""
    def _make(feed_a, feed_b, interval=0.01, slippage="0.0005", ready_timeout=None, pair="BTC-USDT"):
        return EngineConfig(
            trading_pair=pair,
            interval=interval,
            slippage=Decimal(slippage),
            ready_timeout=ready_timeout,
            feed_a=feed_a,
            feed_b=feed_b,
        )
    return _make


@pytest.fixture
def scripted_feed():
    """The ScriptedFeed class, for tests that build their own feeds."""
    return ScriptedFeed


@pytest.fixture
def eventually():
    """Async helper: await eventually(lambda: condition)."""
    return wait_until


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Each test reads configuration from its own environment."""
    monkeypatch.setattr("arbwatch.config._config", None)
