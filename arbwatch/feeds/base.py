"""
Base classes for price feeds.

A feed is opened for one symbol and hands back a PriceStream: a single-slot,
latest-value-wins buffer the engine consumes with ``async for``.
"""

import asyncio
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional

from arbwatch.errors import ArbwatchError, FeedOpenError
from arbwatch.models import Price, Symbol, to_decimal
from arbwatch.symbols import parse_symbol
from arbwatch.logger import get_logger


logger = get_logger("feeds")


def _running_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class PriceStream:
    """
    Cancellable subscription to one feed's quotes.

    Only the most recent unconsumed quote is kept. Publishing over an
    unconsumed quote replaces it and counts as a drop, so a slow consumer
    always sees fresh prices and memory stays bounded.
    """

    def __init__(self, exchange: str, symbol: Symbol):
        self.exchange = exchange
        self.symbol = symbol
        self._latest: Optional[Price] = None
        self._wakeup = asyncio.Event()
        self._closed = False
        self._producer: Optional[asyncio.Task] = None

        self.published = 0
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def attach(self, task: asyncio.Task) -> None:
        """Tie a producer task to this stream; close() cancels it."""
        self._producer = task

    def publish(self, price: Price) -> bool:
        """Store a quote for the consumer. Returns False once closed."""
        if self._closed:
            return False
        if self._latest is not None:
            self.dropped += 1
        self._latest = price
        self.published += 1
        self._wakeup.set()
        return True

    async def get(self) -> Optional[Price]:
        """
        Wait for the next quote.

        Returns None when the stream is closed and nothing is pending. A quote
        published before close() is still returned.
        """
        while self._latest is None:
            if self._closed:
                return None
            self._wakeup.clear()
            await self._wakeup.wait()

        price, self._latest = self._latest, None
        return price

    def close(self) -> None:
        """Stop the stream. Safe to call any number of times."""
        if self._closed:
            return
        self._closed = True
        self._wakeup.set()
        producer = self._producer
        # A producer closing its own stream exits on its own
        if producer is not None and not producer.done() and producer is not _running_task():
            producer.cancel()

    async def aclose(self) -> None:
        """Close and wait for the producer task to finish."""
        self.close()
        if self._producer is not None:
            try:
                await self._producer
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.warning(f"[{self.exchange}] producer ended with error: {e}")

    def __aiter__(self):
        return self

    async def __anext__(self) -> Price:
        price = await self.get()
        if price is None:
            raise StopAsyncIteration
        return price


class BasePriceFeed(ABC):
    """
    Abstract base class for exchange price feeds.

    Subclasses set NAME and implement _start(), which begins publishing
    quotes into the stream, normally by attaching a background task.
    """

    NAME = "base"

    def __init__(
        self,
        fees=Decimal("0"),
        testing: bool = False,
        api_key: str = "",
        api_secret: str = "",
    ):
        self._fees = to_decimal(fees)
        self.testing = testing
        self.api_key = api_key
        self.api_secret = api_secret
        self._is_connected = False
        self._streams: List[PriceStream] = []

    @property
    def name(self) -> str:
        """Identifier used in reports."""
        return self.NAME

    @property
    def fees(self) -> Decimal:
        """Fixed per-transaction fee rate."""
        return self._fees

    @property
    def is_connected(self) -> bool:
        return self._is_connected

    async def connect(self) -> None:
        """Acquire client resources. Called by open() when needed."""
        self._is_connected = True

    async def disconnect(self) -> None:
        """Close every open stream and release client resources."""
        streams, self._streams = self._streams, []
        for stream in streams:
            await stream.aclose()
        self._is_connected = False

    async def open(self, symbol: str, interval: float) -> PriceStream:
        """
        Start a price stream for symbol.

        Args:
            symbol: Ticker such as "BTC-USDT" or "ETHUSDT"
            interval: Polling cadence in seconds, for feeds that poll

        Raises:
            InvalidSymbolError: symbol does not match {base}[:-_]{quote}
            FeedOpenError: the stream could not be started
        """
        parsed = parse_symbol(symbol)
        if not self._is_connected:
            await self.connect()

        stream = PriceStream(self.name, parsed)
        try:
            await self._start(parsed, interval, stream)
        except ArbwatchError:
            stream.close()
            raise
        except Exception as e:
            stream.close()
            raise FeedOpenError(f"{self.name}: cannot open price stream for {symbol}: {e}") from e

        self._streams.append(stream)
        logger.info(f"[{self.name}] price stream opened", symbol=str(parsed))
        return stream

    @abstractmethod
    async def _start(self, symbol: Symbol, interval: float, stream: PriceStream) -> None:
        """Begin publishing quotes for symbol into stream."""
        pass

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
