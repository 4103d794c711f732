"""
Materialized view of one feed's latest quote.
"""

import asyncio
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from arbwatch.errors import FeedNotReadyError
from arbwatch.models import Price


class PriceView:
    """
    Single-slot cache of the most recent quote from one exchange.

    One writer (the feed consumer) calls update(); any number of readers call
    read(). The slot is swapped under a short lock so a reader always gets an
    ask and bid from the same quote.

    The first update fires the readiness signal. Later updates never fire it
    again.
    """

    def __init__(self, exchange: str, on_ready: Optional[Callable[["PriceView"], None]] = None):
        self.exchange = exchange
        self._lock = threading.Lock()
        self._price: Optional[Price] = None
        self._ready = asyncio.Event()
        self._on_ready = on_ready

        self.update_count = 0
        self.last_update: Optional[datetime] = None

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    def update(self, price: Price) -> None:
        """Overwrite the stored quote. The first call marks the view ready."""
        with self._lock:
            self._price = price
            self.update_count += 1
            self.last_update = datetime.now(timezone.utc)
            first = not self._ready.is_set()
            if first:
                self._ready.set()

        if first and self._on_ready is not None:
            self._on_ready(self)

    def read(self) -> Price:
        """
        Snapshot of the current quote.

        Raises:
            FeedNotReadyError: no quote has been received yet
        """
        with self._lock:
            price = self._price
        if price is None:
            raise FeedNotReadyError([self.exchange])
        return price

    async def wait_ready(self, timeout: Optional[float] = None) -> None:
        """
        Block until the first quote arrives.

        Raises:
            FeedNotReadyError: timeout elapsed first
        """
        try:
            await asyncio.wait_for(self._ready.wait(), timeout)
        except asyncio.TimeoutError:
            raise FeedNotReadyError([self.exchange], timeout) from None

    def __repr__(self) -> str:
        return f"PriceView({self.exchange!r}, ready={self.ready}, updates={self.update_count})"
