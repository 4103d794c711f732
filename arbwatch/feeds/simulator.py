"""Simulated feed for running without network access"""
import asyncio
import random
from decimal import Decimal
from typing import Optional, Tuple

from arbwatch.feeds.base import BasePriceFeed, PriceStream
from arbwatch.logger import get_logger
from arbwatch.models import Price, Symbol


logger = get_logger("simulator")


# Realistic base prices per base asset
BASE_PRICES = {
    "BTC": 97500.0,
    "ETH": 3250.0,
    "SOL": 245.0,
    "XRP": 3.15,
    "BNB": 690.0,
}

QUANTUM = Decimal("0.0001")


class SimulatedFeed(BasePriceFeed):
    """
    Random-walk quotes with a configurable price offset.

    Two simulated feeds with different offsets produce spreads for the engine
    to evaluate.
    """

    NAME = "simulated"

    def __init__(
        self,
        *args,
        label: Optional[str] = None,
        price_offset_percent: float = 0.0,
        seed: Optional[int] = None,
        **kwargs,
    ):
        """
        Args:
            label: Display name, defaults to "simulated"
            price_offset_percent: Base price offset, e.g. 0.05 means prices are
                0.05% above the shared base price
            seed: Seed for a reproducible walk
        """
        super().__init__(*args, **kwargs)
        self._label = label
        self.price_offset = price_offset_percent / 100
        self._random = random.Random(seed)

    @property
    def name(self) -> str:
        return self._label or self.NAME

    async def _start(self, symbol: Symbol, interval: float, stream: PriceStream) -> None:
        logger.info(f"[{self.name}] 🎮 SIMULATION MODE - Generating mock prices")
        stream.attach(asyncio.create_task(
            self._walk(symbol, interval, stream),
            name=f"{self.name}-{symbol.join()}",
        ))

    def next_price(self, current: float) -> Tuple[float, Price]:
        """Advance the walk one step and quote around the new price."""
        # Small random movement (-0.1% to +0.1%)
        new_price = current * (1 + self._random.uniform(-0.001, 0.001))
        adjusted = new_price * (1 + self.price_offset)

        # Spread of 0.01% to 0.05%
        half_spread = adjusted * self._random.uniform(0.0001, 0.0005) / 2
        price = Price(
            ask=Decimal(str(adjusted + half_spread)).quantize(QUANTUM),
            bid=Decimal(str(adjusted - half_spread)).quantize(QUANTUM),
        )
        return new_price, price

    async def _walk(self, symbol: Symbol, interval: float, stream: PriceStream) -> None:
        current = BASE_PRICES.get(symbol.base, 100.0)
        while not stream.closed:
            current, price = self.next_price(current)
            stream.publish(price)
            # Jitter around the sampling interval
            await asyncio.sleep(interval * self._random.uniform(0.5, 1.5))
