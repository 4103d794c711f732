"""
Data models for the arbitrage monitor.
Prices are kept as Decimal end to end; floats only appear at the edges.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from arbwatch.errors import ConfigurationError, PriceDataError


def to_decimal(value: Any) -> Decimal:
    """
    Convert a feed value to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1") rather than its
    binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise PriceDataError(f"not a number: {value!r}")
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise PriceDataError(f"not a number: {value!r}") from e


class EngineState(Enum):
    """Lifecycle of an arbitrage engine."""
    INITIALIZING = "initializing"
    WAITING_READY = "waiting_ready"
    EVALUATING = "evaluating"
    STOPPED = "stopped"


@dataclass(frozen=True)
class Symbol:
    """A trading pair split into base and quote assets."""
    base: str
    quote: str

    def join(self, separator: str = "") -> str:
        return f"{self.base}{separator}{self.quote}"

    def __str__(self) -> str:
        return self.join("/")


@dataclass(frozen=True)
class Price:
    """Top of book quote from one feed."""
    ask: Decimal
    bid: Decimal

    def __post_init__(self):
        for name in ("ask", "bid"):
            value = to_decimal(getattr(self, name))
            if not value.is_finite() or value < 0:
                raise PriceDataError(f"bad {name} price: {value}")
            object.__setattr__(self, name, value)

    @property
    def spread(self) -> Decimal:
        return self.ask - self.bid

    @property
    def mid(self) -> Decimal:
        return (self.ask + self.bid) / 2


@dataclass(frozen=True)
class ArbitragePlan:
    """
    One evaluated trade direction: buy on one exchange, sell on the other.

    Plans are snapshots. They are handed to the reporting sinks and then
    dropped.
    """
    pair: str
    buy_exchange: str
    buy_price: Decimal
    sell_exchange: str
    sell_price: Decimal
    profit: Decimal
    slippage: Decimal
    total_fee: Decimal
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def profitable(self) -> bool:
        return self.profit > 0

    @property
    def direction(self) -> str:
        return f"{self.buy_exchange}->{self.sell_exchange}"


@dataclass(frozen=True)
class EngineConfig:
    """Immutable settings for one engine instance."""
    trading_pair: str
    interval: float  # seconds between ticks
    slippage: Decimal
    feed_a: Any
    feed_b: Any
    ready_timeout: Optional[float] = None

    def __post_init__(self):
        try:
            slippage = to_decimal(self.slippage)
        except PriceDataError as e:
            raise ConfigurationError(f"bad slippage: {self.slippage!r}") from e
        if not 0 <= slippage < 1:
            raise ConfigurationError(f"slippage must be in [0, 1): {slippage}")
        if self.interval <= 0:
            raise ConfigurationError(f"interval must be positive: {self.interval}")
        if self.ready_timeout is not None and self.ready_timeout <= 0:
            raise ConfigurationError(f"ready timeout must be positive: {self.ready_timeout}")
        object.__setattr__(self, "slippage", slippage)
