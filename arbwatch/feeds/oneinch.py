"""
1inch price feed.

1inch quotes swap rates from the CoinGecko oracle, so this feed polls the
CoinGecko simple price endpoint. There is no order book: ask and bid are the
same oracle price.
"""

import asyncio
from typing import Optional

import httpx
from aiolimiter import AsyncLimiter

from arbwatch.errors import PriceDataError
from arbwatch.feeds.base import BasePriceFeed, PriceStream
from arbwatch.logger import get_logger
from arbwatch.models import Price, Symbol


logger = get_logger("oneinch")


# Token to CoinGecko id. Stablecoins are quoted in usd.
COINGECKO_IDS = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "USDC": "usd",
    "USDT": "usd",
    "DAI": "usd",
}


def coingecko_id(token: str) -> str:
    return COINGECKO_IDS.get(token.upper(), token.lower())


class OneInchFeed(BasePriceFeed):
    """Polling feed backed by the CoinGecko simple price API."""

    NAME = "1inch"

    BASE_URL = "https://api.coingecko.com/api/v3"
    PRICE_ENDPOINT = "/simple/price"

    # Public API allows roughly 30 calls per minute
    RATE_LIMIT = (30, 60)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._client: Optional[httpx.AsyncClient] = None
        self._limiter = AsyncLimiter(*self.RATE_LIMIT)

    async def connect(self) -> None:
        """Initialize HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={"Accept": "application/json"},
            timeout=10.0,
        )
        self._is_connected = True
        logger.info("Connected to CoinGecko API")

    async def disconnect(self) -> None:
        """Stop polling and close HTTP client."""
        await super().disconnect()
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _start(self, symbol: Symbol, interval: float, stream: PriceStream) -> None:
        stream.attach(asyncio.create_task(
            self._poll(symbol, interval, stream),
            name=f"{self.name}-{symbol.join()}",
        ))

    async def _poll(self, symbol: Symbol, interval: float, stream: PriceStream) -> None:
        while not stream.closed:
            try:
                price = await self.fetch_price(symbol)
                stream.publish(price)
            except (httpx.HTTPError, PriceDataError) as e:
                logger.debug(f"[{self.name}] fetch price failed: {e}")
            await asyncio.sleep(interval)

    async def fetch_price(self, symbol: Symbol) -> Price:
        """Fetch the oracle price for symbol, e.g. ?ids=ethereum&vs_currencies=usd."""
        if not self._client:
            raise RuntimeError("Not connected to CoinGecko API")

        base, quote = coingecko_id(symbol.base), coingecko_id(symbol.quote)
        async with self._limiter:
            response = await self._client.get(
                self.PRICE_ENDPOINT,
                params={"ids": base, "vs_currencies": quote},
            )
            response.raise_for_status()

        try:
            payload = response.json()
        except ValueError as e:
            raise PriceDataError(f"bad response body: {e}") from e
        return self.parse_payload(payload, base, quote)

    @staticmethod
    def parse_payload(payload, base: str, quote: str) -> Price:
        """Extract payload[base][quote] as an ask == bid quote."""
        try:
            value = payload[base][quote]
        except (KeyError, TypeError) as e:
            raise PriceDataError(f"no {base}/{quote} price in response") from e
        return Price(ask=value, bid=value)
