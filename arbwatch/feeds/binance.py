"""
Binance WebSocket feed for best bid/ask quotes.

Uses the public bookTicker stream, so no API credentials are needed.
"""

import asyncio
import json
from typing import Optional

import websockets
from websockets.exceptions import ConnectionClosed

from arbwatch.errors import PriceDataError
from arbwatch.feeds.base import BasePriceFeed, PriceStream
from arbwatch.logger import get_logger
from arbwatch.models import Price, Symbol
from arbwatch.symbols import format_symbol


logger = get_logger("binance")


class BinanceFeed(BasePriceFeed):
    """
    Real-time Binance quotes from the {symbol}@bookTicker stream.

    The first connection is made inside open() so an unreachable endpoint is
    reported to the caller. Later disconnects are retried in the background.
    """

    NAME = "binance"

    WS_BASE_URL = "wss://stream.binance.com:9443/ws"
    WS_TESTNET_URL = "wss://stream.testnet.binance.vision/ws"

    RECONNECT_DELAY = 5  # seconds
    MAX_RECONNECT_ATTEMPTS = 10

    def stream_url(self, symbol: Symbol) -> str:
        base_url = self.WS_TESTNET_URL if self.testing else self.WS_BASE_URL
        return f"{base_url}/{format_symbol(symbol, lower=True)}@bookTicker"

    async def _start(self, symbol: Symbol, interval: float, stream: PriceStream) -> None:
        url = self.stream_url(symbol)
        logger.info(f"🔌 [{self.name}] Connecting to {url}")
        ws = await websockets.connect(url)
        stream.attach(asyncio.create_task(
            self._run(url, ws, stream),
            name=f"{self.name}-{symbol.join()}",
        ))

    async def _run(self, url: str, ws, stream: PriceStream) -> None:
        """
        Pump messages into the stream, reconnecting on disconnect.

        The stream is closed whenever the pump exits, so the consumer sees the
        end of the stream instead of waiting on a dead producer.
        """
        attempts = 0
        try:
            while not stream.closed:
                try:
                    async for message in ws:
                        attempts = 0
                        price = self.parse_message(message)
                        if price is not None:
                            stream.publish(price)
                except ConnectionClosed as e:
                    logger.warning(f"[{self.name}] Connection closed: {e}")

                if stream.closed:
                    break

                attempts += 1
                if attempts > self.MAX_RECONNECT_ATTEMPTS:
                    logger.error(f"[{self.name}] Max reconnection attempts reached")
                    break

                logger.info(
                    f"[{self.name}] Reconnecting in {self.RECONNECT_DELAY}s "
                    f"(attempt {attempts})..."
                )
                await asyncio.sleep(self.RECONNECT_DELAY)
                try:
                    ws = await websockets.connect(url)
                except (OSError, websockets.exceptions.WebSocketException) as e:
                    logger.error(f"[{self.name}] Connection error: {e}")
        except Exception as e:
            logger.error(f"[{self.name}] Price stream failed: {e}")
            raise
        finally:
            stream.close()
            await ws.close()

    def parse_message(self, message) -> Optional[Price]:
        """
        Parse a bookTicker message.

        Format: {"u":400900217,"s":"BNBUSDT","b":"25.35","B":"31.21","a":"25.36","A":"40.66"}
        Malformed messages return None.
        """
        try:
            data = json.loads(message) if isinstance(message, (str, bytes)) else message
            # Combined stream format wraps the payload
            if "data" in data:
                data = data["data"]
            return Price(ask=data["a"], bid=data["b"])
        except (ValueError, KeyError, TypeError, PriceDataError) as e:
            logger.debug(f"[{self.name}] Dropping bad message: {e}")
            return None
