"""
Cross-exchange arbitrage engine for one trading pair and two feeds.
"""

import asyncio
import inspect
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from arbwatch.engine.price_view import PriceView
from arbwatch.engine.profit import calc_adjusted_profit, calc_total_fee
from arbwatch.errors import FeedNotReadyError
from arbwatch.feeds.base import BasePriceFeed, PriceStream
from arbwatch.logger import get_logger, plan_logger
from arbwatch.models import ArbitragePlan, EngineConfig, EngineState, Price


logger = get_logger("engine")

PlanSink = Callable[[ArbitragePlan], Any]


class ArbitrageEngine:
    """
    Keeps a live view of both feeds and evaluates both trade directions on a
    fixed cadence.

    Flow:
    1. INITIALIZING - open a price stream on each feed; failures are raised
    2. WAITING_READY - drain both streams into PriceViews until each has a quote
    3. EVALUATING - every interval, build plan A->B and plan B->A and hand
       both to the registered sinks, profitable or not
    4. STOPPED - streams closed, consumer tasks finished

    Direction A->B buys at A's bid and sells at B's ask; B->A is the mirror.
    Each leg pays the fee of the exchange it executes on.
    """

    def __init__(self, config: EngineConfig):
        self.config = config
        self.feed_a: BasePriceFeed = config.feed_a
        self.feed_b: BasePriceFeed = config.feed_b

        self.state = EngineState.INITIALIZING
        self.view_a: Optional[PriceView] = None
        self.view_b: Optional[PriceView] = None

        self._streams: List[PriceStream] = []
        self._consumers: List[asyncio.Task] = []
        self._stop_event = asyncio.Event()
        self._sinks: List[PlanSink] = []

        # Performance tracking
        self._ticks = 0
        self._plans_emitted = 0
        self._profitable_plans = 0

    def on_plan(self, callback: PlanSink) -> None:
        """Register a sink for evaluated plans. Coroutine functions are awaited."""
        self._sinks.append(callback)

    @property
    def metrics(self) -> Dict[str, int]:
        return {
            "ticks": self._ticks,
            "plans_emitted": self._plans_emitted,
            "profitable_plans": self._profitable_plans,
        }

    @property
    def background_tasks(self) -> List[asyncio.Task]:
        """Consumer tasks that have not finished yet."""
        return [task for task in self._consumers if not task.done()]

    async def start(self) -> None:
        """
        Run until stop() is called or the task is cancelled.

        Raises:
            FeedOpenError: a feed could not be opened (InvalidSymbolError included)
            FeedNotReadyError: ready_timeout is set and a feed stayed silent
        """
        logger.info(
            "🚀 Starting arbitrage engine",
            pair=self.config.trading_pair,
            feed_a=self.feed_a.name,
            feed_b=self.feed_b.name,
            interval=self.config.interval,
            slippage=str(self.config.slippage),
        )
        try:
            await self._open_streams()

            self.state = EngineState.WAITING_READY
            self._start_consumers()
            if not await self._wait_ready():
                return

            self.state = EngineState.EVALUATING
            logger.info("Both feeds ready, evaluating", pair=self.config.trading_pair)
            await self._run_main_loop()
        finally:
            await self._shutdown()
            self.state = EngineState.STOPPED
            logger.info("Engine stopped", **self.metrics)

    async def stop(self) -> None:
        """Ask the engine to stop. start() returns within one tick interval."""
        logger.info("Stopping engine...")
        self._stop_event.set()

    async def _open_streams(self) -> None:
        pair = self.config.trading_pair
        interval = self.config.interval

        self.view_a = PriceView(self.feed_a.name, on_ready=self._on_view_ready)
        self.view_b = PriceView(self.feed_b.name, on_ready=self._on_view_ready)

        for feed in (self.feed_a, self.feed_b):
            try:
                stream = await feed.open(pair, interval)
            except Exception as e:
                logger.error(f"Cannot open price stream on {feed.name}", error=str(e))
                raise
            self._streams.append(stream)

    def _start_consumers(self) -> None:
        for stream, view in zip(self._streams, (self.view_a, self.view_b)):
            self._consumers.append(asyncio.create_task(
                self._consume(stream, view),
                name=f"consume-{view.exchange}",
            ))

    async def _consume(self, stream: PriceStream, view: PriceView) -> None:
        """Drain a stream into its view until the stream closes."""
        async for price in stream:
            if not isinstance(price, Price):
                logger.debug("Dropping malformed quote", exchange=view.exchange)
                continue
            view.update(price)
        logger.info(f"[{view.exchange}] price stream ended")

    def _on_view_ready(self, view: PriceView) -> None:
        plan_logger.log_feed_ready(view.exchange, view.read())

    async def _wait_ready(self) -> bool:
        """
        Wait for both views, a stop request or the ready timeout.

        Returns False if stopped first.
        """
        ready = asyncio.ensure_future(asyncio.gather(
            self.view_a.wait_ready(),
            self.view_b.wait_ready(),
        ))
        stopped = asyncio.ensure_future(self._stop_event.wait())
        timeout = self.config.ready_timeout

        try:
            await asyncio.wait(
                {ready, stopped},
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for waiter in (ready, stopped):
                if not waiter.done():
                    waiter.cancel()
            await asyncio.gather(ready, stopped, return_exceptions=True)

        if self._stop_event.is_set():
            return False
        if not (self.view_a.ready and self.view_b.ready):
            silent = [view.exchange for view in (self.view_a, self.view_b) if not view.ready]
            logger.error("Feeds not ready", feeds=silent, timeout=timeout)
            raise FeedNotReadyError(silent, timeout)
        return True

    async def _run_main_loop(self) -> None:
        """Tick every interval until stopped. Missed ticks are skipped."""
        loop = asyncio.get_running_loop()
        interval = self.config.interval
        next_tick = loop.time() + interval

        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(),
                    timeout=max(0.0, next_tick - loop.time()),
                )
                break
            except asyncio.TimeoutError:
                pass

            next_tick += interval
            if next_tick < loop.time():
                next_tick = loop.time() + interval

            await self._tick()

    async def _tick(self) -> None:
        self._ticks += 1
        for plan in self.evaluate():
            await self._emit(plan)

    def evaluate(self) -> Tuple[ArbitragePlan, ArbitragePlan]:
        """
        Evaluate both directions against the current snapshots.

        The two views are read independently; the feeds are not synchronised
        with each other.

        Raises:
            FeedNotReadyError: either view has no quote yet
        """
        views = (self.view_a, self.view_b)
        if not all(view is not None and view.ready for view in views):
            names = [feed.name for feed, view in zip((self.feed_a, self.feed_b), views)
                     if view is None or not view.ready]
            raise FeedNotReadyError(names)

        price_a = self.view_a.read()
        price_b = self.view_b.read()
        timestamp = datetime.now(timezone.utc)

        # buy from exchange A and sell to exchange B
        plan_ab = self._build_plan(self.feed_a, price_a.bid, self.feed_b, price_b.ask, timestamp)
        # buy from exchange B and sell to exchange A
        plan_ba = self._build_plan(self.feed_b, price_b.bid, self.feed_a, price_a.ask, timestamp)
        return plan_ab, plan_ba

    def _build_plan(
        self,
        buy_feed: BasePriceFeed,
        buy_price,
        sell_feed: BasePriceFeed,
        sell_price,
        timestamp: datetime,
    ) -> ArbitragePlan:
        slippage = self.config.slippage
        return ArbitragePlan(
            pair=self.config.trading_pair,
            timestamp=timestamp,
            buy_exchange=buy_feed.name,
            buy_price=buy_price,
            sell_exchange=sell_feed.name,
            sell_price=sell_price,
            profit=calc_adjusted_profit(
                sell_price, buy_price, sell_feed.fees, buy_feed.fees, slippage
            ),
            slippage=slippage,
            total_fee=calc_total_fee(sell_price, buy_price, sell_feed.fees, buy_feed.fees),
        )

    async def _emit(self, plan: ArbitragePlan) -> None:
        self._plans_emitted += 1
        if plan.profitable:
            self._profitable_plans += 1
        plan_logger.log_plan(plan)

        for callback in self._sinks:
            try:
                result = callback(plan)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Plan sink error: {e}")

    async def _shutdown(self) -> None:
        """Close streams and wait for consumer tasks to exit."""
        for stream in self._streams:
            stream.close()
        for task in self._consumers:
            if not task.done():
                task.cancel()
        if self._consumers:
            await asyncio.gather(*self._consumers, return_exceptions=True)
        for stream in self._streams:
            await stream.aclose()
