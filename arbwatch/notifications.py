"""
Notification system for profitable plans.
Supports Discord webhooks and Telegram bots.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Dict, Optional

import httpx

from arbwatch.config import MonitoringConfig, get_config
from arbwatch.logger import get_logger
from arbwatch.models import ArbitragePlan


logger = get_logger("notifications")


class NotificationService:
    """
    Send alerts about profitable arbitrage plans.

    Registered as an engine sink. Unprofitable plans are ignored, and each
    direction is alerted at most once per cooldown window.
    """

    def __init__(
        self,
        config: Optional[MonitoringConfig] = None,
        cooldown_seconds: float = 60,
    ):
        self.config = config or get_config().monitoring
        self._client: Optional[httpx.AsyncClient] = None
        self._cooldown = timedelta(seconds=cooldown_seconds)
        self._last_sent: Dict[str, datetime] = {}

    async def connect(self) -> None:
        """Initialize HTTP client."""
        self._client = httpx.AsyncClient(timeout=10.0)

    async def disconnect(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def is_enabled(self) -> bool:
        return self.config.enable_notifications

    async def send_discord(self, message: str, embed: Optional[dict] = None) -> bool:
        """Send message to Discord webhook."""
        webhook_url = self.config.discord_webhook_url
        if not webhook_url or not self._client:
            return False

        try:
            payload = {"content": message}
            if embed:
                payload["embeds"] = [embed]

            response = await self._client.post(webhook_url, json=payload)
            return response.status_code == 204
        except httpx.HTTPError as e:
            logger.error(f"Discord notification failed: {e}")
            return False

    async def send_telegram(self, message: str) -> bool:
        """Send message to Telegram."""
        bot_token = self.config.telegram_bot_token
        chat_id = self.config.telegram_chat_id

        if not bot_token or not chat_id or not self._client:
            return False

        try:
            url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
            payload = {
                "chat_id": chat_id,
                "text": message,
                "parse_mode": "HTML",
            }

            response = await self._client.post(url, json=payload)
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.error(f"Telegram notification failed: {e}")
            return False

    def should_notify(self, plan: ArbitragePlan) -> bool:
        """Profitable and not alerted for this direction within the cooldown."""
        if not self.is_enabled or not plan.profitable:
            return False
        last = self._last_sent.get(plan.direction)
        return last is None or plan.timestamp - last >= self._cooldown

    @staticmethod
    def build_embed(plan: ArbitragePlan) -> dict:
        return {
            "title": f"🎯 Arbitrage {plan.pair}",
            "color": 0x00ff00,  # Green
            "fields": [
                {"name": "Buy", "value": f"{plan.buy_exchange} @ {plan.buy_price:.4f}", "inline": True},
                {"name": "Sell", "value": f"{plan.sell_exchange} @ {plan.sell_price:.4f}", "inline": True},
                {"name": "Profit", "value": f"{plan.profit:.4f}", "inline": True},
                {"name": "Total Fee", "value": f"{plan.total_fee:.4f}", "inline": True},
                {"name": "Slippage", "value": f"{plan.slippage:.4%}", "inline": True},
            ],
            "timestamp": plan.timestamp.isoformat(),
        }

    @staticmethod
    def build_message(plan: ArbitragePlan) -> str:
        return (
            f"🎯 <b>Arbitrage {plan.pair}</b>\n"
            f"Buy {plan.buy_exchange} @ {plan.buy_price:.4f}\n"
            f"Sell {plan.sell_exchange} @ {plan.sell_price:.4f}\n"
            f"Profit: {plan.profit:.4f} (fees {plan.total_fee:.4f})"
        )

    async def notify_plan(self, plan: ArbitragePlan) -> None:
        """Alert about a profitable plan."""
        if not self.should_notify(plan):
            return
        self._last_sent[plan.direction] = plan.timestamp

        await asyncio.gather(
            self.send_discord("", embed=self.build_embed(plan)),
            self.send_telegram(self.build_message(plan)),
        )

    async def __call__(self, plan: ArbitragePlan) -> None:
        await self.notify_plan(plan)

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
