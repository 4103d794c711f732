"""
Structured logging configuration for the arbitrage monitor.
Uses structlog for rich, structured logging output.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

import structlog
from rich.console import Console
from rich.logging import RichHandler

from arbwatch.config import get_config
from arbwatch.models import ArbitragePlan, Price


# Rich console for pretty output
console = Console()


def add_timestamp(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Add ISO timestamp to log events."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def add_component(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Ensure component is present in log events."""
    if "component" not in event_dict:
        event_dict["component"] = "main"
    return event_dict


def setup_logging() -> None:
    """Configure structured logging for the application."""
    config = get_config()
    log_level = getattr(logging, config.monitoring.log_level.upper(), logging.INFO)

    # Configure standard library logging
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=console,
                rich_tracebacks=True,
                show_time=True,
                show_path=False,
            )
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    processors = [
        structlog.stdlib.filter_by_level,
        add_timestamp,
        add_component,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if config.development.debug_mode:
        # Pretty console output for development
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        # JSON output for production
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a lazy logger for a component. It resolves against the configuration in effect at first use."""
    return structlog.get_logger(component=component)


class PlanLogger:
    """Specialized logger for evaluated arbitrage plans."""

    def __init__(self):
        self.logger = get_logger("plans")

    def log_plan(self, plan: ArbitragePlan) -> None:
        """Log one evaluated direction. Profitable plans go out at info level."""
        log = self.logger.info if plan.profitable else self.logger.debug
        log(
            "🎯 plan_profitable" if plan.profitable else "plan_evaluated",
            pair=plan.pair,
            buy_exchange=plan.buy_exchange,
            buy_price=str(plan.buy_price),
            sell_exchange=plan.sell_exchange,
            sell_price=str(plan.sell_price),
            profit=str(plan.profit),
            total_fee=str(plan.total_fee),
        )

    def log_feed_ready(self, exchange: str, price: Price) -> None:
        """Log the first quote received from a feed."""
        self.logger.info(
            "📡 feed_ready",
            exchange=exchange,
            ask=str(price.ask),
            bid=str(price.bid),
            mid=str(price.mid),
            spread=str(price.spread),
        )


# Global logger instance
plan_logger = PlanLogger()
