#!/usr/bin/env python3
"""
arbwatch - cross-exchange arbitrage monitor

Compares live quotes for one trading pair on two exchanges and reports, every
interval, whether buying on one and selling on the other pays after fees and
slippage.

Usage:
    python main.py run          # Monitor until Ctrl-C
    python main.py check        # Evaluate one tick and exit
    python main.py config       # Show current configuration
    python main.py feeds        # List available feeds
"""

import asyncio
import signal
import sys
from decimal import Decimal
from typing import List, Optional, Tuple

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from arbwatch.config import AppConfig, get_config
from arbwatch.engine import ArbitrageEngine
from arbwatch.errors import ArbwatchError
from arbwatch.feeds import BasePriceFeed, FeedRegistry, SimulatedFeed, default_registry
from arbwatch.logger import setup_logging, get_logger
from arbwatch.models import ArbitragePlan
from arbwatch.notifications import NotificationService
from arbwatch.reporting import PlanReporter, plans_table

# Initialize
app = typer.Typer(
    name="arbwatch",
    help="Cross-exchange arbitrage monitor",
    add_completion=False,
)
console = Console()
logger = None


def setup(debug: bool = False) -> AppConfig:
    """Initialize configuration and logging."""
    global logger
    try:
        config = get_config()
    except ArbwatchError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if debug:
        config.development.debug_mode = True
        config.monitoring.log_level = "DEBUG"

    setup_logging()
    logger = get_logger("main")
    return config


def apply_overrides(
    config: AppConfig,
    pair: Optional[str],
    interval_ms: Optional[int],
    slippage: Optional[float],
    ready_timeout: Optional[float],
    feed_a: Optional[str],
    feed_b: Optional[str],
) -> None:
    """Command line options win over environment settings."""
    if pair:
        config.strategy.trading_pair = pair
    if interval_ms is not None:
        config.strategy.interval_ms = interval_ms
    if slippage is not None:
        config.strategy.slippage = Decimal(str(slippage))
    if ready_timeout is not None:
        config.strategy.ready_timeout_s = ready_timeout
    if feed_a:
        config.feed_a.name = feed_a.lower()
    if feed_b:
        config.feed_b.name = feed_b.lower()


def build_feeds(
    config: AppConfig,
    registry: FeedRegistry,
    simulate: bool = False,
) -> Tuple[BasePriceFeed, BasePriceFeed]:
    """
    Construct both feeds through the registry.

    Two simulated feeds, from --simulate or from the default configuration,
    get distinct labels and B is offset from A.
    """
    both_simulated = config.feed_a.name == config.feed_b.name == SimulatedFeed.NAME
    if simulate or both_simulated:
        # Offset B so the two walks disagree
        return (
            registry.create("simulated", fees=config.feed_a.fees, label="sim-a"),
            registry.create("simulated", fees=config.feed_b.fees, label="sim-b",
                            price_offset_percent=0.05),
        )
    return registry.from_config(config.feed_a), registry.from_config(config.feed_b)


async def run_engine(
    config: AppConfig,
    feed_a: BasePriceFeed,
    feed_b: BasePriceFeed,
    first_tick_only: bool = False,
) -> List[ArbitragePlan]:
    """Run the engine with console reporting until stopped."""
    engine = ArbitrageEngine(config.engine_config(feed_a, feed_b))
    collected: List[ArbitragePlan] = []

    if first_tick_only:
        async def collect(plan: ArbitragePlan) -> None:
            collected.append(plan)
            if len(collected) == 2:
                await engine.stop()

        engine.on_plan(collect)
    else:
        engine.on_plan(PlanReporter(console))

    notifier = NotificationService(config.monitoring)
    if notifier.is_enabled:
        engine.on_plan(notifier)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, lambda: asyncio.ensure_future(engine.stop()))
        except NotImplementedError:
            # Windows event loops have no signal handlers
            pass

    async with feed_a, feed_b, notifier:
        await engine.start()

    return collected


@app.command()
def run(
    pair: Optional[str] = typer.Option(None, "--pair", "-p", help="Trading pair, e.g. BTC-USDT"),
    interval_ms: Optional[int] = typer.Option(None, "--interval", "-i", help="Tick interval in ms"),
    slippage: Optional[float] = typer.Option(None, "--slippage", "-s", help="Slippage fraction"),
    feed_a: Optional[str] = typer.Option(None, "--feed-a", help="First feed identifier"),
    feed_b: Optional[str] = typer.Option(None, "--feed-b", help="Second feed identifier"),
    ready_timeout: Optional[float] = typer.Option(
        None, "--ready-timeout", help="Seconds to wait for first quotes (default: forever)"
    ),
    simulate: bool = typer.Option(False, "--simulate", help="Use two simulated feeds"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """
    Monitor both feeds and print a plan per direction every interval.

    Stops on Ctrl-C or SIGTERM.
    """
    config = setup(debug)
    apply_overrides(config, pair, interval_ms, slippage, ready_timeout, feed_a, feed_b)

    try:
        feeds = build_feeds(config, default_registry(), simulate)
        console.print(Panel.fit(
            "[bold green]📈 arbwatch[/bold green]\n\n"
            f"Pair: [cyan]{config.strategy.trading_pair}[/cyan]\n"
            f"Feeds: [cyan]{feeds[0].name}[/cyan] ⇄ [cyan]{feeds[1].name}[/cyan]\n"
            f"Interval: [cyan]{config.strategy.interval_ms}ms[/cyan]\n"
            f"Slippage: [cyan]{config.strategy.slippage:.4%}[/cyan]",
            title="Configuration",
            border_style="green",
        ))
        asyncio.run(run_engine(config, *feeds))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
    except ArbwatchError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if debug:
            raise
        raise typer.Exit(1)


@app.command()
def check(
    pair: Optional[str] = typer.Option(None, "--pair", "-p", help="Trading pair, e.g. BTC-USDT"),
    feed_a: Optional[str] = typer.Option(None, "--feed-a", help="First feed identifier"),
    feed_b: Optional[str] = typer.Option(None, "--feed-b", help="Second feed identifier"),
    ready_timeout: float = typer.Option(30.0, "--ready-timeout", help="Seconds to wait for first quotes"),
    simulate: bool = typer.Option(False, "--simulate", help="Use two simulated feeds"),
):
    """Evaluate a single tick and show both directions."""
    config = setup()
    apply_overrides(config, pair, None, None, ready_timeout, feed_a, feed_b)

    console.print("[dim]Waiting for quotes...[/dim]")
    try:
        feeds = build_feeds(config, default_registry(), simulate)
        plans = asyncio.run(run_engine(config, *feeds, first_tick_only=True))
    except ArbwatchError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not plans:
        console.print("[yellow]Stopped before the first evaluation[/yellow]")
        return
    console.print(plans_table(plans))


@app.command()
def config():
    """Show current configuration."""
    cfg = setup()

    def masked(value: str) -> str:
        return "set" if value else "not set"

    console.print(Panel.fit(
        f"[bold]Strategy[/bold]\n"
        f"  Trading Pair: {cfg.strategy.trading_pair}\n"
        f"  Interval: {cfg.strategy.interval_ms}ms\n"
        f"  Slippage: {cfg.strategy.slippage:.4%}\n"
        f"  Ready Timeout: "
        f"{'none' if cfg.strategy.ready_timeout_s is None else f'{cfg.strategy.ready_timeout_s}s'}\n\n"
        f"[bold]Feed A[/bold]\n"
        f"  Name: {cfg.feed_a.name}\n"
        f"  Fees: {cfg.feed_a.fees:.4%}\n"
        f"  Testnet: {'Yes' if cfg.feed_a.testing else 'No'}\n"
        f"  API Key: {masked(cfg.feed_a.api_key)}\n\n"
        f"[bold]Feed B[/bold]\n"
        f"  Name: {cfg.feed_b.name}\n"
        f"  Fees: {cfg.feed_b.fees:.4%}\n"
        f"  Testnet: {'Yes' if cfg.feed_b.testing else 'No'}\n"
        f"  API Key: {masked(cfg.feed_b.api_key)}\n\n"
        f"[bold]Monitoring[/bold]\n"
        f"  Log Level: {cfg.monitoring.log_level}\n"
        f"  Notifications: {'Yes' if cfg.monitoring.enable_notifications else 'No'}\n"
        f"  Debug Mode: {'Yes' if cfg.development.debug_mode else 'No'}",
        title="⚙️ Configuration",
        border_style="blue",
    ))


@app.command()
def feeds():
    """List registered price feeds."""
    registry = default_registry()

    table = Table(title="📡 Price Feeds", box=box.ROUNDED)
    table.add_column("Identifier", style="cyan")
    table.add_column("Implementation")
    for name in registry.names():
        feed = registry.create(name)
        table.add_row(name, type(feed).__name__)

    console.print(table)


@app.command()
def version():
    """Show version information."""
    from arbwatch import __version__

    console.print(Panel.fit(
        f"[bold]arbwatch[/bold]\n"
        f"Version: {__version__}\n"
        f"Python: {sys.version.split()[0]}",
        border_style="blue",
    ))


if __name__ == "__main__":
    app()
