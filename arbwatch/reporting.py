"""
Text rendering of arbitrage plans.

Each plan becomes one fixed-width row:
timestamp | pair | buy exchange | buy price | sell exchange | sell price |
profit | slippage | total fee | notify?
"""

from typing import Iterable, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from arbwatch.models import ArbitragePlan


COLUMNS = (
    ("Timestamp", 25),
    ("Trading Pair", 15),
    ("Buy Exchange", 15),
    ("Buy Price", 15),
    ("Sell Exchange", 15),
    ("Sell Price", 15),
    ("Profit", 15),
    ("Slippage", 10),
    ("Total fee", 10),
    ("Notify?", 7),
)


def header() -> str:
    return " | ".join(f"{name:<{width}}" for name, width in COLUMNS) + " |"


def divider() -> str:
    return "-" * len(header())


def format_plan(plan: ArbitragePlan) -> str:
    """Render a plan as one row aligned with header()."""
    values = (
        plan.timestamp.strftime("%Y-%m-%dT%H:%M:%S%z"),
        plan.pair,
        plan.buy_exchange,
        f"{plan.buy_price:.4f}",
        plan.sell_exchange,
        f"{plan.sell_price:.4f}",
        f"{plan.profit:.4f}",
        f"{plan.slippage:.4f}",
        f"{plan.total_fee:.4f}",
        "yes" if plan.profitable else "no",
    )
    return " | ".join(
        f"{value:<{width}}" for value, (_, width) in zip(values, COLUMNS)
    ) + " |"


def plans_table(plans: Iterable[ArbitragePlan], title: str = "📊 Arbitrage Plans") -> Table:
    """Rich table view of a batch of plans."""
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Time", style="dim")
    table.add_column("Pair", style="cyan")
    table.add_column("Buy @")
    table.add_column("Buy Price", justify="right")
    table.add_column("Sell @")
    table.add_column("Sell Price", justify="right")
    table.add_column("Profit", justify="right")
    table.add_column("Slippage", justify="right")
    table.add_column("Total Fee", justify="right")

    for plan in plans:
        style = "green" if plan.profitable else "red"
        table.add_row(
            plan.timestamp.strftime("%H:%M:%S"),
            plan.pair,
            plan.buy_exchange,
            f"{plan.buy_price:.4f}",
            plan.sell_exchange,
            f"{plan.sell_price:.4f}",
            f"[{style}]{plan.profit:+.4f}[/{style}]",
            f"{plan.slippage:.4%}",
            f"{plan.total_fee:.4f}",
        )
    return table


class PlanReporter:
    """Engine sink that prints every plan as a row."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self._header_printed = False

    def print_header(self) -> None:
        self.console.print(header(), markup=False, highlight=False)
        self.console.print(divider(), markup=False, highlight=False)
        self._header_printed = True

    def __call__(self, plan: ArbitragePlan) -> None:
        if not self._header_printed:
            self.print_header()
        style = "green" if plan.profitable else None
        self.console.print(format_plan(plan), style=style, markup=False, highlight=False)
