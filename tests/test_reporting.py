"""
Tests for plan rendering.
"""

import re
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO

from rich.console import Console

from arbwatch.models import ArbitragePlan
from arbwatch.reporting import COLUMNS, PlanReporter, divider, format_plan, header, plans_table


D = Decimal


def pipes(text):
    return [m.start() for m in re.finditer(r"\|", text)]


def make_plan(profit="4.5875") -> ArbitragePlan:
    return ArbitragePlan(
        pair="BTC-USDT",
        buy_exchange="A",
        buy_price=D("100"),
        sell_exchange="B",
        sell_price=D("105"),
        profit=D(profit),
        slippage=D("0.0005"),
        total_fee=D("0.31"),
        timestamp=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )


class TestTextRows:
    """Tests for the fixed-width row format."""

    def test_header_lists_every_column(self):
        names = [cell.strip() for cell in header().split("|") if cell.strip()]

        assert names == [name for name, _ in COLUMNS]

    def test_divider_matches_header(self):
        assert len(divider()) == len(header())
        assert set(divider()) == {"-"}

    def test_row_aligned_with_header(self):
        row = format_plan(make_plan())

        assert len(row) == len(header())
        assert pipes(row) == pipes(header())

    def test_row_values(self):
        cells = [cell.strip() for cell in format_plan(make_plan()).split("|")][:-1]

        assert cells == [
            "2024-01-02T03:04:05+0000",
            "BTC-USDT",
            "A",
            "100.0000",
            "B",
            "105.0000",
            "4.5875",
            "0.0005",
            "0.3100",
            "yes",
        ]

    def test_unprofitable_row(self):
        row = format_plan(make_plan(profit="-0.2"))

        assert "-0.2000" in row
        assert row.rstrip(" |").endswith("no")


class TestPlanReporter:
    """Tests for the console sink."""

    def test_header_printed_once(self):
        output = StringIO()
        reporter = PlanReporter(Console(file=output, width=250))

        reporter(make_plan())
        reporter(make_plan(profit="-1"))

        lines = output.getvalue().splitlines()
        assert lines.count(header()) == 1
        assert len(lines) == 4

    def test_plans_table(self):
        table = plans_table([make_plan(), make_plan(profit="-1")])

        assert table.row_count == 2
        assert len(table.columns) == 9