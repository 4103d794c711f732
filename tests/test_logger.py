"""
Tests for logging configuration.
"""

from decimal import Decimal

from arbwatch.config import reload_config
from arbwatch.logger import get_logger, plan_logger, setup_logging
from arbwatch.models import ArbitragePlan


def make_plan(profit: str) -> ArbitragePlan:
    return ArbitragePlan(
        pair="BTC-USDT",
        buy_exchange="A",
        buy_price=Decimal("100"),
        sell_exchange="B",
        sell_price=Decimal("105"),
        profit=Decimal(profit),
        slippage=Decimal("0.0005"),
        total_fee=Decimal("0.31"),
    )


class TestSetupLogging:
    """Module level loggers follow the configuration applied at startup."""

    def configure(self, monkeypatch, capsys, level="INFO", debug="false"):
        monkeypatch.setenv("LOG_LEVEL", level)
        monkeypatch.setenv("DEBUG_MODE", debug)
        reload_config()
        setup_logging()
        capsys.readouterr()

    def test_debug_events_filtered_at_info(self, monkeypatch, capsys):
        self.configure(monkeypatch, capsys)

        plan_logger.log_plan(make_plan("-0.2"))
        get_logger("engine").debug("hidden_event")

        out = capsys.readouterr().out
        assert "plan_evaluated" not in out
        assert "hidden_event" not in out

    def test_info_events_pass_at_info(self, monkeypatch, capsys):
        self.configure(monkeypatch, capsys)

        plan_logger.log_plan(make_plan("4.5875"))

        assert "plan_profitable" in capsys.readouterr().out

    def test_debug_level_shows_evaluated_plans(self, monkeypatch, capsys):
        self.configure(monkeypatch, capsys, level="DEBUG")

        plan_logger.log_plan(make_plan("-0.2"))

        assert "plan_evaluated" in capsys.readouterr().out

    def test_json_output_outside_debug_mode(self, monkeypatch, capsys):
        self.configure(monkeypatch, capsys)

        get_logger("reporting").info("json_event")

        assert '"json_event"' in capsys.readouterr().out
