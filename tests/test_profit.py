"""
Tests for the fee and slippage adjusted profit calculation.
"""

from decimal import Decimal

import pytest

from arbwatch.engine.profit import calc_adjusted_profit, calc_total_fee


D = Decimal


class TestAdjustedProfit:
    """Tests for calc_adjusted_profit."""

    def test_worked_example(self):
        """Buy A at 100 (fee 0.1%), sell B at 105 (fee 0.2%), slippage 0.05%."""
        profit = calc_adjusted_profit(
            sell_price=D("105"),
            buy_price=D("100"),
            seller_fee_rate=D("0.002"),
            buyer_fee_rate=D("0.001"),
            slippage=D("0.0005"),
        )

        # (104.9475 - 100.05) - (0.21 + 0.1)
        assert profit == D("4.5875")
        assert profit > 0

    def test_no_costs_is_plain_spread(self):
        assert calc_adjusted_profit(D("101"), D("100"), 0, 0, 0) == D("1")

    def test_losing_trade_is_negative(self):
        profit = calc_adjusted_profit(D("100"), D("100"), D("0.001"), D("0.001"), D("0"))
        assert profit == D("-0.2")

    def test_result_is_decimal(self):
        assert isinstance(calc_adjusted_profit(105, 100, 0.002, 0.001, 0.0005), Decimal)

    def test_float_inputs_convert_exactly(self):
        """0.1 + 0.2 style rounding must not leak into the result."""
        from_floats = calc_adjusted_profit(0.3, 0.1, 0.0, 0.0, 0.0)
        assert from_floats == D("0.2")

    def test_break_even_is_not_positive(self):
        # sell_adj - buy_adj == fees exactly
        profit = calc_adjusted_profit(D("100.2"), D("100"), D("0"), D("0.002"), D("0"))
        assert profit == 0


class TestMonotonicity:
    """Profit decreases as costs increase."""

    SELL = D("105")
    BUY = D("100")

    @pytest.mark.parametrize("low,high", [
        (D("0"), D("0.0001")),
        (D("0.0005"), D("0.001")),
        (D("0.01"), D("0.05")),
    ])
    def test_decreasing_in_slippage(self, low, high):
        p_low = calc_adjusted_profit(self.SELL, self.BUY, D("0.001"), D("0.001"), low)
        p_high = calc_adjusted_profit(self.SELL, self.BUY, D("0.001"), D("0.001"), high)
        assert p_high < p_low

    def test_decreasing_in_seller_fee(self):
        profits = [
            calc_adjusted_profit(self.SELL, self.BUY, fee, D("0.001"), D("0.0005"))
            for fee in (D("0"), D("0.001"), D("0.002"), D("0.01"))
        ]
        assert profits == sorted(profits, reverse=True)
        assert len(set(profits)) == len(profits)

    def test_decreasing_in_buyer_fee(self):
        profits = [
            calc_adjusted_profit(self.SELL, self.BUY, D("0.001"), fee, D("0.0005"))
            for fee in (D("0"), D("0.001"), D("0.002"), D("0.01"))
        ]
        assert profits == sorted(profits, reverse=True)
        assert len(set(profits)) == len(profits)


class TestTotalFee:
    """Tests for calc_total_fee."""

    def test_total_fee(self):
        assert calc_total_fee(D("105"), D("100"), D("0.002"), D("0.001")) == D("0.31")

    def test_zero_fees(self):
        assert calc_total_fee(D("105"), D("100"), 0, 0) == 0
