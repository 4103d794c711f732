"""
Slippage and fee adjusted profit of a two-leg arbitrage.

All arithmetic is Decimal; float inputs are converted through str().
"""

from decimal import Decimal

from arbwatch.models import to_decimal


ONE = Decimal(1)


def calc_adjusted_profit(
    sell_price,
    buy_price,
    seller_fee_rate,
    buyer_fee_rate,
    slippage,
) -> Decimal:
    """
    Profit per unit of selling at sell_price and buying at buy_price.

        sell_adj = sell * (1 - slippage)
        buy_adj  = buy  * (1 + slippage)
        profit   = (sell_adj - buy_adj) - (sell * seller_fee + buy * buyer_fee)

    Args:
        sell_price: Price received on the selling exchange
        buy_price: Price paid on the buying exchange
        seller_fee_rate: Fee rate of the exchange the sell leg runs on
        buyer_fee_rate: Fee rate of the exchange the buy leg runs on
        slippage: Fractional price movement assumed against both legs

    Returns:
        Signed profit; positive means the trade is worth taking
    """
    sell = to_decimal(sell_price)
    buy = to_decimal(buy_price)
    slip = to_decimal(slippage)

    sell_adjusted = sell * (ONE - slip)
    buy_adjusted = buy * (ONE + slip)

    return (sell_adjusted - buy_adjusted) - calc_total_fee(
        sell, buy, seller_fee_rate, buyer_fee_rate
    )


def calc_total_fee(sell_price, buy_price, seller_fee_rate, buyer_fee_rate) -> Decimal:
    """Fees paid on both legs: sell * seller_fee + buy * buyer_fee."""
    sell_fee = to_decimal(sell_price) * to_decimal(seller_fee_rate)
    buy_fee = to_decimal(buy_price) * to_decimal(buyer_fee_rate)
    return sell_fee + buy_fee
