"""
Tests for ticker symbol parsing.
"""

import pytest

from arbwatch.errors import FeedOpenError, InvalidSymbolError
from arbwatch.models import Symbol
from arbwatch.symbols import format_symbol, parse_symbol


class TestParseSymbol:
    """Tests for parse_symbol."""

    @pytest.mark.parametrize("text", ["BTC-USDT", "BTC_USDT", "BTCUSDT", "BTC:USDT"])
    def test_accepted_forms(self, text):
        assert parse_symbol(text) == Symbol("BTC", "USDT")

    def test_lowercase_is_normalized(self):
        assert parse_symbol("eth-usdc") == Symbol("ETH", "USDC")

    def test_slash_separator(self):
        assert parse_symbol("ETH/BTC") == Symbol("ETH", "BTC")

    def test_suffix_match_prefers_longest_quote(self):
        assert parse_symbol("ETHBUSD") == Symbol("ETH", "BUSD")

    def test_crypto_quote_without_separator(self):
        assert parse_symbol("ETHBTC") == Symbol("ETH", "BTC")

    @pytest.mark.parametrize("text", ["BTC", "USDT", "", "BTC-", "-USDT", "BTC--USDT", "BTC1USDT", "BTC USDT"])
    def test_rejected_forms(self, text):
        with pytest.raises(InvalidSymbolError):
            parse_symbol(text)

    def test_separatorless_unknown_quote_is_rejected(self):
        with pytest.raises(InvalidSymbolError):
            parse_symbol("FOOBAR")

    def test_invalid_symbol_is_an_open_error(self):
        with pytest.raises(FeedOpenError) as exc_info:
            parse_symbol("BTC")

        assert exc_info.value.symbol == "BTC"


class TestFormatSymbol:
    """Tests for exchange specific formatting."""

    def test_binance_format(self):
        assert format_symbol("BTC-USDT", lower=True) == "btcusdt"

    def test_separator(self):
        assert format_symbol("btc_usdt", separator="-") == "BTC-USDT"

    def test_symbol_str(self):
        assert str(parse_symbol("BTC:USDT")) == "BTC/USDT"

    def test_accepts_parsed_symbol(self):
        assert format_symbol(Symbol("ETH", "USDC"), lower=True) == "ethusdc"
