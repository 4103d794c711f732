"""
Ticker symbol parsing.

Accepted forms are {base}{quote} and {base}{sep}{quote} with sep one of
":", "-", "_" or "/". Without a separator the quote asset is recognised by suffix.
"""

import re
from typing import Tuple, Union

from arbwatch.errors import InvalidSymbolError
from arbwatch.models import Symbol


TICKER_PATTERN = re.compile(r"^(?P<base>[A-Za-z]+)(?P<sep>[:/\-_]?)(?P<quote>[A-Za-z]+)$")

# Longest first so BUSD wins over USD.
KNOWN_QUOTES: Tuple[str, ...] = (
    "FDUSD", "USDT", "USDC", "BUSD", "TUSD", "DAI", "USD", "EUR", "BTC", "ETH", "BNB",
)


def parse_symbol(symbol: str) -> Symbol:
    """
    Split a ticker into base and quote.

    Raises:
        InvalidSymbolError: if the text does not match the ticker pattern or
            a separator-less ticker does not end in a known quote asset.
    """
    match = TICKER_PATTERN.match(symbol.strip()) if symbol else None
    if not match:
        raise InvalidSymbolError(symbol)

    if match.group("sep"):
        return Symbol(match.group("base").upper(), match.group("quote").upper())

    text = symbol.strip().upper()
    for quote in KNOWN_QUOTES:
        if text.endswith(quote) and len(text) > len(quote):
            return Symbol(text[: -len(quote)], quote)

    raise InvalidSymbolError(symbol)


def format_symbol(symbol: Union[str, Symbol], separator: str = "", lower: bool = False) -> str:
    """Normalise a ticker to {base}{separator}{quote} for a specific exchange."""
    parsed = symbol if isinstance(symbol, Symbol) else parse_symbol(symbol)
    text = parsed.join(separator)
    return text.lower() if lower else text
