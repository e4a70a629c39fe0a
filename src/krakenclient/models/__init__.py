"""Data models."""

from .response import ExchangeError, ResponseEnvelope
from .trade import Trade, parse_trades

__all__ = [
    "ExchangeError",
    "ResponseEnvelope",
    "Trade",
    "parse_trades",
]
