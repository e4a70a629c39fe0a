"""Trade model."""

from dataclasses import dataclass
from typing import Any, Literal

SIDES = {"b": "buy", "s": "sell"}
ORDER_TYPES = {"m": "market", "l": "limit"}


@dataclass(frozen=True)
class Trade:
    """One public trade from the Trades endpoint.

    Prices and volumes stay as the exchange's decimal strings so nothing is
    lost before display.
    """

    pair: str
    price: str
    volume: str
    time: float  # Unix seconds with fractional part
    side: Literal["buy", "sell"]
    order_type: Literal["market", "limit"]
    misc: str = ""
    trade_id: int | None = None

    @classmethod
    def from_api(cls, pair: str, row: list[Any]) -> "Trade":
        """Create Trade from a positional API row.

        Row layout: [price, volume, time, side, order_type, misc(, trade_id)]
        """
        if len(row) < 6:
            raise ValueError(f"Trade row has {len(row)} fields, expected at least 6: {row!r}")

        price, volume, unixtime, side, order_type, misc = row[:6]
        trade_id = int(row[6]) if len(row) > 6 else None

        return cls(
            pair=pair,
            price=str(price),
            volume=str(volume),
            time=float(unixtime),
            side=SIDES[side],
            order_type=ORDER_TYPES[order_type],
            misc=str(misc),
            trade_id=trade_id,
        )

    @property
    def price_float(self) -> float:
        return float(self.price)

    @property
    def volume_float(self) -> float:
        return float(self.volume)

    def __repr__(self) -> str:
        return f"Trade({self.pair}, {self.side}, price={self.price}, volume={self.volume}, ts={self.time})"


def parse_trades(pair: str, result: dict[str, Any]) -> tuple[list[Trade], str | None]:
    """
    Decode a Trades result into records.

    Kraken keys the rows by its canonical pair name, which may differ from
    what was asked for (XBTUSD -> XXBTZUSD), so the first non-"last" key is
    used when ``pair`` is absent.

    Args:
        pair: Pair requested
        result: The ``result`` object of a Trades response

    Returns:
        Tuple of (trades oldest first, last cursor)
    """
    last = result.get("last")
    key = pair if pair in result else next((k for k in result if k != "last"), None)
    rows = result.get(key, []) if key is not None else []
    trades = [Trade.from_api(key, row) for row in rows]
    return trades, (str(last) if last is not None else None)
