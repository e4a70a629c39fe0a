"""Print Kraken BTC/USD and BTC/EUR trades with optional spoken price alerts.

Usage:
    python scripts/trades_demo.py --alert EUR:5200:5225 --audible EUR

Runs until interrupted. Speech uses the macOS ``say`` command and is
skipped quietly elsewhere.
"""

import argparse
import asyncio
import shutil
import subprocess

from krakenclient.client.rest import RestClient
from krakenclient.core.price_alerts import (
    DEFAULT_ADJUST_COEFF,
    PriceAlert,
    PriceAlertTracker,
)
from krakenclient.core.trade_feed import TradeFeed
from krakenclient.models.response import ExchangeError
from krakenclient.models.trade import Trade
from krakenclient.utils.logger import logger
from krakenclient.utils.timing import unixtime_to_hhmmss

# Seconds between calls, keeps the public call counter under the rate limit
CALL_LIMIT_TIME = 4

PAIRS = {"USD": "XXBTZUSD", "EUR": "XXBTZEUR"}

CURRENCY_SYMBOL = {"USD": "$", "EUR": "€", "XBT": "฿"}
CURRENCY_WORD = {"USD": "dollars", "EUR": "euros", "XBT": "bitcoins"}
ANSI_COLOR_CODES = {"buy": 32, "sell": 31}  # green, red
ERROR_CODE = {"E": "Error", "W": "Warning"}

# EUR trades print in a second column
COLUMN_INDENT = {"USD": "", "EUR": " " * 48}


def colorize(text: str, side: str) -> str:
    return f"\033[{ANSI_COLOR_CODES[side]}m{text}\033[0m"


def spoken_volume(trade: Trade) -> str:
    volume = round(trade.volume_float, 1)
    return "less than one" if volume < 1 else str(volume)


def price_to_syllables(price: float) -> str:
    """12345.6 -> "1 2 3 4 5 point 6" so speech reads digits."""
    return " ".join(str(round(price, 1))).replace(" . 0", "").replace(".", "point")


def format_trade(trade: Trade, currency: str) -> str:
    # Kraken pads volumes to 8 decimals; 4 is plenty on screen
    volume = trade.volume[:-4] if "." in trade.volume else trade.volume
    shown_volume = colorize(volume, trade.side) if trade.volume_float >= 1 else volume
    price = trade.price[:-2] if "." in trade.price else trade.price
    return (
        f"{COLUMN_INDENT[currency]}{unixtime_to_hhmmss(trade.time)}  "
        f"{colorize(trade.side.ljust(4), trade.side)}  "
        f"{CURRENCY_SYMBOL[currency]} {price} "
        f"{' ' * max(0, 9 - len(volume))}{shown_volume} {CURRENCY_SYMBOL['XBT']}  "
        f"{trade.order_type}"
    )


def format_alert(alert: PriceAlert, trade: Trade) -> str:
    return (
        f"In {CURRENCY_WORD[alert.currency]}, the price of {alert.price} is "
        f"{alert.direction} your threshold of {round(alert.old_threshold, 2)} with the "
        f"{trade.side} of {spoken_volume(trade)} bitcoin."
    )


def format_error(error: ExchangeError, currency: str) -> str:
    """'EAPI:Rate limit exceeded' -> "Error: 'API rate limit exceeded' in EUR trades query!" """
    description = f"'{error.category[1:]} {error.type.lower()}'" if error.category else f"'{error.type}'"
    return f"{ERROR_CODE[error.severity]}: {description} in {currency} trades query!"


def say(text: str) -> None:
    if shutil.which("say") is None:
        logger.debug("'say' not available, skipping speech")
        return
    subprocess.run(["say", text], check=False)


class TradesDemo:
    """Main trade info loop."""

    def __init__(
        self,
        client: RestClient,
        alerts: PriceAlertTracker,
        audible: set[str],
        interval: float = CALL_LIMIT_TIME,
    ):
        self.feed = TradeFeed(client, list(PAIRS.values()))
        self.alerts = alerts
        self.audible = audible
        self.interval = interval

    async def run(self) -> None:
        while True:
            for currency, pair in PAIRS.items():
                await self.poll(currency, pair)
                await asyncio.sleep(self.interval)

    async def poll(self, currency: str, pair: str) -> None:
        envelope, trades = await self.feed.poll(pair)

        if envelope.transport_error is not None:
            print(f"\r\nCouldn't reach Kraken ({envelope.transport_error}).\r\n")
            return

        for error in envelope.errors:
            print(format_error(error, currency))

        for trade in trades:
            self.output_trade(trade, currency)

    def output_trade(self, trade: Trade, currency: str) -> None:
        print(format_trade(trade, currency))

        if currency in self.audible:
            say(
                f"{CURRENCY_WORD[currency]}: {trade.side}, "
                f"{spoken_volume(trade)} bitcoin, at {price_to_syllables(trade.price_float)}"
            )

        alert = self.alerts.check(currency, trade.price_float)
        if alert is None:
            return

        message = format_alert(alert, trade)
        print(
            f"\r\n{message}\r\nThe price threshold has been updated from "
            f"{round(alert.old_threshold, 2)} to {round(alert.new_threshold, 2)}.\r\n"
        )
        say(message)


def parse_alert(value: str) -> tuple[str, float | None, float | None]:
    """Parse CURRENCY:BELOW:ABOVE; an empty bound disables that side."""
    try:
        currency, below, above = value.split(":")
        return (
            currency.upper(),
            float(below) if below else None,
            float(above) if above else None,
        )
    except ValueError as e:
        raise argparse.ArgumentTypeError(
            f"expected CURRENCY:BELOW:ABOVE, got {value!r}"
        ) from e


async def main(args: argparse.Namespace) -> None:
    alerts = PriceAlertTracker(adjust_coeff=args.adjust)
    for currency, below, above in args.alert:
        alerts.set_thresholds(currency, less_than=below, more_than=above)

    async with RestClient() as client:
        demo = TradesDemo(
            client,
            alerts,
            audible={c.upper() for c in args.audible},
            interval=args.interval,
        )
        await demo.run()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Show live Kraken BTC trades")
    parser.add_argument(
        "--interval",
        type=float,
        default=CALL_LIMIT_TIME,
        help="Seconds between API calls (default: %(default)s)",
    )
    parser.add_argument(
        "--audible",
        nargs="*",
        default=[],
        metavar="CURRENCY",
        help="Speak trades for these currencies (macOS 'say')",
    )
    parser.add_argument(
        "--alert",
        type=parse_alert,
        action="append",
        default=[],
        metavar="CURRENCY:BELOW:ABOVE",
        help="Price alert thresholds, e.g. EUR:5200:5225",
    )
    parser.add_argument(
        "--adjust",
        type=float,
        default=DEFAULT_ADJUST_COEFF,
        help="Coefficient applied to a threshold after it fires (default: %(default)s)",
    )

    try:
        asyncio.run(main(parser.parse_args()))
    except KeyboardInterrupt:
        logger.info("Stopped")
