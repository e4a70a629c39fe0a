"""Incremental trade polling over the public Trades endpoint."""

from ..client.rest import RestClient
from ..models.response import ResponseEnvelope
from ..models.trade import Trade, parse_trades
from ..utils.logger import logger


class TradeFeed:
    """Tracks the ``since`` cursor per pair so each poll returns only new trades."""

    def __init__(self, client: RestClient, pairs: list[str]):
        """
        Initialize TradeFeed.

        Args:
            client: REST client instance
            pairs: Pairs to poll, e.g. ["XXBTZUSD", "XXBTZEUR"]
        """
        self.client = client
        self.pairs = list(pairs)
        self._cursors: dict[str, str | None] = {pair: None for pair in self.pairs}

    def cursor(self, pair: str) -> str | None:
        return self._cursors.get(pair)

    async def poll(self, pair: str) -> tuple[ResponseEnvelope, list[Trade]]:
        """
        Fetch trades for a pair since the last successful poll.

        The first successful poll only yields the most recent trade; after
        that every trade past the cursor is returned, oldest first. Failed
        polls leave the cursor where it was.

        Args:
            pair: Pair to poll

        Returns:
            Tuple of (envelope, new trades)
        """
        since = self._cursors.get(pair)
        envelope = await self.client.trades(pair, since)
        if not envelope.ok:
            return envelope, []

        try:
            trades, last = parse_trades(pair, envelope.result or {})
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Failed to parse trades for {pair}: {e}")
            return envelope, []

        if last is not None:
            self._cursors[pair] = last

        if since is None:
            trades = trades[-1:]

        return envelope, trades
