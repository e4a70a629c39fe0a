"""REST API client for Kraken."""

import asyncio
import json
from collections.abc import Mapping
from typing import Any

import aiohttp

from ..client.auth import (
    NonceGenerator,
    encode_params,
    get_auth_headers,
    normalize_params,
    sign_request,
)
from ..models.response import ResponseEnvelope
from ..utils.config import Config, Credentials, EndpointConfig
from ..utils.exceptions import ConfigurationError, MissingArgumentsError, TransportError
from ..utils.logger import logger

HTTP_SUCCESS = 200

# A lost response does not mean the order or withdrawal was not placed
NON_RETRYABLE_ENDPOINTS = frozenset({"AddOrder", "EditOrder", "CancelOrder", "Withdraw"})


def _join(values: str | list[str] | tuple[str, ...] | None) -> str | None:
    if values is None or isinstance(values, str):
        return values
    return ",".join(values)


class RestClient:
    """Async REST client for the Kraken spot API."""

    def __init__(
        self,
        credentials: Credentials | None = None,
        endpoint_config: EndpointConfig | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_delay: float = 0.5,
        session: aiohttp.ClientSession | None = None,
        nonce_generator: NonceGenerator | None = None,
    ):
        self.credentials = credentials if credentials is not None else Config.get_credentials()
        self.endpoint_config = endpoint_config or Config.get_endpoint_config()
        self.timeout = timeout if timeout is not None else Config.REST_TIMEOUT
        self.max_retries = max_retries if max_retries is not None else Config.REST_MAX_RETRIES
        self.retry_delay = retry_delay
        self.nonce_generator = nonce_generator or NonceGenerator()

        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        """Context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        await self.close()

    async def connect(self) -> None:
        """Create aiohttp session."""
        if self.session is None or self.session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self.session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
            logger.info(f"REST client connected to {self.endpoint_config.base_uri}")

    async def close(self) -> None:
        """Close aiohttp session (only if this client created it)."""
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()
            logger.info("REST client closed")

    # Dispatch

    async def public(
        self, endpoint: str, params: Mapping[str, Any] | None = None
    ) -> ResponseEnvelope:
        """
        Query a public endpoint with HTTP GET.

        Args:
            endpoint: Endpoint name (e.g., "Ticker")
            params: Query parameters; None sends no query string at all

        Returns:
            ResponseEnvelope (transport failures are carried, not raised)
        """
        url = f"{self.endpoint_config.public_url}{endpoint}"
        query = normalize_params(params) if params is not None else None

        envelope = ResponseEnvelope()
        for attempt in range(self.max_retries + 1):
            if attempt:
                await self._backoff(attempt, endpoint, envelope)
            envelope = await self._request("GET", url, params=query)
            if envelope.transport_error is None:
                break
        return envelope

    async def private(
        self, endpoint: str, params: Mapping[str, Any] | None = None
    ) -> ResponseEnvelope:
        """
        Query a private endpoint with a signed HTTP POST.

        Args:
            endpoint: Endpoint name (e.g., "AddOrder")
            params: Ordered body parameters, without nonce

        Returns:
            ResponseEnvelope (transport failures are carried, not raised).
            Endpoints in NON_RETRYABLE_ENDPOINTS are sent once regardless of
            max_retries.

        Raises:
            MissingArgumentsError: required arguments for endpoint are absent
            ConfigurationError: API key or secret is not set
        """
        params = dict(params or {})
        self._check_required_arguments(endpoint, params)
        self._check_credentials()

        url = f"{self.endpoint_config.private_url}{endpoint}"
        retries = 0 if endpoint in NON_RETRYABLE_ENDPOINTS else self.max_retries

        envelope = ResponseEnvelope()
        for attempt in range(retries + 1):
            if attempt:
                await self._backoff(attempt, endpoint, envelope)
            # Fresh nonce per attempt: a nonce already sent must never be reused
            body, headers = self._build_private_request(endpoint, params)
            envelope = await self._request("POST", url, data=body, headers=headers)
            if envelope.transport_error is None:
                break
        return envelope

    def _check_required_arguments(self, endpoint: str, params: Mapping[str, Any]) -> None:
        missing = [
            arg
            for arg in self.endpoint_config.required_for(endpoint)
            if params.get(arg) is None
        ]
        if missing:
            raise MissingArgumentsError(endpoint, missing)

    def _check_credentials(self) -> None:
        if not self.credentials.api_key:
            raise ConfigurationError("API key is not set")
        if not self.credentials.api_secret:
            raise ConfigurationError("API secret is not set")

    def _build_private_request(
        self, endpoint: str, params: Mapping[str, Any]
    ) -> tuple[str, dict[str, str]]:
        """Inject a fresh nonce, encode the body and sign it."""
        nonce = self.nonce_generator.next()
        payload = {"nonce": nonce}
        payload.update((k, v) for k, v in params.items() if k != "nonce")

        body = encode_params(payload)
        signature = sign_request(
            private_path=self.endpoint_config.private_path,
            endpoint=endpoint,
            nonce=nonce,
            encoded_params=body,
            secret=self.credentials.api_secret,
        )
        return body, get_auth_headers(self.credentials, signature)

    async def _backoff(self, attempt: int, endpoint: str, envelope: ResponseEnvelope) -> None:
        logger.warning(
            f"Retrying {endpoint} ({attempt}/{self.max_retries}) after: {envelope.transport_error}"
        )
        if self.retry_delay:
            await asyncio.sleep(self.retry_delay * attempt)

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        data: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> ResponseEnvelope:
        """
        Make one HTTP request and decode the envelope.

        Any transport-level failure is logged and returned as an envelope
        holding a TransportError.
        """
        if self.session is None or self.session.closed:
            await self.connect()

        redacted = {k: ("<redacted>" if k == "API-Sign" else v) for k, v in (headers or {}).items()}
        logger.debug(
            f"REST request ->\nmethod: {method}\nurl: {url}\nparams: {params}\ndata: {data}\nheaders: {redacted}\n{'=' * 60}"
        )

        try:
            kwargs: dict[str, Any] = {"headers": headers or {}}
            if params is not None:
                kwargs["params"] = params
            if data is not None:
                kwargs["data"] = data

            async with self.session.request(method, url, **kwargs) as response:
                raw = await response.read()

                if response.status != HTTP_SUCCESS:
                    text = raw.decode("utf-8", errors="replace")
                    raise TransportError(
                        f"API error {response.status}: {text[:100]}", status=response.status
                    )

                try:
                    body = json.loads(raw.decode("utf-8"))
                except UnicodeDecodeError as e:
                    raise TransportError(
                        f"Undecodable response body: {e}", status=response.status
                    ) from e
                except json.JSONDecodeError as e:
                    raise TransportError(
                        f"Malformed JSON response: {e}", status=response.status
                    ) from e

                envelope = ResponseEnvelope.from_json(body)

        except TransportError as e:
            logger.error(f"REST request failed: {method} {url} - {e}")
            return ResponseEnvelope.from_transport_error(e)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"REST request failed: {method} {url} - {e!r}")
            error = TransportError(f"{type(e).__name__}: {e}")
            error.__cause__ = e
            return ResponseEnvelope.from_transport_error(error)

        if envelope.error:
            logger.warning(f"Kraken returned errors for {url}: {envelope.error}")
        return envelope

    # Public endpoints

    async def server_time(self) -> ResponseEnvelope:
        """
        Get server time.

        Returns:
            Envelope whose result has "unixtime" and "rfc1123"
        """
        return await self.public("Time")

    async def assets(self, assets: str | list[str] | None = None) -> ResponseEnvelope:
        """
        Get asset info.

        Args:
            assets: Comma-delimited asset list (default all assets)

        Returns:
            Envelope whose result maps asset ids (ZEUR, XXBT, ...) to
            altname, aclass, decimals and display_decimals
        """
        if assets is None:
            return await self.public("Assets")
        return await self.public("Assets", {"asset": _join(assets)})

    async def asset_pairs(
        self, pairs: str | list[str] | None = None, info: str | None = None
    ) -> ResponseEnvelope:
        """
        Get tradable asset pairs.

        Args:
            pairs: Comma-delimited pair list (default all pairs)
            info: One of "info", "leverage", "fees", "margin"
        """
        if pairs is None and info is None:
            return await self.public("AssetPairs")
        return await self.public("AssetPairs", {"pair": _join(pairs), "info": info})

    async def ticker(self, pairs: str | list[str] | None = None) -> ResponseEnvelope:
        return await self.public("Ticker", {"pair": _join(pairs)})

    async def ohlc(
        self, pair: str | None = None, interval: int = 1, since: int | str | None = None
    ) -> ResponseEnvelope:
        """
        Get OHLC data.

        Args:
            pair: Asset pair
            interval: Minutes per candle: 1, 5, 15, 30, 60, 240, 1440, 10080, 21600
            since: Return committed candles after this id (the "last" of a
                previous response)

        Returns:
            Envelope whose result holds the candles under the pair name plus "last".
            Each candle is [time, open, high, low, close, vwap, volume, count];
            the final one is the current, uncommitted frame.
        """
        return await self.public("OHLC", {"pair": pair, "interval": interval, "since": since})

    async def order_book(self, pair: str | None = None, count: int | None = None) -> ResponseEnvelope:
        return await self.public("Depth", {"pair": pair, "count": count})

    async def trades(self, pair: str, since: int | str | None = None) -> ResponseEnvelope:
        """
        Get recent trades.

        Args:
            pair: Asset pair
            since: Cursor from a previous response's "last"

        Returns:
            Envelope; see models.trade.parse_trades to decode the rows
        """
        return await self.public("Trades", {"pair": pair, "since": since})

    async def spread(self, pair: str | None = None, since: int | str | None = None) -> ResponseEnvelope:
        return await self.public("Spread", {"pair": pair, "since": since})

    # Private endpoints

    async def balance(self) -> ResponseEnvelope:
        return await self.private("Balance")

    async def trade_balance(self, **opts: Any) -> ResponseEnvelope:
        return await self.private("TradeBalance", opts)

    async def trade_volume(self, **opts: Any) -> ResponseEnvelope:
        """
        Fetch trade volume and fee tiers.

        Args:
            pair: Comma-delimited pair list (optional)
            fee-info: Include fee info, pass as ``**{"fee-info": True}``

        Returns:
            Envelope whose result has currency, volume, fees, fees_maker
        """
        return await self.private("TradeVolume", opts)

    async def open_orders(self, **opts: Any) -> ResponseEnvelope:
        """
        Fetch open orders.

        Args:
            trades: Include trades (optional, default False)
            userref: Restrict to a user reference id (optional)
        """
        return await self.private("OpenOrders", opts)

    async def closed_orders(self, **opts: Any) -> ResponseEnvelope:
        """
        Fetch closed orders.

        Args:
            trades: Include trades (optional)
            userref: Restrict to a user reference id (optional)
            start: Exclusive start Unix time or order txid (optional)
            end: Inclusive end Unix time or order txid (optional)
            ofs: Result offset (optional)
            closetime: "open", "close" or "both" (default)
        """
        return await self.private("ClosedOrders", opts)

    async def add_order(self, **opts: Any) -> ResponseEnvelope:
        """
        Place a new order.

        Args:
            pair: Asset pair, e.g. "XBTEUR" (required)
            type: "buy" or "sell" (required)
            ordertype: "market", "limit", "stop-loss", "take-profit", ... (required)
            volume: Order size (required)
            price: Price, meaning depends on ordertype (optional)
            price2: Secondary price (optional)
            leverage: Leverage (optional)

        Example:
            await client.add_order(pair="XBTUSD", type="buy", ordertype="limit",
                                   volume="1.25", price="5000")

        Raises:
            MissingArgumentsError: listing every missing required argument
        """
        return await self.private("AddOrder", opts)

    async def edit_order(self, **opts: Any) -> ResponseEnvelope:
        """Edit an open order. Requires txid and pair."""
        return await self.private("EditOrder", opts)

    async def cancel_order(self, txid: str | None) -> ResponseEnvelope:
        return await self.private("CancelOrder", {"txid": txid})

    async def withdraw(self, **opts: Any) -> ResponseEnvelope:
        """
        Withdraw funds.

        Args:
            asset: Asset being withdrawn (required)
            key: Withdrawal key name set up on the account (required)
            amount: Amount to withdraw, fees included (required)
            aclass: Asset class (optional)
        """
        return await self.private("Withdraw", opts)
