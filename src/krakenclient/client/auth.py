"""Authentication and signing utilities for the Kraken private API."""

import base64
import binascii
import hashlib
import hmac
import threading
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import urlencode

from ..utils.config import Credentials
from ..utils.exceptions import ConfigurationError
from ..utils.timing import get_timestamp_us


class NonceGenerator:
    """
    Strictly increasing nonces for private requests.

    Each nonce is ``max(last + 1, now_us)``: microsecond Unix time when the
    clock has moved on, otherwise the previous value plus one. Calls within
    the same microsecond, or after the wall clock steps backwards, still
    ratchet upwards. Safe to share between threads and coroutines.
    """

    def __init__(self, clock: Callable[[], int] = get_timestamp_us):
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            self._last = max(self._last + 1, self._clock())
            return self._last

    __call__ = next

    @property
    def last(self) -> int:
        """The most recently issued nonce (0 before the first call)."""
        return self._last


def _encode_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def normalize_params(params: Mapping[str, Any]) -> dict[str, str]:
    """Drop None values and stringify the rest, keeping insertion order."""
    return {key: _encode_value(value) for key, value in params.items() if value is not None}


def encode_params(params: Mapping[str, Any]) -> str:
    """
    Serialize params as a form body, keeping insertion order.

    ``None`` values are dropped. The returned string is both the POST body
    and the payload that gets signed, so it must not be re-encoded later.

    Args:
        params: Ordered request parameters

    Returns:
        String like "nonce=1616492376594&pair=XBTUSD"
    """
    return urlencode(list(normalize_params(params).items()))


def sign_request(
    private_path: str,
    endpoint: str,
    nonce: int | str,
    encoded_params: str,
    secret: str,
) -> str:
    """
    Sign a private API request using HMAC-SHA512.

    API-Sign = base64(HMAC-SHA512(base64decode(secret),
                                  private_path + endpoint + SHA256(nonce + postdata)))

    Args:
        private_path: Private path prefix (e.g., "/0/private/")
        endpoint: Endpoint name (e.g., "AddOrder")
        nonce: Nonce, also present inside encoded_params
        encoded_params: Exact POST body (see encode_params)
        secret: Base64 API secret

    Returns:
        Base64 signature for the API-Sign header

    Raises:
        ConfigurationError: secret is empty or not valid base64
    """
    if not secret:
        raise ConfigurationError("API secret is not set")

    try:
        key = base64.b64decode(secret, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ConfigurationError(f"API secret is not valid base64: {e}") from e

    # SHA256 digest is appended raw, not hex-encoded
    data = (str(nonce) + encoded_params).encode("utf-8")
    message = (private_path + endpoint).encode("utf-8") + hashlib.sha256(data).digest()

    signature = hmac.new(key, message, hashlib.sha512).digest()
    return base64.b64encode(signature).decode("ascii")


def get_auth_headers(credentials: Credentials, signature: str) -> dict[str, str]:
    """
    Get authentication headers for a private request.

    Args:
        credentials: API key pair
        signature: Base64 signature from sign_request

    Returns:
        Dictionary of headers
    """
    if not credentials.api_key:
        raise ConfigurationError("API key is not set")

    return {
        "API-Key": credentials.api_key,
        "API-Sign": signature,
        "User-Agent": "krakenclient/0.1.0",
        "Content-Type": "application/x-www-form-urlencoded",
    }
