"""Pytest configuration and shared fixtures."""

import json
import os
from typing import Any

import pytest

from krakenclient.client.auth import NonceGenerator
from krakenclient.client.rest import RestClient
from krakenclient.utils.config import Credentials, EndpointConfig

# Example secret from Kraken's REST authentication docs
TEST_API_KEY = "test-api-key"
TEST_API_SECRET = (
    "kQH5HW/8p1uGOVjbgWA7FunAmGO8lsSUXNsu3eow76sz84Q18fWxnyRzBHCd3pd5nE9qa99HAZtuZuj6F1huXg=="
)


class FakeResponse:
    """Stands in for aiohttp.ClientResponse inside ``async with``."""

    def __init__(
        self,
        status: int = 200,
        body: Any = None,
        text: str | None = None,
        raw: bytes | None = None,
    ):
        self.status = status
        if raw is None:
            raw = (text if text is not None else json.dumps(body)).encode("utf-8")
        self._raw = raw

    async def read(self) -> bytes:
        return self._raw

    async def text(self) -> str:
        return self._raw.decode("utf-8")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeSession:
    """Records every request and replays queued responses or exceptions."""

    def __init__(self):
        self.calls: list[dict[str, Any]] = []
        self.closed = False
        self._queue: list[FakeResponse | Exception] = []

    def queue(
        self,
        body: Any = None,
        status: int = 200,
        text: str | None = None,
        raw: bytes | None = None,
    ) -> None:
        if body is None and text is None and raw is None:
            body = {"error": [], "result": {}}
        self._queue.append(FakeResponse(status=status, body=body, text=text, raw=raw))

    def queue_exception(self, exc: Exception) -> None:
        self._queue.append(exc)

    def request(self, method: str, url: str, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        item = self._queue.pop(0) if self._queue else FakeResponse(body={"error": [], "result": {}})
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True


class FixedClock:
    """Manually driven microsecond clock."""

    def __init__(self, now: int = 1_616_492_376_594_000):
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(api_key=TEST_API_KEY, api_secret=TEST_API_SECRET)


@pytest.fixture
def endpoint_config() -> EndpointConfig:
    return EndpointConfig()


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def rest_client(
    credentials: Credentials, endpoint_config: EndpointConfig, fake_session: FakeSession, clock
) -> RestClient:
    """REST client wired to the fake session with a controllable nonce clock."""
    return RestClient(
        credentials=credentials,
        endpoint_config=endpoint_config,
        max_retries=0,
        retry_delay=0,
        session=fake_session,
        nonce_generator=NonceGenerator(clock=clock),
    )


@pytest.fixture
def anonymous_client(endpoint_config: EndpointConfig, fake_session: FakeSession) -> RestClient:
    """REST client with no credentials at all."""
    return RestClient(
        credentials=Credentials(),
        endpoint_config=endpoint_config,
        max_retries=0,
        retry_delay=0,
        session=fake_session,
    )


@pytest.fixture
def skip_if_not_live():
    """Skip test unless live calls against api.kraken.com are enabled."""
    if not os.getenv("KRAKEN_LIVE_TESTS"):
        pytest.skip("set KRAKEN_LIVE_TESTS=1 to run live tests")


@pytest.fixture
def sample_trades_result() -> dict:
    """Trades result as returned for XXBTZUSD."""
    return {
        "XXBTZUSD": [
            ["57000.10000", "0.01000000", 1616492376.5941, "b", "l", "", 1001],
            ["57001.20000", "1.50000000", 1616492377.1234, "s", "m", "", 1002],
            ["57002.30000", "0.25000000", 1616492378.0001, "b", "m", "", 1003],
        ],
        "last": "1616492378000100000",
    }


# Pytest configuration
def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line("markers", "live: mark test as requiring a live connection")
    config.addinivalue_line(
        "markers", "credentials: mark test as requiring API credentials"
    )


def pytest_collection_modifyitems(config, items):
    """Add 'live' marker to tests in integration_live module."""
    for item in items:
        if "integration_live" in item.nodeid:
            item.add_marker(pytest.mark.live)
