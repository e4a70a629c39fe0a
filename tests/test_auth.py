"""Tests for nonce generation and request signing."""

import base64
import threading

import pytest

from krakenclient.client.auth import (
    NonceGenerator,
    encode_params,
    get_auth_headers,
    normalize_params,
    sign_request,
)
from krakenclient.utils.config import Credentials
from krakenclient.utils.exceptions import ConfigurationError

SECRET = "kQH5HW/8p1uGOVjbgWA7FunAmGO8lsSUXNsu3eow76sz84Q18fWxnyRzBHCd3pd5nE9qa99HAZtuZuj6F1huXg=="
NONCE = "1616492376594"


class TestNonceGenerator:
    """Test suite for NonceGenerator."""

    def test_tight_loop_is_strictly_increasing(self):
        """Back-to-back calls never repeat or decrease."""
        generator = NonceGenerator()
        previous = generator.next()
        for _ in range(10_000):
            current = generator.next()
            assert current > previous
            previous = current

    def test_default_nonce_is_51_bit_microsecond_time(self):
        nonce = NonceGenerator().next()
        assert isinstance(nonce, int)
        assert nonce.bit_length() == 51

    def test_frozen_clock_still_increments(self, clock):
        generator = NonceGenerator(clock=clock)
        assert [generator.next() for _ in range(3)] == [clock.now, clock.now + 1, clock.now + 2]

    def test_clock_moving_backwards(self, clock):
        """A backward clock step must not produce a smaller nonce."""
        generator = NonceGenerator(clock=clock)
        first = generator.next()

        clock.now -= 5_000_000
        second = generator.next()

        assert second == first + 1

    def test_follows_clock_when_it_moves_ahead(self, clock):
        generator = NonceGenerator(clock=clock)
        generator.next()

        clock.now += 1_000
        assert generator.next() == clock.now
        assert generator.last == clock.now

    def test_callable_alias(self, clock):
        generator = NonceGenerator(clock=clock)
        assert generator() == clock.now

    def test_unique_across_threads(self, clock):
        """Concurrent callers sharing one generator get distinct nonces."""
        generator = NonceGenerator(clock=clock)
        results: list[list[int]] = [[] for _ in range(8)]

        def worker(out: list[int]):
            for _ in range(500):
                out.append(generator.next())

        threads = [threading.Thread(target=worker, args=(out,)) for out in results]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        issued = [n for out in results for n in out]
        assert len(set(issued)) == len(issued)
        for out in results:
            assert out == sorted(out)


class TestEncodeParams:
    """Test suite for body encoding."""

    def test_keeps_insertion_order(self):
        assert encode_params({"nonce": NONCE, "pair": "XBTUSD"}) == f"nonce={NONCE}&pair=XBTUSD"
        assert encode_params({"pair": "XBTUSD", "nonce": NONCE}) == f"pair=XBTUSD&nonce={NONCE}"

    def test_drops_none_and_lowercases_booleans(self):
        params = {"pair": "XBTEUR", "fee-info": True, "trades": False, "userref": None}
        assert encode_params(params) == "pair=XBTEUR&fee-info=true&trades=false"

    def test_escapes_reserved_characters(self):
        assert encode_params({"pair": "XBTUSD,ETHUSD"}) == "pair=XBTUSD%2CETHUSD"

    def test_normalize_joins_lists(self):
        assert normalize_params({"pair": ["XBTUSD", "ETHUSD"], "count": 10}) == {
            "pair": "XBTUSD,ETHUSD",
            "count": "10",
        }


class TestSignRequest:
    """Test suite for API-Sign computation."""

    def test_kraken_documentation_vector(self):
        params = f"nonce={NONCE}&ordertype=limit&pair=XBTUSD&price=37500&type=buy&volume=1.25"
        signature = sign_request("/0/private/", "AddOrder", NONCE, params, SECRET)
        assert signature == (
            "4/dpxb3iT4tp/ZCVEwSnEsLxx0bqyhLpdfOpc6fn7OR8+UClSV5n9E6aSS8MPtnRfp32bAb0nmbRn6H8ndwLUQ=="
        )

    def test_add_order_pair_only_vector(self):
        signature = sign_request(
            "/0/private/", "AddOrder", NONCE, f"nonce={NONCE}&pair=XBTUSD", SECRET
        )
        assert signature == (
            "O73D1NK1xdrqMI9uo8FcsUDqkl0pLt1QzbA8l0r/kymLkIeMnV1/RsehjcWJDu1Oo9LfbG4dMWyRqtR3JApkeA=="
        )

    def test_int_and_str_nonce_sign_the_same(self):
        body = f"nonce={NONCE}&pair=XBTUSD"
        assert sign_request("/0/private/", "AddOrder", int(NONCE), body, SECRET) == sign_request(
            "/0/private/", "AddOrder", NONCE, body, SECRET
        )

    def test_deterministic(self):
        body = f"nonce={NONCE}&pair=XBTUSD"
        signatures = {sign_request("/0/private/", "Balance", NONCE, body, SECRET) for _ in range(5)}
        assert len(signatures) == 1

    def test_signature_is_padded_base64_sha512(self):
        signature = sign_request("/0/private/", "Balance", NONCE, f"nonce={NONCE}", SECRET)
        assert len(base64.b64decode(signature, validate=True)) == 64
        assert signature.endswith("==")

    def test_param_order_changes_signature(self):
        a = sign_request("/0/private/", "AddOrder", NONCE, f"nonce={NONCE}&pair=XBTUSD&type=buy", SECRET)
        b = sign_request("/0/private/", "AddOrder", NONCE, f"nonce={NONCE}&type=buy&pair=XBTUSD", SECRET)
        assert a != b

    @pytest.mark.parametrize("secret", ["", None])
    def test_missing_secret(self, secret):
        with pytest.raises(ConfigurationError, match="API secret is not set"):
            sign_request("/0/private/", "Balance", NONCE, f"nonce={NONCE}", secret)

    def test_invalid_base64_secret(self):
        with pytest.raises(ConfigurationError, match="not valid base64"):
            sign_request("/0/private/", "Balance", NONCE, f"nonce={NONCE}", "not*base64!")


class TestAuthHeaders:
    """Test suite for header construction."""

    def test_headers(self):
        headers = get_auth_headers(Credentials("my-key", SECRET), "c2lnbmF0dXJl")
        assert headers["API-Key"] == "my-key"
        assert headers["API-Sign"] == "c2lnbmF0dXJl"
        assert headers["Content-Type"] == "application/x-www-form-urlencoded"

    def test_missing_key(self):
        with pytest.raises(ConfigurationError, match="API key is not set"):
            get_auth_headers(Credentials("", SECRET), "c2lnbmF0dXJl")
