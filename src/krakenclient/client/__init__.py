"""Client modules for REST communication and request signing."""

from .auth import NonceGenerator, encode_params, sign_request
from .rest import RestClient

__all__ = ["RestClient", "NonceGenerator", "encode_params", "sign_request"]
