"""
Kraken exchange REST API client.
"""

from .client.rest import RestClient
from .models.response import ExchangeError, ResponseEnvelope
from .utils.config import Config, Credentials, EndpointConfig

__version__ = "0.1.0"

__all__ = [
    "RestClient",
    "ResponseEnvelope",
    "ExchangeError",
    "Config",
    "Credentials",
    "EndpointConfig",
]
