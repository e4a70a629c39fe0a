"""Configuration management."""

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_API_URL = "https://api.kraken.com"
DEFAULT_API_VERSION = 0

# Private endpoints that refuse to be called without these arguments
REQUIRED_ARGUMENTS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "AddOrder": ("pair", "type", "volume", "ordertype"),
        "EditOrder": ("txid", "pair"),
        "CancelOrder": ("txid",),
        "Withdraw": ("asset", "key", "amount"),
    }
)


@dataclass(frozen=True)
class Credentials:
    """API key pair. The secret is the base64 string issued by Kraken."""

    api_key: str = ""
    api_secret: str = field(default="", repr=False)

    def is_complete(self) -> bool:
        return bool(self.api_key) and bool(self.api_secret)


@dataclass(frozen=True)
class EndpointConfig:
    """Where requests go. Immutable once built."""

    base_uri: str = DEFAULT_API_URL
    api_version: int = DEFAULT_API_VERSION
    required_arguments: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: REQUIRED_ARGUMENTS
    )

    @property
    def public_url(self) -> str:
        """e.g. https://api.kraken.com/0/public/"""
        return f"{self.base_uri.rstrip('/')}/{self.api_version}/public/"

    @property
    def private_path(self) -> str:
        """e.g. /0/private/ (the signed part of a private URL)"""
        return f"/{self.api_version}/private/"

    @property
    def private_url(self) -> str:
        return self.base_uri.rstrip("/") + self.private_path

    def required_for(self, endpoint: str) -> tuple[str, ...]:
        return tuple(self.required_arguments.get(endpoint, ()))


class Config:
    """Configuration for the Kraken REST client."""

    # API credentials
    API_KEY: str = os.getenv("KRAKEN_API_KEY", "")
    API_SECRET: str = os.getenv("KRAKEN_API_SECRET", "")

    # Endpoint
    API_URL: str = os.getenv("KRAKEN_API_URL", DEFAULT_API_URL)
    API_VERSION: int = int(os.getenv("KRAKEN_API_VERSION", str(DEFAULT_API_VERSION)))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Connection settings
    REST_TIMEOUT = float(os.getenv("REST_TIMEOUT", "10"))  # seconds
    REST_MAX_RETRIES = int(os.getenv("REST_MAX_RETRIES", "0"))

    @classmethod
    def get_endpoint_config(cls) -> EndpointConfig:
        """Build the endpoint config from the current settings."""
        return EndpointConfig(base_uri=cls.API_URL, api_version=cls.API_VERSION)

    @classmethod
    def get_credentials(cls) -> Credentials:
        """Build credentials from the current settings."""
        return Credentials(api_key=cls.API_KEY, api_secret=cls.API_SECRET)

    @classmethod
    def validate(cls) -> bool:
        """Validate configuration."""
        if not cls.API_KEY or not cls.API_SECRET:
            return False
        return True
