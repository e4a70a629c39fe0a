"""Client error taxonomy.

Configuration and argument errors are raised before any network I/O.
Transport errors are caught at the REST boundary and handed back inside a
``ResponseEnvelope``. Exchange-reported errors are data, see
``krakenclient.models.response.ExchangeError``.
"""


class KrakenClientError(Exception):
    """Base class for client-side errors."""

    recoverable = False


class ConfigurationError(KrakenClientError):
    """Credentials required for the call are missing or unusable."""


class MissingArgumentsError(KrakenClientError, ValueError):
    """A private endpoint was called without its required arguments."""

    def __init__(self, endpoint: str, missing: list[str]):
        self.endpoint = endpoint
        self.missing = list(missing)
        super().__init__(
            "the following required arguments are missing: " + ", ".join(self.missing)
        )


class TransportError(KrakenClientError):
    """Network failure, timeout, bad HTTP status or malformed body."""

    recoverable = True

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
