"""Response envelope model."""

from dataclasses import dataclass, field
from typing import Any, Literal

from ..utils.exceptions import TransportError

Severity = Literal["E", "W"]


@dataclass(frozen=True)
class ExchangeError:
    """
    One entry of a response's ``error`` list.

    Kraken formats them as ``<severity><category>:<type>[:<extra>]``, for
    example ``EAPI:Rate limit exceeded``. ``category`` keeps the severity
    character (``EAPI``), which is how Kraken documents its error codes.
    """

    raw: str
    severity: Severity
    category: str
    type: str
    extra: str | None = None

    @classmethod
    def parse(cls, message: str) -> "ExchangeError":
        """Parse a raw error string. Unrecognized shapes keep the text as type."""
        category, _, rest = message.partition(":")
        error_type, _, extra = rest.partition(":")
        severity = "W" if message.startswith("W") else "E"
        if not rest:
            # No category prefix at all
            return cls(raw=message, severity=severity, category="", type=message)
        return cls(
            raw=message,
            severity=severity,
            category=category,
            type=error_type,
            extra=extra or None,
        )

    @property
    def is_warning(self) -> bool:
        return self.severity == "W"

    def __str__(self) -> str:
        return self.raw


@dataclass
class ResponseEnvelope:
    """
    Uniform ``{error, result}`` response.

    An exchange-side failure shows up in ``error``; a failure to reach or
    understand the exchange shows up in ``transport_error``. Either way the
    caller branches on ``ok`` instead of catching exceptions.
    """

    error: list[str] = field(default_factory=list)
    result: Any = None
    transport_error: TransportError | None = None

    @classmethod
    def from_json(cls, data: Any) -> "ResponseEnvelope":
        """
        Decode a parsed JSON body.

        Raises:
            TransportError: body does not have the {error, result} shape
        """
        if not isinstance(data, dict):
            raise TransportError(f"Unexpected response body type: {type(data).__name__}")

        if "error" not in data:
            raise TransportError("Response body has no error field")

        errors = data["error"]
        if not isinstance(errors, list) or not all(isinstance(e, str) for e in errors):
            raise TransportError(f"Malformed error field in response: {errors!r}")

        return cls(error=list(errors), result=data.get("result"))

    @classmethod
    def from_transport_error(cls, error: TransportError) -> "ResponseEnvelope":
        return cls(error=[], result=None, transport_error=error)

    def to_json(self) -> dict[str, Any]:
        """Encode back to the wire shape."""
        return {"error": list(self.error), "result": self.result}

    @property
    def ok(self) -> bool:
        """True when the request went through and the exchange reported no error."""
        return self.transport_error is None and not self.error

    @property
    def errors(self) -> list[ExchangeError]:
        """The ``error`` list parsed into ExchangeError values."""
        return [ExchangeError.parse(message) for message in self.error]

    def raise_for_transport(self) -> "ResponseEnvelope":
        """Raise the carried TransportError, if any. Returns self otherwise."""
        if self.transport_error is not None:
            raise self.transport_error
        return self
