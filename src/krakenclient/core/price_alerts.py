"""Price alert thresholds for the trades demo."""

from dataclasses import dataclass, replace
from typing import Literal

from ..utils.logger import logger

DEFAULT_ADJUST_COEFF = 1.001


@dataclass
class AlertThresholds:
    """Lower and upper price bounds for one currency. None disables a side."""

    less_than: float | None = None
    more_than: float | None = None


@dataclass(frozen=True)
class PriceAlert:
    """A crossed threshold and where it moved to."""

    currency: str
    direction: Literal["below", "above"]
    price: float
    old_threshold: float
    new_threshold: float


class PriceAlertTracker:
    """
    Owns the alert thresholds of one demo session.

    After an alert fires the crossed threshold moves outward to the further
    of the latest price and the threshold scaled by ``adjust_coeff``, so a
    run of trades past the same level does not alert on every trade.
    """

    def __init__(
        self,
        thresholds: dict[str, AlertThresholds] | None = None,
        adjust_coeff: float = DEFAULT_ADJUST_COEFF,
    ):
        if adjust_coeff <= 0:
            raise ValueError(f"adjust_coeff must be positive, got {adjust_coeff}")
        self._thresholds: dict[str, AlertThresholds] = {
            currency: replace(bounds) for currency, bounds in (thresholds or {}).items()
        }
        self.adjust_coeff = adjust_coeff

    def thresholds(self, currency: str) -> AlertThresholds:
        return self._thresholds.setdefault(currency, AlertThresholds())

    def set_thresholds(
        self, currency: str, less_than: float | None = None, more_than: float | None = None
    ) -> None:
        self._thresholds[currency] = AlertThresholds(less_than=less_than, more_than=more_than)

    def check(self, currency: str, price: float) -> PriceAlert | None:
        """
        Compare a trade price against the currency's thresholds.

        Args:
            currency: Quote currency, e.g. "EUR"
            price: Trade price

        Returns:
            PriceAlert if a threshold was crossed (and moved), else None
        """
        bounds = self._thresholds.get(currency)
        if bounds is None:
            return None

        if bounds.less_than is not None and price < bounds.less_than:
            old = bounds.less_than
            bounds.less_than = min(old / self.adjust_coeff, price)
            alert = PriceAlert(currency, "below", price, old, bounds.less_than)
        elif bounds.more_than is not None and price > bounds.more_than:
            old = bounds.more_than
            bounds.more_than = max(old * self.adjust_coeff, price)
            alert = PriceAlert(currency, "above", price, old, bounds.more_than)
        else:
            return None

        logger.info(
            f"{currency} price alert: {price} {alert.direction} {old}, "
            f"threshold moved to {alert.new_threshold}"
        )
        return alert
