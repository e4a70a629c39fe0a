"""Demo-session components built on the REST client."""

from .price_alerts import AlertThresholds, PriceAlert, PriceAlertTracker
from .trade_feed import TradeFeed

__all__ = ["AlertThresholds", "PriceAlert", "PriceAlertTracker", "TradeFeed"]
