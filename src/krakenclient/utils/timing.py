"""Timestamp utilities."""

import time
from datetime import datetime


def get_timestamp_us() -> int:
    """Get current Unix time in microseconds."""
    return time.time_ns() // 1_000


def unixtime_to_hhmmss(unixtime: float) -> str:
    """Format a Unix time as local HH:MM:SS."""
    return datetime.fromtimestamp(unixtime).strftime("%H:%M:%S")
