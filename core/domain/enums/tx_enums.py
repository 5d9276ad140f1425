from __future__ import annotations

from enum import StrEnum


class GasStrategy(StrEnum):
    """
    Gas padding applied by TxService when the caller gives no explicit gas limit.

    DEFAULT: node estimate as-is.
    BUFFERED: +25% and 10k units.
    AGGRESSIVE: +50% and 25k units.
    """

    DEFAULT = "default"
    BUFFERED = "buffered"
    AGGRESSIVE = "aggressive"

    def pad(self, estimate: int) -> int:
        if self is GasStrategy.BUFFERED:
            return int(estimate * 1.25) + 10_000
        if self is GasStrategy.AGGRESSIVE:
            return int(estimate * 1.5) + 25_000
        return int(estimate)
