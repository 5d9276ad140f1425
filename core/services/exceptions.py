from __future__ import annotations

from typing import Any, Optional


class DirectiveCursorError(RuntimeError):
    """
    Raised when a builder call needs a hop/pool that has not been appended yet.
    """


class DirectiveListOverflowError(ValueError):
    """
    Raised when a directive list does not fit the 1-byte count prefix.
    """

    def __init__(self, kind: str, count: int):
        self.kind = kind
        self.count = int(count)
        super().__init__(f"Too many {kind} in directive: {count} (max 255)")


class ForcedPathUnavailableError(RuntimeError):
    """
    Raised when router/bypass mode is forced but the contract is not configured
    for the current network.
    """

    def __init__(self, mode: str):
        self.mode = mode
        super().__init__(f"Router not available on network (mode={mode})")


class RebalanceNotOutOfRangeError(ValueError):
    """
    Raised when a rebalance is requested while the spot tick is still inside
    the burn range.
    """

    def __init__(self, spot_tick: int, low_tick: int, high_tick: int):
        self.spot_tick = int(spot_tick)
        self.low_tick = int(low_tick)
        self.high_tick = int(high_tick)
        super().__init__(
            f"Rebalance position not out of range (tick={spot_tick} range=[{low_tick}, {high_tick}))"
        )


class TransactionRevertedError(RuntimeError):
    """
    Raised after a broadcast tx was mined with status == 0.
    """

    def __init__(self, tx_hash: str, receipt: Optional[dict[str, Any]] = None, msg: str = "Transaction reverted"):
        self.tx_hash = tx_hash
        self.receipt = receipt
        super().__init__(f"{msg} (tx={tx_hash})")
