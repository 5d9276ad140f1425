from __future__ import annotations

from enum import IntEnum


class RollType(IntEnum):
    """
    Quantity codes understood by the long-form command decoder.

    LITERAL: use the encoded quantity as-is.
    ROLL_FRACTION: encoded quantity is a fraction (bps) of the settled balance.
    ROLL_ENTIRE: ignore the encoded quantity and use the entire settled balance.
    """

    LITERAL = 0
    ROLL_FRACTION = 4
    ROLL_ENTIRE = 5
