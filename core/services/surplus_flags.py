from __future__ import annotations

from typing import Tuple, Union

# (base side uses surplus, quote side uses surplus)
SurplusFlags = Tuple[bool, bool]


def encode_surplus_arg(flags: Union[SurplusFlags, int], is_pair_inverted: bool = False) -> int:
    """
    Pack surplus collateral flags into the uint8 `reserveFlags` swap argument.

    bit0 = settle base side with dex surplus, bit1 = settle quote side.
    """
    if isinstance(flags, int):
        return flags
    left, right = flags
    base_flag, quote_flag = (right, left) if is_pair_inverted else (left, right)
    return (1 if base_flag else 0) + (2 if quote_flag else 0)


def decode_surplus_flag(flag: int) -> SurplusFlags:
    return (flag & 0x1) > 0, (flag & 0x2) > 0
