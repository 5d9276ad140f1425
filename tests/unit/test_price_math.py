from decimal import Decimal
from enum import Enum

import pytest
from hexbytes import HexBytes

from core.domain.schemas.swap_types import PoolSnapshot
from core.services.normalize import ZERO_ADDRESS, is_native, sort_base_quote
from core.services.price_math import (
    MAX_SQRT_PRICE,
    MIN_SQRT_PRICE,
    Q64,
    base_token_for_conc_liq,
    conc_deposit_balance,
    decode_croc_price,
    encode_croc_price,
    price_to_tick,
    quote_token_for_conc_liq,
    tick_to_price,
    to_display_price,
)
from core.services.surplus_flags import decode_surplus_flag, encode_surplus_arg
from core.services.utils import to_json_safe


# ---------- prices ----------

def test_unit_price_encodes_to_q64():
    assert encode_croc_price(1.0) == Q64
    assert decode_croc_price(Q64) == 1.0


@pytest.mark.parametrize("price", [0.0005, 1.5, 2500.0])
def test_price_encoding_inverts(price):
    assert decode_croc_price(encode_croc_price(price)) == pytest.approx(price, rel=1e-12)


def test_negative_price_rejected():
    with pytest.raises(ValueError):
        encode_croc_price(-1.0)


def test_sqrt_price_bounds_ordered():
    assert MIN_SQRT_PRICE < Q64 < MAX_SQRT_PRICE


def test_tick_price_roundtrip():
    assert tick_to_price(0) == 1.0
    assert price_to_tick(tick_to_price(-69090) * 1.00001) == -69090


def test_deposit_balance_bounds():
    lower, upper = tick_to_price(-100), tick_to_price(100)
    assert conc_deposit_balance(tick_to_price(-200), lower, upper) == 0.0
    assert conc_deposit_balance(tick_to_price(200), lower, upper) == 1.0
    assert conc_deposit_balance(1.0, lower, upper) == pytest.approx(0.5, abs=1e-3)


def test_collateral_by_side_when_out_of_range():
    lower, upper = tick_to_price(-100), tick_to_price(100)
    liq = 10**18
    # above range: all base, no quote
    assert base_token_for_conc_liq(tick_to_price(500), liq, lower, upper) > 0
    assert quote_token_for_conc_liq(tick_to_price(500), liq, lower, upper) == 0
    # below range: all quote, no base
    assert base_token_for_conc_liq(tick_to_price(-500), liq, lower, upper) == 0
    assert quote_token_for_conc_liq(tick_to_price(-500), liq, lower, upper) > 0


def test_display_price_scales_by_decimals():
    # 1 raw base per raw quote with 6-dec base and 18-dec quote
    assert to_display_price(1.0, 6, 18) == pytest.approx(1e12)
    assert to_display_price(1.0, 6, 18, is_inverted=True) == pytest.approx(1e-12)


# ---------- surplus flags ----------

@pytest.mark.parametrize(
    "flags, expected",
    [((False, False), 0), ((True, False), 1), ((False, True), 2), ((True, True), 3)],
)
def test_surplus_flag_bits(flags, expected):
    assert encode_surplus_arg(flags) == expected
    assert decode_surplus_flag(expected) == flags


def test_surplus_flags_inverted_pair_and_passthrough():
    assert encode_surplus_arg((True, False), is_pair_inverted=True) == 2
    assert encode_surplus_arg(3) == 3


# ---------- token ordering ----------

def test_lower_address_is_base():
    low, high = "0x" + "11" * 20, "0x" + "EE" * 20
    assert sort_base_quote(high, low) == (low, high)
    assert sort_base_quote(low, high) == (low, high)


def test_native_is_always_base():
    other = "0x" + "01" * 20
    assert sort_base_quote(other, ZERO_ADDRESS) == (ZERO_ADDRESS, other)
    assert is_native(ZERO_ADDRESS)
    assert not is_native(other)


def test_same_token_pair_rejected():
    addr = "0x" + "ab" * 20
    with pytest.raises(ValueError):
        sort_base_quote(addr, addr.upper().replace("0X", "0x"))


# ---------- json ----------

class _Color(Enum):
    RED = "red"


def test_to_json_safe_conversions():
    out = to_json_safe({
        "hash": HexBytes("0x" + "ab" * 4),
        "payload": b"\x01\x02",
        "small": 42,
        "big": 2**125,
        "qty": Decimal("1.50"),
        "mode": _Color.RED,
        "snap": PoolSnapshot(spot_price=1.5, spot_tick=10),
        "items": (1, True, None),
    })
    assert out == {
        "hash": "0x" + "ab" * 4,
        "payload": "0x0102",
        "small": 42,
        "big": str(2**125),
        "qty": "1.50",
        "mode": "red",
        "snap": {"spot_price": 1.5, "spot_tick": 10},
        "items": [1, True, None],
    }
