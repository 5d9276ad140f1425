"""
Long-form directive wire encoding.

Field widths:
  full unsigned   32 bytes big-endian
  full signed     1 sign byte (0 = +, 1 = -) + 32 byte magnitude
  word/flag       1 byte
  tick            1 sign byte + 3 byte magnitude
  token           address left-padded to 32 bytes
  list            1 byte count + concatenated elements

The layout must match the on-chain decoder byte for byte.
"""

from __future__ import annotations

from typing import Callable, Sequence, TypeVar

from web3 import Web3

from core.domain.schemas.directive_types import (
    ChainingDirective,
    ConcentratedDirective,
    HopDirective,
    ImproveDirective,
    OrderDirective,
    PassiveDirective,
    PoolDirective,
    SettlementDirective,
    SwapDirective,
)
from core.services.exceptions import DirectiveListOverflowError

T = TypeVar("T")

LONG_FORM_SCHEMA_TYPE = 1

FULL_WORD_BYTES = 32
TICK_BYTES = 3
MAX_LIST_LEN = 255


# ---------- primitives ----------

def encode_num(val: int, n_bytes: int) -> bytes:
    val = int(val)
    if val < 0:
        raise ValueError(f"unsigned field got negative value: {val}")
    if val >= 1 << (8 * n_bytes):
        raise ValueError(f"value {val} does not fit in {n_bytes} bytes")
    return val.to_bytes(n_bytes, "big")


def encode_signed(val: int, n_bytes: int) -> bytes:
    val = int(val)
    return encode_word(1 if val < 0 else 0) + encode_num(abs(val), n_bytes)


def encode_full(val: int) -> bytes:
    return encode_num(val, FULL_WORD_BYTES)


def encode_full_signed(val: int) -> bytes:
    return encode_signed(val, FULL_WORD_BYTES)


def encode_word(val: int) -> bytes:
    return encode_num(val, 1)


def encode_bool(flag: bool) -> bytes:
    return encode_word(1 if flag else 0)


def encode_tick(tick: int) -> bytes:
    return encode_signed(tick, TICK_BYTES)


def encode_token(token_addr: str) -> bytes:
    raw = Web3.to_bytes(hexstr=token_addr)
    if len(raw) > FULL_WORD_BYTES:
        raise ValueError(f"token address too long: {token_addr}")
    return raw.rjust(FULL_WORD_BYTES, b"\x00")


def encode_list(elems: Sequence[T], encoder_fn: Callable[[T], bytes], kind: str = "elements") -> bytes:
    if len(elems) > MAX_LIST_LEN:
        raise DirectiveListOverflowError(kind, len(elems))
    return encode_word(len(elems)) + b"".join(encoder_fn(e) for e in elems)


# ---------- tree nodes ----------

def encode_settlement(d: SettlementDirective) -> bytes:
    return b"".join([
        encode_token(d.token),
        encode_full_signed(d.limit_qty),
        encode_full(d.dust_thresh),
        encode_bool(d.use_surplus),
    ])


def encode_improve(improve: ImproveDirective) -> bytes:
    return encode_word((2 if improve.is_enabled else 0) + (1 if improve.use_base_side else 0))


def encode_chain(chain: ChainingDirective) -> bytes:
    flag = (
        (4 if chain.roll_exit else 0)
        + (2 if chain.swap_defer else 0)
        + (1 if chain.offset_surplus else 0)
    )
    return encode_word(flag)


def encode_swap(swap: SwapDirective) -> bytes:
    return b"".join([
        encode_word((2 if swap.is_buy else 0) + (1 if swap.in_base_qty else 0)),
        encode_word(int(swap.roll_type)),
        encode_full(swap.qty),
        encode_full(swap.limit_price),
    ])


def encode_concentrated(conc: ConcentratedDirective) -> bytes:
    return b"".join([
        encode_tick(conc.low_tick),
        encode_tick(conc.high_tick),
        encode_bool(conc.is_rel_tick),
        encode_bool(conc.is_add),
        encode_word(int(conc.roll_type)),
        encode_full(conc.liquidity),
    ])


def encode_passive(passive: PassiveDirective) -> bytes:
    return b"".join([
        encode_bool(passive.ambient.is_add),
        encode_word(int(passive.ambient.roll_type)),
        encode_full(passive.ambient.liquidity),
        encode_list(passive.concentrated, encode_concentrated, "concentrated ranges"),
    ])


def encode_pool(pool: PoolDirective) -> bytes:
    return b"".join([
        encode_full(pool.pool_idx),
        encode_passive(pool.passive),
        encode_swap(pool.swap),
        encode_chain(pool.chain),
    ])


def encode_hop(hop: HopDirective) -> bytes:
    return b"".join([
        encode_list(hop.pools, encode_pool, "pools"),
        encode_settlement(hop.settlement),
        encode_improve(hop.improve),
    ])


def encode_directive(directive: OrderDirective) -> bytes:
    """
    Serialize an order directive into the long-form (schema 1) byte layout.

    Pure and deterministic: the same tree always yields the same bytes.
    """
    return b"".join([
        encode_word(LONG_FORM_SCHEMA_TYPE),
        encode_settlement(directive.open),
        encode_list(directive.hops, encode_hop, "hops"),
    ])
