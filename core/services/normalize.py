from __future__ import annotations

from typing import Tuple, TypeVar

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

T = TypeVar("T")


def _norm(a: str | None) -> str:
    return (a or "").strip()


def _norm_lower(a: str | None) -> str:
    return _norm(a).lower()


def _require_nonzero(name: str, addr: str | None) -> str:
    addr = _norm(addr)
    if not addr or _norm_lower(addr) == ZERO_ADDRESS:
        raise ValueError(f"{name} must not be zero address.")
    return addr


def is_native(addr: str | None) -> bool:
    return _norm_lower(addr) == ZERO_ADDRESS


def sort_base_quote(token_a: str, token_b: str) -> Tuple[str, str]:
    """
    Order a token pair the way Croc pools key them: the lower address is base.

    Native ETH (zero address) is therefore always base.
    """
    if _norm_lower(token_a) == _norm_lower(token_b):
        raise ValueError(f"base and quote must differ: {token_a}")
    return (token_a, token_b) if _norm_lower(token_a) < _norm_lower(token_b) else (token_b, token_a)


def sort_base_quote_views(view_a: T, view_b: T) -> Tuple[T, T]:
    """Same ordering as sort_base_quote, for objects exposing `.address`."""
    base_addr, _ = sort_base_quote(view_a.address, view_b.address)  # type: ignore[attr-defined]
    return (view_a, view_b) if base_addr == view_a.address else (view_b, view_a)  # type: ignore[attr-defined]
