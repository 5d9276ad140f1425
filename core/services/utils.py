# core/services/utils.py
from collections.abc import Iterable, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any

from hexbytes import HexBytes
from pydantic import BaseModel
from web3 import Web3


def to_json_safe(obj: Any) -> Any:
    """
    Recursively convert web3 / planner structures into JSON-serializable primitives.

    - HexBytes / bytes -> "0x..." str
    - Decimal          -> str (keeps full precision of display quantities)
    - Enum             -> its value
    - pydantic model   -> dict
    - ints above 2**53 -> str (uint128 quantities and Q64.64 prices)
    - Mapping / list / tuple / set -> converted recursively
    """
    if isinstance(obj, HexBytes):
        return Web3.to_hex(obj)
    if isinstance(obj, (bytes, bytearray)):
        return "0x" + bytes(obj).hex()

    if isinstance(obj, Enum):
        return to_json_safe(obj.value)
    if isinstance(obj, bool) or obj is None or isinstance(obj, (str, float)):
        return obj
    if isinstance(obj, int):
        return obj if abs(obj) < 2**53 else str(obj)
    if isinstance(obj, Decimal):
        return str(obj)

    if isinstance(obj, BaseModel):
        return to_json_safe(obj.model_dump())

    # covers web3.datastructures.AttributeDict
    if isinstance(obj, Mapping):
        return {str(k): to_json_safe(v) for (k, v) in obj.items()}

    if isinstance(obj, (list, tuple, set)):
        return [to_json_safe(v) for v in obj]

    if isinstance(obj, Iterable):
        return [to_json_safe(v) for v in obj]

    return str(obj)
