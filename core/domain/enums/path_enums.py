from __future__ import annotations

from enum import IntEnum, StrEnum


class PathMode(StrEnum):
    """
    Entry point selector for swap submission.

    AUTO: direct swap when the hot path is open, generic userCmd otherwise.
    ROUTER / BYPASS: force the (bypass) router contract.
    PROXY: always go through userCmd on the dex.
    """

    AUTO = "auto"
    ROUTER = "router"
    BYPASS = "bypass"
    PROXY = "proxy"


class CallPath(IntEnum):
    """
    Proxy callpath indices accepted by CrocSwapDex.userCmd.
    """

    HOT_PROXY = 1
    LONG_PATH = 4
