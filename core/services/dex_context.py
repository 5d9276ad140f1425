from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from config import get_settings
from core.domain.interfaces.chain_views_interface import (
    HotPathFlagReader,
    ImpactQuery,
    NativeAssetView,
    PoolView,
    TokenView,
)
from core.services.normalize import _norm, _require_nonzero
from core.services.tx_service import TxService


@dataclass(frozen=True)
class ChainSpec:
    """
    Per-network Croc deployment.

    dflt_cold_swap: network routes every swap through userCmd regardless of the hot path flag.
    Router addresses are optional; forcing a router mode without one is an error.
    """

    pool_index: int
    dex_addr: str
    query_addr: str
    impact_addr: str
    router_addr: Optional[str] = None
    router_bypass_addr: Optional[str] = None
    dflt_cold_swap: bool = False

    @classmethod
    def from_settings(cls) -> "ChainSpec":
        s = get_settings()
        return cls(
            pool_index=int(s.CROC_POOL_INDEX),
            dex_addr=_require_nonzero("CROC_DEX_ADDRESS", s.CROC_DEX_ADDRESS),
            query_addr=_require_nonzero("CROC_QUERY_ADDRESS", s.CROC_QUERY_ADDRESS),
            impact_addr=_require_nonzero("CROC_IMPACT_ADDRESS", s.CROC_IMPACT_ADDRESS),
            router_addr=_norm(s.CROC_ROUTER_ADDRESS) or None,
            router_bypass_addr=_norm(s.CROC_ROUTER_BYPASS_ADDRESS) or None,
            dflt_cold_swap=bool(s.CROC_DFLT_COLD_SWAP),
        )


@dataclass
class DexContext:
    """
    Everything a plan needs to talk to one Croc deployment.

    Contracts (`dex`, `router`, `router_bypass`) are web3 contract objects whose
    `.functions.*(...)` yield callables accepted by TxService. Read-side
    collaborators are injected behind their interfaces.
    """

    chain: ChainSpec
    dex: Any
    impact_query: ImpactQuery
    slot_reader: HotPathFlagReader
    eth_view: NativeAssetView
    txs: TxService
    pool_view_factory: Callable[[TokenView, TokenView], PoolView]
    token_view_factory: Callable[[str], TokenView]
    router: Optional[Any] = None
    router_bypass: Optional[Any] = None

    def pool_view(self, base: TokenView, quote: TokenView) -> PoolView:
        return self.pool_view_factory(base, quote)

    def token_view(self, address: str) -> TokenView:
        return self.token_view_factory(address)
