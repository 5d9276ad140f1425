from __future__ import annotations

from dataclasses import dataclass
from time import time
from typing import Dict, Optional, Tuple, Union

from web3 import AsyncWeb3, Web3
from web3.providers.rpc import AsyncHTTPProvider

from adapters.chain.croc_abis import ABI_CROC_DEX, ABI_CROC_IMPACT, ABI_CROC_QUERY, ABI_CROC_ROUTER
from adapters.chain.croc_views import (
    CrocEthView,
    CrocImpactQuery,
    CrocPoolView,
    CrocSlotReader,
    CrocTokenView,
)
from config import get_settings
from core.services.dex_context import ChainSpec, DexContext
from core.services.tx_service import TxService


@dataclass(frozen=True)
class RpcConnection:
    """Connect through an HTTP JSON-RPC endpoint (shared, cached provider)."""

    url: str


@dataclass(frozen=True)
class Web3Connection:
    """Reuse an already configured AsyncWeb3 instance."""

    w3: AsyncWeb3


Connection = Union[RpcConnection, Web3Connection]

_W3_CACHE: Dict[str, Tuple[float, AsyncWeb3]] = {}
_W3_TTL_SEC = 10 * 60  # 10 minutes


def _cached_web3(rpc_url: str) -> AsyncWeb3:
    url = (rpc_url or "").strip()
    if not url:
        raise ValueError("rpc_url is required")

    now = time()
    hit = _W3_CACHE.get(url)
    if hit and (now - hit[0]) < _W3_TTL_SEC:
        return hit[1]

    w3 = AsyncWeb3(AsyncHTTPProvider(url, request_kwargs={"timeout": 30}))
    _W3_CACHE[url] = (now, w3)
    return w3


def resolve_web3(conn: Connection) -> AsyncWeb3:
    if isinstance(conn, RpcConnection):
        return _cached_web3(conn.url)
    if isinstance(conn, Web3Connection):
        return conn.w3
    raise TypeError(f"Unsupported connection kind: {type(conn).__name__}")


def build_dex_context(
    conn: Connection,
    chain: ChainSpec,
    private_key: str,
) -> DexContext:
    """
    Resolve the connection once and wire every contract and view for `chain`.
    """
    w3 = resolve_web3(conn)

    def _contract(addr: str, abi: list):
        return w3.eth.contract(address=Web3.to_checksum_address(addr), abi=abi)

    def _optional_router(addr: Optional[str]):
        return _contract(addr, ABI_CROC_ROUTER) if addr else None

    query = _contract(chain.query_addr, ABI_CROC_QUERY)
    txs = TxService(w3, private_key)

    def _pool_view(base, quote) -> CrocPoolView:
        return CrocPoolView(base, quote, query, chain.pool_index)

    return DexContext(
        chain=chain,
        dex=_contract(chain.dex_addr, ABI_CROC_DEX),
        impact_query=CrocImpactQuery(_contract(chain.impact_addr, ABI_CROC_IMPACT)),
        slot_reader=CrocSlotReader(w3, chain.dex_addr),
        eth_view=CrocEthView(query, txs.sender_address),
        txs=txs,
        pool_view_factory=_pool_view,
        token_view_factory=lambda addr: CrocTokenView(w3, addr),
        router=_optional_router(chain.router_addr),
        router_bypass=_optional_router(chain.router_bypass_addr),
    )


def dex_context_from_settings() -> DexContext:
    s = get_settings()
    return build_dex_context(RpcConnection(s.RPC_URL_DEFAULT), ChainSpec.from_settings(), s.PRIVATE_KEY)
