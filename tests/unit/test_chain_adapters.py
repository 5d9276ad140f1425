from decimal import Decimal
from types import SimpleNamespace

import pytest
from hexbytes import HexBytes
from web3 import Web3

from adapters.chain.croc_context import RpcConnection, Web3Connection, build_dex_context, resolve_web3
from adapters.chain.croc_views import CrocSlotReader, CrocTokenView
from core.domain.enums.tx_enums import GasStrategy
from core.services.dex_context import ChainSpec
from core.services.exceptions import TransactionRevertedError
from core.services.normalize import ZERO_ADDRESS
from core.services.tx_service import TxService

DEX = "0x" + "d0" * 20
TOKEN = "0x" + "11" * 20
TEST_KEY = "0x" + "4c" * 32
TX_HASH = HexBytes(b"\x12" * 32)


class _Eth:
    def __init__(self, storage: bytes = b"\x00" * 32, status: int = 1):
        self.storage = storage
        self.status = status
        self.raw_sent = []

    async def get_storage_at(self, addr, slot):
        return HexBytes(self.storage)

    async def get_transaction_count(self, addr, block):
        return 3

    @property
    async def gas_price(self):
        return 7

    async def send_raw_transaction(self, raw):
        self.raw_sent.append(raw)
        return TX_HASH

    async def wait_for_transaction_receipt(self, tx_hash):
        return {"status": self.status, "transactionHash": TX_HASH, "gasUsed": 21_000}

    def contract(self, address, abi):
        return SimpleNamespace(address=address, abi=abi)


class _Fn:
    def __init__(self, gas_estimate: int = 80_000):
        self.gas_estimate = gas_estimate
        self.built = []

    async def estimate_gas(self, tx):
        return self.gas_estimate

    async def call(self, tx):
        return tx

    async def build_transaction(self, tx):
        full = {**tx, "to": Web3.to_checksum_address(DEX), "data": "0x", "chainId": 1}
        self.built.append(full)
        return full


def _w3(**kw):
    return SimpleNamespace(eth=_Eth(**kw))


# ---------- views ----------

def _slot_with_byte(offset: int, value: int) -> bytes:
    return (value << (offset * 8)).to_bytes(32, "big")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "storage, expected",
    [
        (_slot_with_byte(22, 1), True),
        (_slot_with_byte(22, 0), False),
        (_slot_with_byte(21, 1), False),
        (_slot_with_byte(23, 1), False),
    ],
)
async def test_hot_path_flag_reads_single_byte(storage, expected):
    reader = CrocSlotReader(_w3(storage=storage), DEX)
    assert await reader.is_hot_path_open() is expected


@pytest.mark.asyncio
async def test_token_view_scales_by_decimals():
    token = CrocTokenView(_w3(), TOKEN, decimals=6)

    assert await token.norm_qty("1.5") == 1_500_000
    assert await token.norm_qty(42) == 42
    assert await token.to_display(2_500_000) == Decimal("2.5")
    assert await token.round_qty(Decimal("1.2345678")) == 1_234_567


@pytest.mark.asyncio
async def test_token_view_rejects_excess_precision():
    token = CrocTokenView(_w3(), TOKEN, decimals=6)
    with pytest.raises(ValueError):
        await token.norm_qty("0.0000001")


@pytest.mark.asyncio
async def test_native_token_has_18_decimals_without_rpc():
    token = CrocTokenView(_w3(), ZERO_ADDRESS)
    assert token.address == ZERO_ADDRESS
    assert await token.decimals() == 18


# ---------- connections ----------

def test_web3_connection_is_reused_as_is():
    w3 = object()
    assert resolve_web3(Web3Connection(w3)) is w3


def test_rpc_connection_is_cached_per_url():
    conn = RpcConnection("http://localhost:8545")
    assert resolve_web3(conn) is resolve_web3(RpcConnection("http://localhost:8545"))


def test_rpc_connection_requires_url():
    with pytest.raises(ValueError):
        resolve_web3(RpcConnection("  "))


# ---------- tx service ----------

def test_tx_service_without_key_cannot_sign():
    txs = TxService(_w3(), "")

    with pytest.raises(ValueError, match="private_key"):
        txs.sender_address()


@pytest.mark.asyncio
async def test_send_without_key_raises_before_broadcast():
    w3 = _w3()
    fn = _Fn()

    with pytest.raises(ValueError, match="private_key"):
        await TxService(w3, None).send(fn, gas_limit=50_000)

    assert fn.built == []
    assert w3.eth.raw_sent == []


@pytest.mark.asyncio
async def test_context_builds_without_key_for_read_only_use():
    chain = ChainSpec(pool_index=420, dex_addr=DEX, query_addr="0x" + "9e" * 20, impact_addr="0x" + "1a" * 20)

    ctx = build_dex_context(Web3Connection(_w3()), chain, "")

    assert ctx.router is None
    with pytest.raises(ValueError, match="private_key"):
        await ctx.eth_view.amount_needed_beyond_surplus(10**18)


@pytest.mark.parametrize(
    "strategy, expected",
    [(GasStrategy.DEFAULT, 80_000), (GasStrategy.BUFFERED, 110_000), (GasStrategy.AGGRESSIVE, 145_000)],
)
def test_gas_strategy_padding(strategy, expected):
    assert strategy.pad(80_000) == expected


@pytest.mark.asyncio
async def test_send_uses_explicit_gas_limit_and_signs():
    w3 = _w3()
    txs = TxService(w3, TEST_KEY)
    fn = _Fn()

    out = await txs.send(fn, value=5, gas_limit=95_000)

    built = fn.built[0]
    assert built["gas"] == 95_000
    assert built["value"] == 5
    assert built["nonce"] == 3
    assert built["from"] == txs.sender_address()
    assert len(w3.eth.raw_sent) == 1
    assert out["broadcasted"] is True
    assert out["gas_limit_used"] == 95_000
    assert out["gas_price_wei"] == 7
    assert out["status"] is None


@pytest.mark.asyncio
async def test_send_pads_estimate_when_no_gas_limit():
    txs = TxService(_w3(), TEST_KEY)
    fn = _Fn(gas_estimate=80_000)

    out = await txs.send(fn, gas_strategy=GasStrategy.AGGRESSIVE)

    assert out["gas_limit_used"] == 145_000


@pytest.mark.asyncio
async def test_reverted_receipt_raises():
    txs = TxService(_w3(status=0), TEST_KEY)

    with pytest.raises(TransactionRevertedError) as err:
        await txs.send(_Fn(), gas_limit=50_000, wait=True)

    assert err.value.receipt["status"] == 0


@pytest.mark.asyncio
async def test_call_passes_sender_value_and_gas():
    txs = TxService(_w3(), TEST_KEY)

    args = await txs.call(_Fn(), value=9, gas_limit=60_000)

    assert args == {"from": txs.sender_address(), "value": 9, "gas": 60_000}
