import pytest

import config
from core.services.dex_context import ChainSpec


@pytest.fixture(autouse=True)
def _fresh_settings():
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()


def test_defaults(monkeypatch):
    for key in ("CROC_POOL_INDEX", "SWAP_SLIPPAGE", "REBALANCE_SLIPPAGE", "CROC_DFLT_COLD_SWAP"):
        monkeypatch.delenv(key, raising=False)

    s = config.get_settings()

    assert s.CROC_POOL_INDEX == 420
    assert s.SWAP_SLIPPAGE == 0.01
    assert s.REBALANCE_SLIPPAGE == 0.02
    assert s.CROC_DFLT_COLD_SWAP is False


def test_chain_spec_from_env(monkeypatch):
    monkeypatch.setenv("CROC_DEX_ADDRESS", "0x" + "d0" * 20)
    monkeypatch.setenv("CROC_QUERY_ADDRESS", "0x" + "9e" * 20)
    monkeypatch.setenv("CROC_IMPACT_ADDRESS", "0x" + "1a" * 20)
    monkeypatch.setenv("CROC_ROUTER_ADDRESS", "")
    monkeypatch.setenv("CROC_ROUTER_BYPASS_ADDRESS", " 0x" + "71" * 20 + " ")
    monkeypatch.setenv("CROC_POOL_INDEX", "36000")
    monkeypatch.setenv("CROC_DFLT_COLD_SWAP", "yes")

    chain = ChainSpec.from_settings()

    assert chain.pool_index == 36000
    assert chain.router_addr is None
    assert chain.router_bypass_addr == "0x" + "71" * 20
    assert chain.dflt_cold_swap is True


def test_chain_spec_requires_dex(monkeypatch):
    monkeypatch.setenv("CROC_DEX_ADDRESS", "0x0000000000000000000000000000000000000000")
    monkeypatch.setenv("CROC_QUERY_ADDRESS", "0x" + "9e" * 20)
    monkeypatch.setenv("CROC_IMPACT_ADDRESS", "0x" + "1a" * 20)

    with pytest.raises(ValueError):
        ChainSpec.from_settings()
