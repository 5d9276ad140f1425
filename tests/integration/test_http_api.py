import pytest
from fastapi.testclient import TestClient

from adapters.entry.http.deps import get_dex_context
from core.services.price_math import tick_to_price
from main import create_app
from tests.fakes import TOKEN_HIGH, TOKEN_LOW, FakeImpactQuery, FakePoolView, make_ctx

E18 = 10**18


@pytest.fixture
def client_for():
    app = create_app()

    def _client(ctx):
        app.dependency_overrides[get_dex_context] = lambda: ctx
        return TestClient(app)

    yield _client
    app.dependency_overrides.clear()


def _swap_body(**overrides):
    body = {"sell_token": TOKEN_HIGH, "buy_token": TOKEN_LOW, "qty": "2", "slippage": 0.01}
    body.update(overrides)
    return body


def _rebalance_body(**overrides):
    body = {
        "token_a": TOKEN_LOW,
        "token_b": TOKEN_HIGH,
        "burn_lower": -100,
        "burn_upper": 100,
        "mint_lower": 100,
        "mint_upper": 300,
        "liquidity": E18,
        "slippage": 0.02,
    }
    body.update(overrides)
    return body


# ---------- swap ----------

def test_swap_quote(client_for):
    ctx = make_ctx(impact=FakeImpactQuery(base_flow=-100 * E18, quote_flow=2 * E18))
    resp = client_for(ctx).post("/api/swap/quote", json=_swap_body())

    assert resp.status_code == 200
    data = resp.json()
    assert data["base_token"] == TOKEN_LOW
    assert data["sell_base"] is False
    assert data["slip_qty"] == str(99 * E18)
    assert data["path_mode"] == "auto"
    assert float(data["impact"]["buy_qty"]) == 100
    assert ctx.txs.sent == []


def test_swap_quote_rejects_same_token(client_for):
    resp = client_for(make_ctx()).post("/api/swap/quote", json=_swap_body(buy_token=TOKEN_HIGH))
    assert resp.status_code == 400


def test_swap_quote_on_unpriced_pool_is_bad_request(client_for):
    ctx = make_ctx(pool_view=FakePoolView(display_price=0.0))
    resp = client_for(ctx).post("/api/swap/quote", json=_swap_body())

    assert resp.status_code == 400
    assert "no price" in resp.json()["detail"]


def test_swap_execute_sends_padded_tx(client_for):
    ctx = make_ctx(hot_open=False)
    resp = client_for(ctx).post("/api/swap/execute", json=_swap_body(gas_est=40_000))

    assert resp.status_code == 200
    data = resp.json()
    assert data["simulated"] is False
    assert data["tx"]["broadcasted"] is True
    sent = ctx.txs.sent[0]
    assert sent["fn"].fn_name == "userCmd"
    assert sent["gas_limit"] == 55_000


def test_swap_execute_simulate_only(client_for):
    ctx = make_ctx()
    resp = client_for(ctx).post("/api/swap/execute", json=_swap_body(simulate=True, path_mode="proxy"))

    assert resp.status_code == 200
    assert resp.json()["simulated"] is True
    assert ctx.txs.sent == []
    assert ctx.txs.calls[0]["fn"].fn_name == "userCmd"


def test_swap_execute_unconfigured_router_is_bad_request(client_for):
    ctx = make_ctx()
    resp = client_for(ctx).post("/api/swap/execute", json=_swap_body(path_mode="router"))

    assert resp.status_code == 400
    assert "Router not available" in resp.json()["detail"]
    assert ctx.txs.sent == []


# ---------- rebalance ----------

def _rebalance_ctx(tick):
    return make_ctx(pool_view=FakePoolView(spot_price=tick_to_price(tick), spot_tick=tick))


def test_rebalance_plan(client_for):
    resp = client_for(_rebalance_ctx(150)).post("/api/rebalance/plan", json=_rebalance_body())

    assert resp.status_code == 200
    data = resp.json()
    assert data["base_out_of_range"] is True
    assert data["directive"].startswith("0x01")


def test_rebalance_plan_in_range_conflicts(client_for):
    resp = client_for(_rebalance_ctx(0)).post("/api/rebalance/plan", json=_rebalance_body())

    assert resp.status_code == 409
    detail = resp.json()["detail"]
    assert detail["error"] == "not_out_of_range"
    assert detail["range"] == [-100, 100]


def test_rebalance_plan_invalid_range(client_for):
    resp = client_for(_rebalance_ctx(150)).post(
        "/api/rebalance/plan", json=_rebalance_body(mint_lower=300, mint_upper=100)
    )
    assert resp.status_code == 400


def test_rebalance_execute(client_for):
    ctx = _rebalance_ctx(150)
    resp = client_for(ctx).post("/api/rebalance/execute", json=_rebalance_body())

    assert resp.status_code == 200
    assert resp.json()["simulated"] is False
    fn = ctx.txs.sent[0]["fn"]
    assert (fn.fn_name, fn.args[0]) == ("userCmd", 4)
