import asyncio
import json

import httpx
import pytest

from pumpwork.adapters.solana_rpc import (
    SolanaBalanceClient,
    StaticBalanceSource,
    build_request,
    parse_balance,
)
from pumpwork.rules.models import TokenRules

MINT = "8LSpERCFafc1qfxrHVj4QaZ9k1jgNuUNAfVMJ9gApump"
OWNER = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


def _account(ui_amount, ui_string=None):
    token_amount = {"uiAmount": ui_amount}
    if ui_string is not None:
        token_amount["uiAmountString"] = ui_string
    return {"account": {"data": {"parsed": {"info": {"tokenAmount": token_amount}}}}}


def _payload(*accounts):
    return {"jsonrpc": "2.0", "id": 1, "result": {"value": list(accounts)}}


@pytest.fixture
def captured():
    return []


@pytest.fixture
def rpc(captured):
    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(json.loads(request.content))
        return httpx.Response(200, json=_payload(_account(1500.5), _account(None, "500")))

    rules = TokenRules(mint=MINT, rpc_url="https://rpc.test")
    return SolanaBalanceClient.from_rules(rules, transport=httpx.MockTransport(handler))


def test_build_request():
    body = build_request(OWNER, MINT)
    assert body["method"] == "getTokenAccountsByOwner"
    assert body["params"] == [OWNER, {"mint": MINT}, {"encoding": "jsonParsed"}]


def test_parse_balance_sums_accounts():
    assert parse_balance(_payload(_account(10), _account(2.5))) == 12.5


@pytest.mark.parametrize("payload", [{}, {"result": None}, {"result": {"value": []}}, "junk"])
def test_parse_balance_empty(payload):
    assert parse_balance(payload) == 0


def test_fetch_balance_sync(rpc, captured):
    assert rpc.fetch_balance_sync(OWNER) == 2000.5
    assert captured[0]["params"][0] == OWNER


def test_fetch_balance_async(rpc):
    assert asyncio.run(rpc.fetch_balance(OWNER)) == 2000.5


def _client(handler):
    return SolanaBalanceClient("https://rpc.test", MINT, transport=httpx.MockTransport(handler))


def test_transport_error_yields_zero():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    assert _client(handler).fetch_balance_sync(OWNER) == 0
    assert asyncio.run(_client(handler).fetch_balance(OWNER)) == 0


def test_non_json_response_yields_zero():
    client = _client(lambda request: httpx.Response(502, text="bad gateway"))
    assert client.fetch_balance_sync(OWNER) == 0


def test_malformed_account_yields_zero():
    client = _client(lambda request: httpx.Response(200, json=_payload({"account": {}})))
    assert client.fetch_balance_sync(OWNER) == 0


def test_static_balance_source():
    source = StaticBalanceSource({OWNER: 42})
    assert source.fetch_balance_sync(OWNER) == 42
    assert source.fetch_balance_sync("unknown") == 0
    assert asyncio.run(source.fetch_balance(OWNER)) == 42
