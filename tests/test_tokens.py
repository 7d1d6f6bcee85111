import json

import eth_abi
import httpx
import pytest

from jobrelay.clients.rpc import RPC
from jobrelay.core.models import TokenMetadata
from jobrelay.tokens import DECIMALS_CALL, SYMBOL_CALL, TokenMetadataResolver, decode_symbol

URLS = ("https://rpc-a.test", "https://rpc-b.test", "https://rpc-c.test")
UNKNOWN_TOKEN = "0x912CE59144191C1204E64559FE8253a0e49E6548"


def _result(value_hex: str) -> dict:
    return {"jsonrpc": "2.0", "id": 1, "result": value_hex}


def _string_result(s: str) -> dict:
    return _result("0x" + eth_abi.encode(["string"], [s]).hex())


def _uint8_result(n: int) -> dict:
    return _result("0x" + eth_abi.encode(["uint8"], [n]).hex())


class _Recorder:
    """MockTransport handler: routes by (host, call data) and records every request."""

    def __init__(self, routes: dict[tuple[str, str], object]) -> None:
        self.routes = routes
        self.seen: list[tuple[str, str]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["method"] == "eth_call"
        assert body["params"][1] == "latest"
        key = (request.url.host, body["params"][0]["data"])
        self.seen.append(key)
        route = self.routes.get(key, 500)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, int):
            return httpx.Response(route, text="boom")
        return httpx.Response(200, json=route)


def _resolver(recorder: _Recorder) -> TokenMetadataResolver:
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return TokenMetadataResolver(RPC(URLS, timeout_s=2, client=client))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "address",
    [
        "0xaf88d065e77c8cc2239327c5edb3a432268e5831",
        "0xAF88D065E77C8CC2239327C5EDB3A432268E5831",
        "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
    ],
)
async def test_known_token_needs_no_remote_call(address: str) -> None:
    recorder = _Recorder({})

    meta = await _resolver(recorder).resolve(address)

    assert meta == TokenMetadata("USDC", 6)
    assert recorder.seen == []


@pytest.mark.asyncio
async def test_all_endpoints_failing_falls_back_to_truncated_address() -> None:
    recorder = _Recorder({})

    meta = await _resolver(recorder).resolve(UNKNOWN_TOKEN)

    assert meta == TokenMetadata("0x912C...6548", 18)
    # symbol() tried on every endpoint, decimals() never attempted
    assert recorder.seen == [(host, SYMBOL_CALL) for host in ("rpc-a.test", "rpc-b.test", "rpc-c.test")]


@pytest.mark.asyncio
async def test_failures_advance_to_next_endpoint() -> None:
    recorder = _Recorder(
        {
            ("rpc-a.test", SYMBOL_CALL): httpx.ConnectTimeout("slow"),
            ("rpc-b.test", SYMBOL_CALL): {"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "nope"}},
            ("rpc-c.test", SYMBOL_CALL): _string_result("ARB"),
            ("rpc-a.test", DECIMALS_CALL): _result("0x"),
            ("rpc-b.test", DECIMALS_CALL): _uint8_result(18),
        }
    )

    meta = await _resolver(recorder).resolve(UNKNOWN_TOKEN)

    assert meta == TokenMetadata("ARB", 18)
    assert recorder.seen[-1] == ("rpc-b.test", DECIMALS_CALL)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "bad_body",
    [
        [{"jsonrpc": "2.0", "id": 1, "result": "0x"}],
        "oops",
        {"jsonrpc": "2.0", "id": 1, "result": 1234},
        {"jsonrpc": "2.0", "id": 1},
    ],
)
async def test_malformed_response_tries_next_endpoint(bad_body) -> None:
    recorder = _Recorder(
        {
            ("rpc-a.test", SYMBOL_CALL): bad_body,
            ("rpc-b.test", SYMBOL_CALL): _string_result("ARB"),
            ("rpc-a.test", DECIMALS_CALL): bad_body,
            ("rpc-b.test", DECIMALS_CALL): _uint8_result(18),
        }
    )

    meta = await _resolver(recorder).resolve(UNKNOWN_TOKEN)

    assert meta == TokenMetadata("ARB", 18)
    assert recorder.seen[-1] == ("rpc-b.test", DECIMALS_CALL)


@pytest.mark.asyncio
async def test_empty_symbol_tries_next_endpoint() -> None:
    recorder = _Recorder(
        {
            ("rpc-a.test", SYMBOL_CALL): _string_result(""),
            ("rpc-b.test", SYMBOL_CALL): _string_result("GMX"),
            ("rpc-a.test", DECIMALS_CALL): _uint8_result(8),
        }
    )

    meta = await _resolver(recorder).resolve(UNKNOWN_TOKEN)

    assert meta == TokenMetadata("GMX", 8)


@pytest.mark.asyncio
async def test_decimals_default_when_all_decimals_calls_fail() -> None:
    recorder = _Recorder({("rpc-a.test", SYMBOL_CALL): _string_result("ODD")})

    meta = await _resolver(recorder).resolve(UNKNOWN_TOKEN)

    assert meta == TokenMetadata("ODD", 18)


@pytest.mark.asyncio
@pytest.mark.parametrize("address", ["", "0x", "0x1234", "not-an-address"])
async def test_invalid_address_is_unknown(address: str) -> None:
    recorder = _Recorder({})

    meta = await _resolver(recorder).resolve(address)

    assert meta == TokenMetadata("UNKNOWN", 18)
    assert recorder.seen == []


def test_decode_symbol_accepts_bytes32() -> None:
    legacy = "0x" + b"MKR".ljust(32, b"\x00").hex()

    assert decode_symbol(legacy) == "MKR"
