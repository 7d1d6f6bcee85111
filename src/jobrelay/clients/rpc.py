"""Lightweight JSON-RPC client for read-only contract calls.

This module provides:
- `RPC`: an async `eth_call` client walking an ordered list of redundant
  endpoints, each call bounded by a short timeout
- Helpers to build call data for argument-less getters

A failing endpoint is never fatal: the client logs it and moves on.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TypeVar

import httpx
from eth_utils import function_signature_to_4byte_selector

from jobrelay.core.errors import RpcError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def selector_data(signature: str) -> str:
    """Return 0x-hex call data for a getter without arguments, e.g. `symbol()`."""
    return "0x" + function_signature_to_4byte_selector(signature).hex()


def eth_call_payload(to: str, data: str, *, request_id: int = 1) -> dict:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "eth_call",
        "params": [{"to": to, "data": data}, "latest"],
    }


class RPC:
    """Minimal async multi-endpoint RPC client.

    Parameters
    ----------
    urls : Sequence[str]
        RPC endpoint URLs, tried in order.
    timeout_s : float
        Per-call timeout in seconds (connect/read/write/pool).
    client : httpx.AsyncClient | None
        Shared client; when omitted the RPC owns and closes its own.
    """

    def __init__(
        self,
        urls: Sequence[str],
        *,
        timeout_s: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not urls:
            raise ValueError("RPC needs at least one endpoint URL")
        self.urls = tuple(urls)
        self.timeout = httpx.Timeout(timeout_s)
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=self.timeout, http2=True)

    async def eth_call_at(self, url: str, to: str, data: str) -> str:
        """Run one `eth_call` against `url`; raise on any unusable answer."""
        r = await self.client.post(url, json=eth_call_payload(to, data), timeout=self.timeout)
        r.raise_for_status()
        body = r.json()
        if not isinstance(body, dict):
            raise RpcError(f"unexpected JSON-RPC response of type {type(body).__name__}")
        if "error" in body:
            e = body["error"]
            if isinstance(e, dict):
                raise RpcError(f"RPC error: {e.get('code')} {e.get('message')}")
            raise RpcError(f"RPC error: {e}")
        result = body.get("result")
        if not isinstance(result, str):
            raise RpcError(f"eth_call result is not a hex string: {result!r}")
        if not result or result == "0x":
            raise RpcError("empty eth_call result")
        return result

    async def call(self, to: str, data: str, decode: Callable[[str], T | None] | None = None) -> T | str | None:
        """Return the first usable `eth_call` result across endpoints, or None.

        With `decode`, a result is usable only when `decode` returns a value
        other than None; otherwise the next endpoint is tried.
        """
        for url in self.urls:
            try:
                logger.debug("eth_call %s to=%s data=%s", url, to, data)
                result = await self.eth_call_at(url, to, data)
                if decode is None:
                    return result
                value = decode(result)
                if value is None:
                    raise RpcError(f"undecodable eth_call result {result}")
                return value
            except (httpx.HTTPError, RpcError, ValueError) as e:
                logger.info("eth_call via %s failed for %s: %s: %s", url, to, type(e).__name__, e)
                continue
        logger.warning("eth_call to %s failed on all %d endpoints", to, len(self.urls))
        return None

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()
