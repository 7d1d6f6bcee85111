"""Token metadata resolution: static table first, `eth_call` getters second."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping

import eth_abi
from eth_abi.exceptions import DecodingError

from jobrelay.clients.rpc import selector_data
from jobrelay.constants import DEFAULT_DECIMALS, KNOWN_TOKENS
from jobrelay.core.interfaces import IContractCaller
from jobrelay.core.models import TokenMetadata
from jobrelay.decoding.utils import hex_to_bytes
from jobrelay.formatting import shorten_address

logger = logging.getLogger(__name__)

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")

SYMBOL_CALL = selector_data("symbol()")
DECIMALS_CALL = selector_data("decimals()")


def truncated_label(address: str) -> str:
    """`0xaf88...5831` style label used when no symbol can be resolved."""
    return shorten_address(address)


def decode_symbol(result_hex: str) -> str | None:
    """Decode a `symbol()` return value; accepts `string` and legacy `bytes32`."""
    raw = hex_to_bytes(result_hex)
    try:
        (symbol,) = eth_abi.decode(["string"], raw)
    except (DecodingError, ValueError, OverflowError):
        if len(raw) != 32:
            return None
        symbol = raw.rstrip(b"\x00").decode("utf-8", errors="replace")
    symbol = symbol.strip()
    return symbol or None


def decode_decimals(result_hex: str) -> int | None:
    raw = hex_to_bytes(result_hex)
    try:
        (decimals,) = eth_abi.decode(["uint8"], raw)
    except (DecodingError, ValueError, OverflowError):
        return None
    return int(decimals)


class TokenMetadataResolver:
    """Resolve token addresses to `TokenMetadata`.

    Resolution order: address validation, static table (lowercased keys),
    `symbol()` over the caller's endpoints, then `decimals()`. A token
    without a resolvable symbol gets a truncated-address label and 18
    decimals. Remote failures never propagate.
    """

    def __init__(
        self,
        caller: IContractCaller,
        known_tokens: Mapping[str, tuple[str, int]] = KNOWN_TOKENS,
    ) -> None:
        self.caller = caller
        self.known = {addr.lower(): TokenMetadata(sym, dec) for addr, (sym, dec) in known_tokens.items()}

    async def resolve(self, address: str) -> TokenMetadata:
        if not address or not _ADDRESS_RE.match(address):
            logger.warning("Invalid token address %r", address)
            return TokenMetadata("UNKNOWN", DEFAULT_DECIMALS)

        addr = address.lower()
        if (hit := self.known.get(addr)) is not None:
            return hit

        symbol = await self._fetch_symbol(addr)
        if symbol is None:
            logger.warning("No symbol for token %s; using truncated address", addr)
            return TokenMetadata(truncated_label(address), DEFAULT_DECIMALS)

        decimals = await self._fetch_decimals(addr)
        return TokenMetadata(symbol, DEFAULT_DECIMALS if decimals is None else decimals)

    async def _fetch_symbol(self, addr: str) -> str | None:
        symbol = await self.caller.call(addr, SYMBOL_CALL, decode_symbol)
        if symbol:
            logger.info("Resolved symbol %r for %s", symbol, addr)
        return symbol

    async def _fetch_decimals(self, addr: str) -> int | None:
        return await self.caller.call(addr, DECIMALS_CALL, decode_decimals)
