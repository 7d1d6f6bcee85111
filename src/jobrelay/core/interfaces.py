from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from jobrelay.core.models import JobEvent, RawLog, TokenMetadata


# ---------------------------------------------------------------------------
# IEnvelopeDecoder
# ---------------------------------------------------------------------------

@runtime_checkable
class IEnvelopeDecoder(Protocol):
    """
    Strategy that turns one raw webhook log into a JobEvent envelope.

    Domain expectations:
    - The log's topic0 has already been checked against the JobEvent topic,
      but implementations validate it again and reject mismatches.
    - Failures raise `EnvelopeDecodeError`; nothing else escapes.
    """

    name: str

    def decode(self, log: RawLog) -> JobEvent:
        """
        Decode the envelope (job id, type, actor, payload, timestamp).

        Implementations:
        - ABI schema decoder (eth_abi)
        - Manual 32-byte word slicing
        - Composite that prefers one and falls back to the other
        """
        ...


# ---------------------------------------------------------------------------
# IContractCaller
# ---------------------------------------------------------------------------

@runtime_checkable
class IContractCaller(Protocol):
    """
    Read-only contract call transport.

    Domain expectations:
    - Returns the result of the first endpoint that answered with a
      non-empty value (passed through `decode` when given, where a None
      from `decode` counts as a failure), or None once every endpoint failed.
    - Never raises for transport or RPC errors.
    """

    async def call(self, to: str, data: str, decode: Callable[[str], Any] | None = None) -> Any:
        ...


# ---------------------------------------------------------------------------
# ITokenMetadataResolver
# ---------------------------------------------------------------------------

@runtime_checkable
class ITokenMetadataResolver(Protocol):
    """
    Resolve a token contract address to display metadata.

    Domain expectations:
    - Always returns a TokenMetadata; exhausting remote lookups degrades to
      a truncated-address label with 18 decimals.
    """

    async def resolve(self, address: str) -> TokenMetadata:
        ...


# ---------------------------------------------------------------------------
# INotificationSink
# ---------------------------------------------------------------------------

@runtime_checkable
class INotificationSink(Protocol):
    """
    Deliver a formatted message to a chat channel.

    Domain expectations:
    - Returns True on delivery, False on any failure. Never raises.
    """

    async def send(self, text: str) -> bool:
        ...
