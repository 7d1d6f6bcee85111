"""Packed `Created` payload codec.

The `data_` bytes of a Created JobEvent are not ABI-encoded. They are a
sequential, length-prefixed layout:

    u8 len | title
    bytes32  content hash
    u8       multiple applicants flag
    u8 count | count x (u8 len | tag)
    bytes20  token address
    uint256  amount
    uint32   max time (seconds)
    u8 len | delivery method
    bytes20  arbitrator
    u8       whitelist workers flag

`decode_created_payload` never raises: any structural problem becomes a
`PayloadDecodeFailed` and nothing partial is returned.
"""

from __future__ import annotations

import logging

from jobrelay.core.models import CreatedJobDetails, PayloadDecoded, PayloadDecodeFailed, PayloadDecodeResult
from jobrelay.decoding.utils import hex_to_bytes

logger = logging.getLogger(__name__)

MIN_PAYLOAD_BYTES = 5


class _Truncated(Exception):
    pass


class _Cursor:
    """Left-to-right reader over the payload; every read is bounds checked."""

    __slots__ = ("data", "offset")

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.offset = 0

    def take(self, n: int, field: str) -> bytes:
        end = self.offset + n
        if end > len(self.data):
            raise _Truncated(
                f"{field}: needs {n} bytes at offset {self.offset}, "
                f"only {len(self.data) - self.offset} left"
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def u8(self, field: str) -> int:
        return self.take(1, field)[0]

    def flag(self, field: str) -> bool:
        return self.u8(field) != 0

    def uint(self, n: int, field: str) -> int:
        return int.from_bytes(self.take(n, field), "big", signed=False)

    def address(self, field: str) -> str:
        return "0x" + self.take(20, field).hex()

    def short_string(self, field: str) -> str:
        length = self.u8(f"{field} length")
        # byte-per-character, so any byte value round-trips
        return self.take(length, field).decode("latin-1")


def decode_created_payload(payload: str | bytes) -> PayloadDecodeResult:
    """Decode the packed Created payload (hex string or raw bytes)."""
    if isinstance(payload, str):
        try:
            data = hex_to_bytes(payload)
        except ValueError as e:
            logger.warning("Created payload is not valid hex: %r (%s)", payload, e)
            return PayloadDecodeFailed(f"invalid hex: {e}")
    else:
        data = bytes(payload)

    if len(data) < MIN_PAYLOAD_BYTES:
        logger.warning("Created payload too short (%d bytes): 0x%s", len(data), data.hex())
        return PayloadDecodeFailed(f"payload too short ({len(data)} bytes)")

    cur = _Cursor(data)
    try:
        title = cur.short_string("title")
        content_hash = cur.take(32, "content hash")
        multiple_applicants = cur.flag("multiple applicants")

        tag_count = cur.u8("tag count")
        tags = tuple(cur.short_string(f"tag[{i}]") for i in range(tag_count))

        token_address = cur.address("token address")
        amount = cur.uint(32, "amount")
        max_time = cur.uint(4, "max time")
        delivery_method = cur.short_string("delivery method")
        arbitrator = cur.address("arbitrator")
        whitelist_workers = cur.flag("whitelist workers")
    except _Truncated as e:
        logger.warning("Created payload truncated: %s; raw=0x%s", e, data.hex())
        return PayloadDecodeFailed(str(e))

    details = CreatedJobDetails(
        title=title,
        content_hash=content_hash,
        multiple_applicants=multiple_applicants,
        tags=tags,
        token_address=token_address,
        amount=amount,
        max_time=max_time,
        delivery_method=delivery_method,
        arbitrator=arbitrator,
        whitelist_workers=whitelist_workers,
    )
    logger.debug("Decoded Created payload: %s", details)
    return PayloadDecoded(details)


# ---------- inverse (fixtures, tooling) ----------


def _prefixed(value: bytes, field: str) -> bytes:
    if len(value) > 0xFF:
        raise ValueError(f"{field} is {len(value)} bytes; at most 255 fit a one-byte length prefix")
    return bytes([len(value)]) + value


def _address_bytes(addr: str, field: str) -> bytes:
    raw = hex_to_bytes(addr)
    if len(raw) != 20:
        raise ValueError(f"{field} must be 20 bytes, got {len(raw)}")
    return raw


def encode_created_payload(details: CreatedJobDetails) -> bytes:
    """Pack `details` into the Created payload layout (inverse of the decoder)."""
    if len(details.content_hash) != 32:
        raise ValueError("content hash must be 32 bytes")
    if len(details.tags) > 0xFF:
        raise ValueError(f"{len(details.tags)} tags exceed the one-byte tag count")
    if not 0 <= details.amount < 1 << 256:
        raise ValueError("amount must fit in uint256")
    if not 0 <= details.max_time < 1 << 32:
        raise ValueError("max time must fit in uint32")

    parts = [
        _prefixed(details.title.encode("latin-1"), "title"),
        details.content_hash,
        b"\x01" if details.multiple_applicants else b"\x00",
        bytes([len(details.tags)]),
        *(_prefixed(tag.encode("latin-1"), "tag") for tag in details.tags),
        _address_bytes(details.token_address, "token address"),
        details.amount.to_bytes(32, "big"),
        details.max_time.to_bytes(4, "big"),
        _prefixed(details.delivery_method.encode("latin-1"), "delivery method"),
        _address_bytes(details.arbitrator, "arbitrator"),
        b"\x01" if details.whitelist_workers else b"\x00",
    ]
    return b"".join(parts)
