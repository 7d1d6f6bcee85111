"""Decoding utilities: hex normalization, bounded ABI word access, topic parsers."""

from __future__ import annotations

WORD = 32


def strip_0x(h: str) -> str:
    return h[2:] if h[:2].lower() == "0x" else h


def hex_to_bytes(h: str) -> bytes:
    """Decode a 0x-prefixed (or bare) hex string; raises ValueError on bad input."""
    return bytes.fromhex(strip_0x(h.strip()))


def read_word(data: bytes, offset: int) -> bytes:
    """Return the 32-byte ABI word starting at byte `offset`.

    Unlike a zero-padding reader this refuses to read past the end of `data`.
    """
    end = offset + WORD
    if offset < 0 or end > len(data):
        raise ValueError(f"word at offset {offset} exceeds data length {len(data)}")
    return data[offset:end]


def read_uint(data: bytes, offset: int) -> int:
    """Parse the ABI word at `offset` as an unsigned big-endian integer."""
    return int.from_bytes(read_word(data, offset), "big", signed=False)


def read_dynamic_bytes(data: bytes, offset: int) -> bytes:
    """Read an ABI `bytes` value (length word + content) starting at `offset`."""
    length = read_uint(data, offset)
    start = offset + WORD
    end = start + length
    if end > len(data):
        raise ValueError(f"bytes at offset {offset} declares {length} bytes, only {len(data) - start} available")
    return data[start:end]


def parse_topic_uint(topic_hex: str) -> int:
    """Parse an indexed uint topic."""
    return int(strip_0x(topic_hex), 16)
