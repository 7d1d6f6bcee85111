"""Exception hierarchy shared across the relay."""

from __future__ import annotations


class RelayError(Exception):
    """Base class for every error raised by jobrelay."""


class ConfigError(RelayError, ValueError):
    """Required configuration is missing or malformed."""


class EnvelopeDecodeError(RelayError, ValueError):
    """A JobEvent log could not be decoded into an envelope."""


class RpcError(RelayError, RuntimeError):
    """A JSON-RPC endpoint returned an error or an unusable result."""
