"""Core data models, configuration and interfaces.

This package provides:
- Data models (RawLog, JobEvent, CreatedJobDetails, TokenMetadata)
- Configuration (RelayConfig)
- Error hierarchy
"""

from jobrelay.core.config import RelayConfig
from jobrelay.core.errors import ConfigError, EnvelopeDecodeError, RelayError, RpcError
from jobrelay.core.models import (
    CreatedJobDetails,
    JobEvent,
    JobEventType,
    PayloadDecoded,
    PayloadDecodeFailed,
    PayloadDecodeResult,
    RawLog,
    TokenMetadata,
)

__all__ = [
    "RelayConfig",
    "ConfigError",
    "EnvelopeDecodeError",
    "RelayError",
    "RpcError",
    "CreatedJobDetails",
    "JobEvent",
    "JobEventType",
    "PayloadDecoded",
    "PayloadDecodeFailed",
    "PayloadDecodeResult",
    "RawLog",
    "TokenMetadata",
]
