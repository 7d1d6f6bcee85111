from __future__ import annotations

from .constants import JOB_EVENT_T0
from .core.config import RelayConfig
from .core.models import CreatedJobDetails, JobEvent, JobEventType, TokenMetadata
from .decoding.envelope import make_envelope_decoder
from .decoding.payload import decode_created_payload, encode_created_payload

__all__ = [
    "JOB_EVENT_T0",
    "RelayConfig",
    "CreatedJobDetails",
    "JobEvent",
    "JobEventType",
    "TokenMetadata",
    "make_envelope_decoder",
    "decode_created_payload",
    "encode_created_payload",
]
