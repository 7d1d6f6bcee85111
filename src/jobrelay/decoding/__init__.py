"""JobEvent decoding.

This package provides:
- Envelope decoding strategies (ABI schema, manual offsets, fallback composite)
- The packed Created payload codec
- Bounded ABI word helpers
"""

from jobrelay.decoding.envelope import (
    AbiEnvelopeDecoder,
    FallbackEnvelopeDecoder,
    ManualEnvelopeDecoder,
    make_envelope_decoder,
)
from jobrelay.decoding.payload import decode_created_payload, encode_created_payload

__all__ = [
    "AbiEnvelopeDecoder",
    "FallbackEnvelopeDecoder",
    "ManualEnvelopeDecoder",
    "make_envelope_decoder",
    "decode_created_payload",
    "encode_created_payload",
]
