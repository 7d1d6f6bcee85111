"""JobEvent envelope decoders.

Two interchangeable strategies decode the same log:
- `AbiEnvelopeDecoder` uses the typed ABI schema through `eth_abi`.
- `ManualEnvelopeDecoder` walks the ABI head/tail offsets by hand.

`FallbackEnvelopeDecoder` prefers the schema decoder and only consults the
manual one when the schema path fails, or, with `cross_check`, to flag a
disagreement. The schema-decoded event type always wins.
"""

from __future__ import annotations

import dataclasses
import logging

import eth_abi
from eth_abi.exceptions import DecodingError

from jobrelay.abi_events import AbiEvent, get_event_data_types, get_job_event
from jobrelay.constants import JOB_EVENT_T0
from jobrelay.core.errors import EnvelopeDecodeError
from jobrelay.core.interfaces import IEnvelopeDecoder
from jobrelay.core.models import JobEvent, RawLog
from jobrelay.decoding.utils import WORD, hex_to_bytes, parse_topic_uint, read_dynamic_bytes, read_uint

logger = logging.getLogger(__name__)


# ---------- shared helpers ----------


def _job_id_from_topics(log: RawLog, event_topic: str) -> int:
    """Validate topic0 and parse the indexed jobId from topic1."""
    if log.topic0 is None or log.topic0.lower() != event_topic.lower():
        raise EnvelopeDecodeError(f"topic0 {log.topic0!r} is not the JobEvent topic")
    if len(log.topics) < 2:
        raise EnvelopeDecodeError("missing indexed jobId topic")
    try:
        return parse_topic_uint(log.topics[1])
    except ValueError as e:
        raise EnvelopeDecodeError(f"invalid jobId topic {log.topics[1]!r}") from e


def _data_bytes(log: RawLog) -> bytes:
    try:
        return hex_to_bytes(log.data_hex)
    except ValueError as e:
        raise EnvelopeDecodeError(f"log data is not valid hex: {e}") from e


# ---------- schema-based ----------


class AbiEnvelopeDecoder:
    """Decode the envelope with the JobEvent ABI (`(uint8,bytes,bytes,uint32)` tuple)."""

    name = "abi"

    def __init__(self, event_topic: str = JOB_EVENT_T0, event: AbiEvent | None = None) -> None:
        self.event_topic = event_topic.lower()
        self._data_types = get_event_data_types(event or get_job_event())

    def decode(self, log: RawLog) -> JobEvent:
        job_id = _job_id_from_topics(log, self.event_topic)
        data = _data_bytes(log)
        try:
            (event_data,) = eth_abi.decode(self._data_types, data)
        except (DecodingError, ValueError, OverflowError) as e:
            raise EnvelopeDecodeError(f"ABI decode failed: {e}") from e

        type_, address_, data_, timestamp_ = event_data
        return JobEvent(
            job_id=job_id,
            event_type=int(type_),
            actor_address=bytes(address_),
            payload=bytes(data_),
            timestamp=int(timestamp_),
            tx_hash=log.tx_hash,
            block_number=log.block_number,
            decoded_by=self.name,
        )


# ---------- manual offset slicing ----------


class ManualEnvelopeDecoder:
    """Decode the envelope by following ABI offsets word by word.

    Layout of the data section (byte offsets, `T` = tuple offset from word 0):

        0        offset of the tuple (T)
        T        type_ (uint8 in a full word)
        T+32     offset of address_, relative to T
        T+64     offset of data_, relative to T
        T+96     timestamp_ (uint32 in a full word)
        ...      each bytes value: length word, then content
    """

    name = "manual"

    def __init__(self, event_topic: str = JOB_EVENT_T0) -> None:
        self.event_topic = event_topic.lower()

    def decode(self, log: RawLog) -> JobEvent:
        job_id = _job_id_from_topics(log, self.event_topic)
        data = _data_bytes(log)
        try:
            base = read_uint(data, 0)
            type_ = read_uint(data, base)
            address_off = read_uint(data, base + WORD)
            data_off = read_uint(data, base + 2 * WORD)
            timestamp_ = read_uint(data, base + 3 * WORD)
            if type_ > 0xFF:
                raise ValueError(f"type_ {type_} does not fit uint8")
            if timestamp_ > 0xFFFFFFFF:
                raise ValueError(f"timestamp_ {timestamp_} does not fit uint32")
            address_ = read_dynamic_bytes(data, base + address_off)
            data_ = read_dynamic_bytes(data, base + data_off)
        except ValueError as e:
            raise EnvelopeDecodeError(f"manual decode failed: {e}") from e

        return JobEvent(
            job_id=job_id,
            event_type=type_,
            actor_address=address_,
            payload=data_,
            timestamp=timestamp_,
            tx_hash=log.tx_hash,
            block_number=log.block_number,
            decoded_by=self.name,
        )


# ---------- composite ----------


class FallbackEnvelopeDecoder:
    """Prefer `primary`; use `fallback` only when `primary` fails.

    With `cross_check=True` the fallback also runs on success and any
    event-type disagreement is logged and flagged on the primary result,
    never used to replace it.
    """

    name = "fallback"

    def __init__(
        self,
        primary: IEnvelopeDecoder,
        fallback: IEnvelopeDecoder,
        *,
        cross_check: bool = False,
    ) -> None:
        self.primary = primary
        self.fallback = fallback
        self.cross_check = cross_check

    def decode(self, log: RawLog) -> JobEvent:
        try:
            event = self.primary.decode(log)
        except EnvelopeDecodeError as primary_err:
            logger.warning(
                "%s envelope decode failed (%s); falling back to %s decoder; tx=%s data=%s",
                self.primary.name, primary_err, self.fallback.name, log.tx_hash, log.data_hex,
            )
            try:
                return self.fallback.decode(log)
            except EnvelopeDecodeError as fallback_err:
                raise EnvelopeDecodeError(
                    f"{self.primary.name}: {primary_err}; {self.fallback.name}: {fallback_err}"
                ) from fallback_err

        if self.cross_check:
            event = self._cross_check(log, event)
        return event

    def _cross_check(self, log: RawLog, event: JobEvent) -> JobEvent:
        try:
            other = self.fallback.decode(log)
        except EnvelopeDecodeError as e:
            logger.warning("cross-check: %s decoder failed where %s succeeded: %s; tx=%s",
                           self.fallback.name, self.primary.name, e, log.tx_hash)
            return event

        if other.event_type != event.event_type:
            logger.warning(
                "cross-check: event type disagreement for job %s (tx=%s): %s=%s %s=%s; keeping %s",
                event.job_id, log.tx_hash,
                self.primary.name, event.event_type, self.fallback.name, other.event_type,
                self.primary.name,
            )
            return dataclasses.replace(event, type_mismatch=True)
        return event


def make_envelope_decoder(event_topic: str = JOB_EVENT_T0, *, cross_check: bool = False) -> FallbackEnvelopeDecoder:
    """Default strategy: ABI schema first, manual slicing as backstop."""
    return FallbackEnvelopeDecoder(
        AbiEnvelopeDecoder(event_topic),
        ManualEnvelopeDecoder(event_topic),
        cross_check=cross_check,
    )
