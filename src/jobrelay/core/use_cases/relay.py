from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass

from jobrelay.constants import JOB_EVENT_T0
from jobrelay.core.errors import EnvelopeDecodeError
from jobrelay.core.interfaces import IEnvelopeDecoder, INotificationSink, ITokenMetadataResolver
from jobrelay.core.models import JobEvent, PayloadDecoded, PayloadDecodeFailed, RawLog
from jobrelay.decoding.payload import decode_created_payload
from jobrelay.decoding.utils import parse_topic_uint
from jobrelay.formatting import MessageFormatter

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class RelayStats:
    """
    Counters for one webhook batch.

    - received: logs seen
    - skipped: topic mismatch or unknown event type, nothing sent
    - notified: messages the sink accepted
    - degraded: fallback or "could not parse" messages produced
    - send_failures: messages the sink rejected
    - type_mismatches: envelopes where the decoders disagreed on the type
    """

    received: int = 0
    skipped: int = 0
    notified: int = 0
    degraded: int = 0
    send_failures: int = 0
    type_mismatches: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _job_id_or_zero(log: RawLog) -> int:
    """Best-effort job id for fallback messages."""
    if len(log.topics) < 2:
        return 0
    try:
        return parse_topic_uint(log.topics[1])
    except ValueError:
        return 0


# ---------------------------------------------------------------------------
# Relay
# ---------------------------------------------------------------------------


class JobEventRelay:
    """
    Decode JobEvent logs and relay one notification per log.

    Per log: Received -> TopicFiltered -> EnvelopeDecoded ->
    PayloadDecoded | PayloadDecodeFailed -> Formatted -> Sent.

    - A topic mismatch skips the log silently.
    - A failure at or after envelope decoding degrades to a fallback
      message; the rest of the batch still runs.
    - Nothing is retried.
    """

    def __init__(
        self,
        *,
        envelope_decoder: IEnvelopeDecoder,
        resolver: ITokenMetadataResolver,
        sink: INotificationSink,
        formatter: MessageFormatter,
        event_topic: str = JOB_EVENT_T0,
    ) -> None:
        self.envelope_decoder = envelope_decoder
        self.resolver = resolver
        self.sink = sink
        self.formatter = formatter
        self.event_topic = event_topic.lower()

    async def relay_logs(self, logs: Sequence[RawLog]) -> RelayStats:
        """Process `logs` sequentially, in order."""
        stats = RelayStats()
        logger.info("Processing %d logs", len(logs))
        for log in logs:
            await self.relay_log(log, stats)
        logger.info("Batch done: %s", stats.as_dict())
        return stats

    async def relay_log(self, log: RawLog, stats: RelayStats) -> None:
        stats.received += 1

        if log.topic0 is None or log.topic0.lower() != self.event_topic:
            logger.debug("Skipping non-JobEvent log topic0=%s tx=%s", log.topic0, log.tx_hash)
            stats.skipped += 1
            return

        try:
            event = self.envelope_decoder.decode(log)
        except EnvelopeDecodeError as e:
            logger.error("Envelope decode failed tx=%s data=%s: %s", log.tx_hash, log.data_hex, e)
            text = self.formatter.format_fallback(
                job_id=_job_id_or_zero(log),
                tx_hash=log.tx_hash,
                block_number=log.block_number,
                error=str(e),
            )
            stats.degraded += 1
            await self._deliver(text, stats)
            return

        if event.type_mismatch:
            stats.type_mismatches += 1

        known = event.known_type
        if known is None:
            logger.info("Skipping unknown event type %s for job %s", event.event_type, event.job_id)
            stats.skipped += 1
            return

        logger.info("Processing %s event for job %s (decoded by %s)", known.name, event.job_id, event.decoded_by)
        try:
            text, degraded = await self._render(event)
        except Exception as e:
            logger.exception("Formatting %s for job %s failed", known.name, event.job_id)
            text = self.formatter.format_fallback(
                job_id=event.job_id,
                tx_hash=event.tx_hash,
                block_number=event.block_number,
                error=str(e) or type(e).__name__,
                event_name=known.title,
            )
            degraded = True

        if degraded:
            stats.degraded += 1
        await self._deliver(text, stats)

    async def _render(self, event: JobEvent) -> tuple[str, bool]:
        """Return (message, degraded)."""
        if not event.is_created:
            return self.formatter.format_event(event), False

        match decode_created_payload(event.payload):
            case PayloadDecoded(details=details):
                token = await self.resolver.resolve(details.token_address)
                return self.formatter.format_event(event, details, token), False
            case PayloadDecodeFailed(reason=reason):
                logger.warning("Could not parse job details for job %s: %s", event.job_id, reason)
                return self.formatter.format_event(event, parse_error=reason), True
        raise RuntimeError("Unsupported payload decode result")

    async def _deliver(self, text: str, stats: RelayStats) -> None:
        logger.debug("Sending message:\n%s", text)
        if await self.sink.send(text):
            stats.notified += 1
        else:
            stats.send_failures += 1
