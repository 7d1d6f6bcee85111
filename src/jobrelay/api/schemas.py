"""Inbound webhook body (block-stream style `event.data.block.logs`)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from jobrelay.core.models import RawLog


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore")


class WebhookTransaction(_Lenient):
    hash: str | None = None


class WebhookLog(_Lenient):
    topics: list[str]
    data: str
    transaction: WebhookTransaction | None = None


class WebhookBlock(_Lenient):
    number: int | None = None
    logs: list[WebhookLog] | None = None


class WebhookEventData(_Lenient):
    block: WebhookBlock | None = None


class WebhookEvent(_Lenient):
    data: WebhookEventData | None = None


class WebhookBody(_Lenient):
    event: WebhookEvent | None = None

    @property
    def block(self) -> WebhookBlock | None:
        if self.event is None or self.event.data is None:
            return None
        return self.event.data.block

    def raw_logs(self) -> list[RawLog]:
        """Map the body's logs to domain records; empty when the body carries none."""
        block = self.block
        if block is None or not block.logs:
            return []
        block_number = block.number or 0
        return [
            RawLog(
                topics=tuple(t.lower() for t in log.topics),
                data_hex=log.data,
                tx_hash=(log.transaction.hash if log.transaction and log.transaction.hash else "unknown"),
                block_number=block_number,
            )
            for log in block.logs
        ]
