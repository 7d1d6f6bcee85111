"""Core data models for job event relaying.

This module defines:
- `RawLog`: one webhook log entry, minimally normalized.
- `JobEventType`: the job lifecycle event table with display titles.
- `JobEvent`: the decoded envelope common to every event kind.
- `CreatedJobDetails`: the packed payload carried by `Created` events.
- `TokenMetadata`: display symbol and decimal precision of a reward token.
- `PayloadDecoded` / `PayloadDecodeFailed`: explicit payload decode result.

Design notes
------------
- Everything here is transient: produced per log, consumed immediately.
- Addresses are lowercased 0x-hex strings; raw byte fields stay `bytes`.
- uint256 amounts are plain Python ints (arbitrary precision).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


# === Webhook record ===


@dataclass(slots=True, frozen=True)
class RawLog:
    """Log entry as received in the webhook body."""

    topics: tuple[str, ...]  # lowercased 0x...
    data_hex: str  # "0x..."
    tx_hash: str  # "unknown" when the webhook omits the transaction
    block_number: int

    @property
    def topic0(self) -> str | None:
        return self.topics[0] if self.topics else None


# === Envelope ===


class JobEventType(IntEnum):
    CREATED = 0
    TAKEN = 1
    PAID = 2
    UPDATED = 3
    SIGNED = 4
    COMPLETED = 5
    DELIVERED = 6
    CLOSED = 7
    REOPENED = 8
    RATED = 9
    REFUNDED = 10
    DISPUTED = 11
    ARBITRATED = 12
    ARBITRATION_REFUSED = 13
    WHITELISTED_WORKER_ADDED = 14
    WHITELISTED_WORKER_REMOVED = 15
    COLLATERAL_WITHDRAWN = 16
    WORKER_MESSAGE = 17
    OWNER_MESSAGE = 18

    @property
    def title(self) -> str:
        """Human-readable header used in notifications."""
        return _EVENT_TITLES[self]


_EVENT_TITLES: dict[JobEventType, str] = {
    JobEventType.CREATED: "Job Created",
    JobEventType.TAKEN: "Job Taken",
    JobEventType.PAID: "Job Paid",
    JobEventType.UPDATED: "Job Updated",
    JobEventType.SIGNED: "Job Signed",
    JobEventType.COMPLETED: "Job Completed",
    JobEventType.DELIVERED: "Job Delivered",
    JobEventType.CLOSED: "Job Closed",
    JobEventType.REOPENED: "Job Reopened",
    JobEventType.RATED: "Job Rated",
    JobEventType.REFUNDED: "Job Refunded",
    JobEventType.DISPUTED: "Job Disputed",
    JobEventType.ARBITRATED: "Job Arbitrated",
    JobEventType.ARBITRATION_REFUSED: "Arbitration Refused",
    JobEventType.WHITELISTED_WORKER_ADDED: "Worker Whitelisted",
    JobEventType.WHITELISTED_WORKER_REMOVED: "Worker Removed",
    JobEventType.COLLATERAL_WITHDRAWN: "Collateral Withdrawn",
    JobEventType.WORKER_MESSAGE: "Worker Message",
    JobEventType.OWNER_MESSAGE: "Owner Message",
}


@dataclass(slots=True, frozen=True)
class JobEvent:
    """Decoded JobEvent envelope for a single log."""

    job_id: int
    event_type: int  # raw uint8; may fall outside JobEventType
    actor_address: bytes
    payload: bytes
    timestamp: int  # uint32 unix seconds
    tx_hash: str
    block_number: int
    decoded_by: str = "abi"  # "abi" or "manual"
    type_mismatch: bool = False  # cross-check disagreed with the schema decode

    @property
    def known_type(self) -> JobEventType | None:
        try:
            return JobEventType(self.event_type)
        except ValueError:
            return None

    @property
    def is_created(self) -> bool:
        return self.event_type == JobEventType.CREATED

    @property
    def actor(self) -> str | None:
        """Last 20 bytes of the address field as 0x-hex, if present."""
        if len(self.actor_address) < 20:
            return None
        return "0x" + self.actor_address[-20:].hex()


# === Created payload ===


@dataclass(slots=True, frozen=True)
class CreatedJobDetails:
    """Fields packed into the `data_` bytes of a Created event."""

    title: str
    content_hash: bytes  # 32 bytes
    multiple_applicants: bool
    tags: tuple[str, ...]
    token_address: str  # lowercased 0x...
    amount: int  # uint256
    max_time: int  # seconds, uint32
    delivery_method: str
    arbitrator: str  # lowercased 0x...
    whitelist_workers: bool


@dataclass(slots=True, frozen=True)
class PayloadDecoded:
    details: CreatedJobDetails


@dataclass(slots=True, frozen=True)
class PayloadDecodeFailed:
    reason: str


PayloadDecodeResult = PayloadDecoded | PayloadDecodeFailed


# === Token metadata ===


@dataclass(slots=True, frozen=True)
class TokenMetadata:
    symbol: str
    decimals: int
