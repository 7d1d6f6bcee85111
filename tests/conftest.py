from datetime import datetime, timezone

import eth_abi
import pytest

from jobrelay.constants import JOB_EVENT_T0
from jobrelay.core.models import CreatedJobDetails, RawLog, TokenMetadata
from jobrelay.formatting import MessageFormatter

USDC = "0xaf88d065e77c8cc2239327c5edb3a432268e5831"
ACTOR = "0xd8da6bf26964af9d7eed9e03e53415d37aa96045"
ARBITRATOR = "0x1234567890123456789012345678901234567890"
FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def job_topic(job_id: int) -> str:
    return "0x" + job_id.to_bytes(32, "big").hex()


def encode_envelope(type_: int, address_: bytes, data_: bytes, timestamp_: int) -> str:
    return "0x" + eth_abi.encode(["(uint8,bytes,bytes,uint32)"], [(type_, address_, data_, timestamp_)]).hex()


def actor_field(address: str = ACTOR) -> bytes:
    """address_ as the contract emits it: abi.encode(address), 32 bytes."""
    return bytes(12) + bytes.fromhex(address[2:])


@pytest.fixture
def details() -> CreatedJobDetails:
    return CreatedJobDetails(
        title="Build a logo",
        content_hash=bytes(range(32)),
        multiple_applicants=True,
        tags=("DV", "DA", "logo", "logo"),
        token_address=USDC,
        amount=1_500_000_000,
        max_time=90_000,
        delivery_method="ipfs",
        arbitrator=ARBITRATOR,
        whitelist_workers=False,
    )


@pytest.fixture
def make_log():
    def _make(
        *,
        type_: int = 0,
        payload: bytes = b"",
        job_id: int = 42,
        timestamp: int = 1_700_000_000,
        address: bytes | None = None,
        topic0: str = JOB_EVENT_T0,
        data_hex: str | None = None,
        tx_hash: str = "0xabc",
        block_number: int = 123,
    ) -> RawLog:
        if data_hex is None:
            data_hex = encode_envelope(type_, actor_field() if address is None else address, payload, timestamp)
        return RawLog(
            topics=(topic0, job_topic(job_id)),
            data_hex=data_hex,
            tx_hash=tx_hash,
            block_number=block_number,
        )

    return _make


@pytest.fixture
def formatter() -> MessageFormatter:
    return MessageFormatter("https://arbiscan.io", clock=lambda: FIXED_NOW)


class RecordingSink:
    def __init__(self, ok: bool = True) -> None:
        self.ok = ok
        self.messages: list[str] = []

    async def send(self, text: str) -> bool:
        self.messages.append(text)
        return self.ok


class StaticResolver:
    def __init__(self, meta: TokenMetadata | None = None, error: Exception | None = None) -> None:
        self.meta = meta or TokenMetadata("USDC", 6)
        self.error = error
        self.calls: list[str] = []

    async def resolve(self, address: str) -> TokenMetadata:
        self.calls.append(address)
        if self.error is not None:
            raise self.error
        return self.meta


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def resolver() -> StaticResolver:
    return StaticResolver()
