import json
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any, Literal

from eth_utils.abi import event_signature_to_log_topic
from pydantic import BaseModel


class AbiInput(BaseModel):
    name: str
    type: str
    indexed: bool = False
    internalType: str | None = None
    components: Sequence["AbiInput"] | None = None


AbiInput.model_rebuild()


class AbiEvent(BaseModel):
    anonymous: bool = False
    inputs: Sequence[AbiInput]
    name: str
    type: Literal["event"]


def get_canonical_type(abi_input: AbiInput) -> str:
    """Expand tuple types into their canonical `(t1,t2,...)` form, keeping array suffixes."""
    if not abi_input.type.startswith("tuple"):
        return abi_input.type
    inner = ",".join(get_canonical_type(c) for c in abi_input.components or ())
    return f"({inner}){abi_input.type[len('tuple'):]}"


def get_event_signature(event: AbiEvent):
    return f"{event.name}({','.join(get_canonical_type(event_input) for event_input in event.inputs)})"


def get_event_topic0(event: AbiEvent):
    return "0x" + event_signature_to_log_topic(get_event_signature(event)).hex()


def get_event_data_types(event: AbiEvent) -> list[str]:
    """Canonical types of the non-indexed inputs, in order, as eth_abi expects them."""
    return [get_canonical_type(event_input) for event_input in event.inputs if not event_input.indexed]


def get_event_indexed_inputs(event: AbiEvent) -> list[AbiInput]:
    return [event_input for event_input in event.inputs if event_input.indexed]


AbiJson = Iterable[dict[str, Any]]
AbiSpec = AbiJson | Path


def _load_abi(abi: AbiSpec) -> AbiJson:
    if isinstance(abi, Path):
        return json.loads(abi.read_text())
    return abi


def get_events_from_abi(abi: AbiSpec) -> dict[str, AbiEvent]:
    abi = _load_abi(abi)
    return {entry["name"]: AbiEvent.model_validate(entry) for entry in abi if entry["type"] == "event"}


JOB_EVENT_ABI: list[dict[str, Any]] = [
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "jobId", "type": "uint256"},
            {
                "indexed": False,
                "name": "eventData",
                "type": "tuple",
                "components": [
                    {"name": "type_", "type": "uint8"},
                    {"name": "address_", "type": "bytes"},
                    {"name": "data_", "type": "bytes"},
                    {"name": "timestamp_", "type": "uint32"},
                ],
            },
        ],
        "name": "JobEvent",
        "type": "event",
    }
]


def get_job_event() -> AbiEvent:
    return get_events_from_abi(JOB_EVENT_ABI)["JobEvent"]
