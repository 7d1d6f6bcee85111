import pytest
from fastapi.testclient import TestClient

from jobrelay.api.app import create_app
from jobrelay.api.schemas import WebhookBody
from jobrelay.constants import JOB_EVENT_T0
from jobrelay.core.config import RelayConfig
from jobrelay.core.use_cases.relay import JobEventRelay
from jobrelay.decoding.envelope import make_envelope_decoder

from conftest import actor_field, encode_envelope, job_topic


def _webhook(*logs: dict, number: int | None = 123) -> dict:
    return {"event": {"data": {"block": {"number": number, "logs": list(logs)}}}}


def _log(type_: int = 1, *, job_id: int = 42, topic0: str = JOB_EVENT_T0, tx_hash: str | None = "0xabc") -> dict:
    entry = {
        "topics": [topic0.upper().replace("0X", "0x"), job_topic(job_id)],
        "data": encode_envelope(type_, actor_field(), b"", 1_700_000_000),
    }
    if tx_hash is not None:
        entry["transaction"] = {"hash": tx_hash}
    return entry


@pytest.fixture
def client(sink, resolver, formatter) -> TestClient:
    relay = JobEventRelay(
        envelope_decoder=make_envelope_decoder(),
        resolver=resolver,
        sink=sink,
        formatter=formatter,
    )
    config = RelayConfig(telegram_bot_token="t", telegram_chat_id="c")
    return TestClient(create_app(config, relay=relay))


@pytest.mark.parametrize("path", ["/", "/webhook"])
def test_non_post_rejected(client, path) -> None:
    r = client.get(path)

    assert r.status_code == 405
    assert r.text == "Method not allowed"


def test_healthz(client) -> None:
    assert client.get("/healthz").json() == {"status": "ok"}


@pytest.mark.parametrize("body", [{}, {"event": {}}, {"event": {"data": {"block": {"logs": []}}}}])
def test_no_logs(client, sink, body) -> None:
    r = client.post("/", json=body)

    assert r.status_code == 200
    assert r.text == "No logs found"
    assert sink.messages == []


def test_mixed_logs_send_one_message(client, sink) -> None:
    body = _webhook(_log(type_=4, job_id=9), _log(topic0="0x" + "11" * 32))

    r = client.post("/webhook", json=body)

    assert r.status_code == 200
    assert r.text == "OK"
    (text,) = sink.messages
    assert text.startswith("🔔 <b>Job Signed</b>\n📋 Job ID: 9\n")
    assert "📦 Block: 123" in text


def test_malformed_log_is_server_error(client, sink) -> None:
    r = client.post("/", json=_webhook({"topics": [JOB_EVENT_T0]}))

    assert r.status_code == 500
    assert r.text.startswith("Error: ")
    assert sink.messages == []


def test_invalid_json_is_server_error(client) -> None:
    r = client.post("/", content=b"{not json", headers={"content-type": "application/json"})

    assert r.status_code == 500
    assert r.text.startswith("Error: ")


def test_body_mapping_defaults() -> None:
    body = WebhookBody.model_validate(_webhook(_log(tx_hash=None), number=None))

    (log,) = body.raw_logs()

    assert log.tx_hash == "unknown"
    assert log.block_number == 0
    assert log.topic0 == JOB_EVENT_T0
