"""FastAPI application receiving JobEvent webhooks.

`create_app` reads configuration up front (fail fast) and wires the relay
in the lifespan hook around one shared `httpx.AsyncClient`. Tests inject a
ready relay instead.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from jobrelay.api.schemas import WebhookBody
from jobrelay.clients.rpc import RPC
from jobrelay.clients.telegram import TelegramSink
from jobrelay.core.config import RelayConfig
from jobrelay.core.use_cases.relay import JobEventRelay
from jobrelay.decoding.envelope import make_envelope_decoder
from jobrelay.formatting import MessageFormatter
from jobrelay.logging_config import configure_logging
from jobrelay.tokens import TokenMetadataResolver

logger = logging.getLogger(__name__)


def build_relay(config: RelayConfig, client: httpx.AsyncClient) -> JobEventRelay:
    """Wire the production relay from `config` around a shared HTTP client."""
    rpc = RPC(config.rpc_urls, timeout_s=config.rpc_timeout_s, client=client)
    sink = TelegramSink(
        config.telegram_bot_token,
        config.telegram_chat_id,
        api_base=config.telegram_api_base,
        timeout_s=config.telegram_timeout_s,
        client=client,
    )
    return JobEventRelay(
        envelope_decoder=make_envelope_decoder(config.event_topic, cross_check=config.cross_check_envelope),
        resolver=TokenMetadataResolver(rpc),
        sink=sink,
        formatter=MessageFormatter(config.explorer_url),
        event_topic=config.event_topic,
    )


def create_app(config: RelayConfig | None = None, *, relay: JobEventRelay | None = None) -> FastAPI:
    config = config or RelayConfig.from_env()
    configure_logging(config.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if relay is not None:
            app.state.relay = relay
            yield
            return
        async with httpx.AsyncClient() as client:
            app.state.relay = build_relay(config, client)
            yield

    app = FastAPI(title="jobrelay", lifespan=lifespan)
    app.state.config = config
    if relay is not None:
        app.state.relay = relay

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        started_at = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started_at) * 1000.0
        logger.info(
            "http request method=%s path=%s status=%s duration_ms=%.2f",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            return PlainTextResponse("Method not allowed", status_code=405)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    async def handle_webhook(request: Request) -> PlainTextResponse:
        try:
            raw = await request.json()
            logger.debug("Received webhook: %s", raw)
            body = WebhookBody.model_validate(raw)
            logs = body.raw_logs()
            if not logs:
                logger.info("No logs found in webhook")
                return PlainTextResponse("No logs found", status_code=200)

            await request.app.state.relay.relay_logs(logs)
            return PlainTextResponse("OK", status_code=200)
        except Exception as e:
            logger.exception("Error processing webhook")
            return PlainTextResponse(f"Error: {e}", status_code=500)

    app.add_api_route("/", handle_webhook, methods=["POST"])
    app.add_api_route("/webhook", handle_webhook, methods=["POST"])

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app
