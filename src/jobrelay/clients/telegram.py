"""Telegram Bot API notification sink."""

from __future__ import annotations

import logging

import httpx

from jobrelay.constants import DEFAULT_TELEGRAM_API_BASE

logger = logging.getLogger(__name__)


class TelegramSink:
    """Send HTML-formatted messages to one chat through `sendMessage`.

    Failures (non-2xx, timeouts, transport errors) are logged and reported
    as `False`; nothing is raised to the caller.
    """

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        *,
        api_base: str = DEFAULT_TELEGRAM_API_BASE,
        timeout_s: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.chat_id = chat_id
        self.url = f"{api_base.rstrip('/')}/bot{bot_token}/sendMessage"
        self.timeout = httpx.Timeout(timeout_s)
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=self.timeout)

    async def send(self, text: str) -> bool:
        payload = {"chat_id": self.chat_id, "text": text, "parse_mode": "HTML"}
        try:
            r = await self.client.post(self.url, json=payload, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.error("Telegram send failed: %s: %s", type(e).__name__, e)
            return False

        if not r.is_success:
            logger.error("Telegram API error %s: %s", r.status_code, r.text)
            return False

        logger.info("Telegram message sent to chat %s", self.chat_id)
        return True

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
