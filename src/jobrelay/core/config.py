from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from jobrelay.constants import (
    DEFAULT_EXPLORER_URL,
    DEFAULT_RPC_URLS,
    DEFAULT_TELEGRAM_API_BASE,
    JOB_EVENT_T0,
)
from jobrelay.core.errors import ConfigError

_REQUIRED_ENV = {
    "telegram_bot_token": "TELEGRAM_BOT_TOKEN",
    "telegram_chat_id": "TELEGRAM_CHAT_ID",
}

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class RelayConfig:
    """Process-wide configuration for the webhook relay, immutable after startup."""

    telegram_bot_token: str
    telegram_chat_id: str
    rpc_urls: tuple[str, ...] = DEFAULT_RPC_URLS
    rpc_timeout_s: float = 5.0
    telegram_timeout_s: float = 10.0
    telegram_api_base: str = DEFAULT_TELEGRAM_API_BASE
    explorer_url: str = DEFAULT_EXPLORER_URL
    event_topic: str = JOB_EVENT_T0
    cross_check_envelope: bool = False  # also run the manual decoder and flag disagreements
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        missing = [env for field, env in _REQUIRED_ENV.items() if not getattr(self, field)]
        if missing:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")
        if not self.rpc_urls:
            raise ConfigError("At least one RPC endpoint is required")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RelayConfig:
        """Build the config from environment variables, failing on missing required values."""
        env = os.environ if environ is None else environ

        missing = [name for name in _REQUIRED_ENV.values() if not env.get(name)]
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

        kwargs: dict[str, object] = {
            "telegram_bot_token": env["TELEGRAM_BOT_TOKEN"],
            "telegram_chat_id": env["TELEGRAM_CHAT_ID"],
        }
        if rpc_urls := env.get("JOBRELAY_RPC_URLS"):
            kwargs["rpc_urls"] = tuple(u.strip() for u in rpc_urls.split(",") if u.strip())
        if explorer := env.get("JOBRELAY_EXPLORER_URL"):
            kwargs["explorer_url"] = explorer.rstrip("/")
        if api_base := env.get("JOBRELAY_TELEGRAM_API_BASE"):
            kwargs["telegram_api_base"] = api_base.rstrip("/")
        if level := env.get("JOBRELAY_LOG_LEVEL"):
            kwargs["log_level"] = level.upper()
        if cross := env.get("JOBRELAY_CROSS_CHECK"):
            kwargs["cross_check_envelope"] = cross.strip().lower() in _TRUTHY

        for key, name in (
            ("rpc_timeout_s", "JOBRELAY_RPC_TIMEOUT_S"),
            ("telegram_timeout_s", "JOBRELAY_TELEGRAM_TIMEOUT_S"),
        ):
            raw = env.get(name)
            if raw:
                try:
                    kwargs[key] = float(raw)
                except ValueError as e:
                    raise ConfigError(f"{name} must be a number, got {raw!r}") from e

        return cls(**kwargs)  # type: ignore[arg-type]
