import pytest

from jobrelay.constants import DEFAULT_RPC_URLS
from jobrelay.core.config import RelayConfig
from jobrelay.core.errors import ConfigError

BASE_ENV = {"TELEGRAM_BOT_TOKEN": "123:abc", "TELEGRAM_CHAT_ID": "-100"}


def test_from_env_defaults() -> None:
    config = RelayConfig.from_env(BASE_ENV)

    assert config.telegram_bot_token == "123:abc"
    assert config.telegram_chat_id == "-100"
    assert config.rpc_urls == DEFAULT_RPC_URLS
    assert config.cross_check_envelope is False
    assert config.log_level == "INFO"


def test_from_env_reports_every_missing_variable() -> None:
    with pytest.raises(ConfigError, match="TELEGRAM_BOT_TOKEN, TELEGRAM_CHAT_ID"):
        RelayConfig.from_env({})


def test_empty_value_counts_as_missing() -> None:
    with pytest.raises(ConfigError, match="TELEGRAM_CHAT_ID"):
        RelayConfig.from_env({"TELEGRAM_BOT_TOKEN": "t", "TELEGRAM_CHAT_ID": ""})


def test_from_env_overrides() -> None:
    env = BASE_ENV | {
        "JOBRELAY_RPC_URLS": "https://a.test, https://b.test,,",
        "JOBRELAY_EXPLORER_URL": "https://sepolia.arbiscan.io/",
        "JOBRELAY_TELEGRAM_API_BASE": "http://localhost:8081/",
        "JOBRELAY_LOG_LEVEL": "debug",
        "JOBRELAY_CROSS_CHECK": "Yes",
        "JOBRELAY_RPC_TIMEOUT_S": "2.5",
        "JOBRELAY_TELEGRAM_TIMEOUT_S": "3",
    }

    config = RelayConfig.from_env(env)

    assert config.rpc_urls == ("https://a.test", "https://b.test")
    assert config.explorer_url == "https://sepolia.arbiscan.io"
    assert config.telegram_api_base == "http://localhost:8081"
    assert config.log_level == "DEBUG"
    assert config.cross_check_envelope is True
    assert config.rpc_timeout_s == 2.5
    assert config.telegram_timeout_s == 3.0


def test_bad_timeout_rejected() -> None:
    with pytest.raises(ConfigError, match="JOBRELAY_RPC_TIMEOUT_S"):
        RelayConfig.from_env(BASE_ENV | {"JOBRELAY_RPC_TIMEOUT_S": "soon"})


def test_direct_construction_validates() -> None:
    with pytest.raises(ConfigError):
        RelayConfig(telegram_bot_token="t", telegram_chat_id="c", rpc_urls=())

    with pytest.raises(ValueError):
        RelayConfig(telegram_bot_token="", telegram_chat_id="c")
