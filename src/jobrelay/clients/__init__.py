"""Outbound HTTP clients: JSON-RPC `eth_call` and Telegram."""

from jobrelay.clients.rpc import RPC
from jobrelay.clients.telegram import TelegramSink

__all__ = ["RPC", "TelegramSink"]
