"""Logging setup for the relay process."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Per-request transport chatter; our own clients log the outcome
_NOISY_LOGGERS = ("httpx", "httpcore", "hpack")


def configure_logging(level: str | int = logging.INFO, *, rich: bool = False) -> None:
    """Configure the root logger once; later calls only adjust the level."""
    root = logging.getLogger()
    root.setLevel(level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if root.handlers:
        return

    if rich:
        logging.basicConfig(
            level=level,
            format="%(name)s %(message)s",
            handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        )
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT)
