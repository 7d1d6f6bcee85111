"""Telegram-HTML rendering of decoded job events.

Field order is fixed: header, job id, transaction link, Created details
(title, reward, categories, custom tags, max time, multiple applicants,
delivery), then actor, event time, block and processing time.
"""

from __future__ import annotations

import html
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, localcontext

from jobrelay.constants import DEFAULT_EXPLORER_URL, MECE_TAGS
from jobrelay.core.models import CreatedJobDetails, JobEvent, TokenMetadata

MAX_FRACTION_DIGITS = 8

# (name, seconds), largest first; a month is 30 days, a year 365
_DURATION_UNITS: tuple[tuple[str, int], ...] = (
    ("year", 31_536_000),
    ("month", 2_592_000),
    ("week", 604_800),
    ("day", 86_400),
    ("hour", 3_600),
    ("minute", 60),
)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count > 1 else ''}"


def format_duration(seconds: int) -> str:
    """Render `seconds` as its single largest whole unit, e.g. 90000 -> "1 day"."""
    if not seconds:
        return "Unknown"
    for name, size in _DURATION_UNITS:
        count = seconds // size
        if count >= 1:
            return _plural(count, name)
    return _plural(seconds, "second")


def format_amount(raw: int, decimals: int) -> str:
    """Scale a raw token amount by `decimals`, group thousands, keep at most 8 fraction digits."""
    if raw == 0:
        return "0"
    places = min(decimals, MAX_FRACTION_DIGITS)
    with localcontext() as ctx:
        ctx.prec = 120  # uint256 has 78 digits
        value = Decimal(raw).scaleb(-decimals)
        value = value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    s = f"{value:,.{places}f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s


def split_tags(
    tags: Iterable[str],
    vocabulary: Mapping[str, str] = MECE_TAGS,
) -> tuple[list[str], list[str]]:
    """Split tags into (category labels, custom tags), preserving order."""
    categories: list[str] = []
    custom: list[str] = []
    for tag in tags:
        if tag in vocabulary:
            categories.append(vocabulary[tag])
        else:
            custom.append(tag)
    return categories, custom


def shorten_address(address: str) -> str:
    return f"{address[:6]}...{address[-4:]}"


def format_timestamp(ts: int | datetime) -> str:
    dt = ts if isinstance(ts, datetime) else datetime.fromtimestamp(ts, tz=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageFormatter:
    """Build notification texts; `clock` supplies the processing timestamp."""

    def __init__(
        self,
        explorer_url: str = DEFAULT_EXPLORER_URL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.explorer_url = explorer_url.rstrip("/")
        self.clock = clock

    def _link(self, kind: str, target: str, label: str) -> str:
        return f'<a href="{self.explorer_url}/{kind}/{html.escape(target)}">{html.escape(label)}</a>'

    def _head(self, name: str, job_id: int, tx_hash: str) -> list[str]:
        return [
            f"🔔 <b>{html.escape(name)}</b>",
            f"📋 Job ID: {job_id}",
            f"🔗 {self._link('tx', tx_hash, 'View Transaction')}",
        ]

    def _created_lines(self, details: CreatedJobDetails, token: TokenMetadata | None) -> list[str]:
        lines: list[str] = []
        if details.title:
            lines.append(f"📝 <b>{html.escape(details.title)}</b>")
        if token is not None:
            amount = format_amount(details.amount, token.decimals)
            lines.append(f"💰 Reward: {amount} {self._link('token', details.token_address, token.symbol)}")
        categories, custom = split_tags(details.tags)
        if categories:
            lines.append(f"📂 Category: {html.escape(', '.join(categories))}")
        if custom:
            lines.append(f"🏷️ Tags: {html.escape(', '.join(custom))}")
        lines.append(f"⏳ Max Time: {format_duration(details.max_time)}")
        lines.append(f"👥 Multiple Applicants: {'Yes' if details.multiple_applicants else 'No'}")
        if details.delivery_method:
            lines.append(f"📦 Delivery: {html.escape(details.delivery_method)}")
        return lines

    def format_event(
        self,
        event: JobEvent,
        details: CreatedJobDetails | None = None,
        token: TokenMetadata | None = None,
        *,
        parse_error: str | None = None,
    ) -> str:
        known = event.known_type
        name = known.title if known is not None else f"Unknown({event.event_type})"
        lines = self._head(name, event.job_id, event.tx_hash)

        if details is not None:
            lines.extend(self._created_lines(details, token))
        elif parse_error is not None:
            lines.append(f"⚠️ Could not parse job details: {html.escape(parse_error)}")

        if (actor := event.actor) is not None:
            lines.append(f"👤 Address: {self._link('address', actor, shorten_address(actor))}")
        if event.timestamp:
            lines.append(f"⏰ Event Time: {format_timestamp(event.timestamp)}")
        lines.append(f"📦 Block: {event.block_number}")
        lines.append(f"🕐 Processed: {format_timestamp(self.clock())}")
        return "\n".join(lines)

    def format_fallback(
        self,
        *,
        job_id: int,
        tx_hash: str,
        block_number: int,
        error: str,
        event_name: str = "Parse Error",
    ) -> str:
        """Minimal message used when a log could not be fully processed."""
        lines = self._head(event_name, job_id, tx_hash)
        lines.append(f"📦 Block: {block_number}")
        lines.append(f"⏰ {format_timestamp(self.clock())}")
        lines.append(f"⚠️ Error: {html.escape(error)}")
        return "\n".join(lines)
