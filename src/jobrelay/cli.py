import asyncio

import click
from rich.console import Console
from rich.table import Table

from jobrelay.constants import DEFAULT_RPC_URLS
from jobrelay.core.errors import ConfigError
from jobrelay.core.models import PayloadDecoded, PayloadDecodeFailed
from jobrelay.decoding.payload import decode_created_payload
from jobrelay.formatting import format_duration, split_tags

console = Console()


@click.group()
def cli() -> None:
    """jobrelay: relay on-chain job marketplace events to Telegram."""


@cli.command("serve")
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", type=int, default=8000, show_default=True)
def serve_cmd(host: str, port: int) -> None:
    """Run the webhook server (configuration comes from the environment)."""
    import uvicorn

    from jobrelay.api.app import create_app
    from jobrelay.core.config import RelayConfig

    try:
        config = RelayConfig.from_env()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    uvicorn.run(create_app(config), host=host, port=port)


@cli.command("decode-payload")
@click.argument("payload_hex")
def decode_payload_cmd(payload_hex: str) -> None:
    """Decode a packed Created payload (0x-hex) and print its fields."""
    match decode_created_payload(payload_hex):
        case PayloadDecodeFailed(reason=reason):
            raise click.ClickException(f"could not parse job details: {reason}")
        case PayloadDecoded(details=d):
            categories, custom = split_tags(d.tags)
            table = Table(title="Created job", show_header=False)
            table.add_column("field", style="bold")
            table.add_column("value")
            table.add_row("title", d.title)
            table.add_row("content hash", "0x" + d.content_hash.hex())
            table.add_row("multiple applicants", "yes" if d.multiple_applicants else "no")
            table.add_row("categories", ", ".join(categories) or "-")
            table.add_row("tags", ", ".join(custom) or "-")
            table.add_row("token", d.token_address)
            table.add_row("amount (raw)", str(d.amount))
            table.add_row("max time", f"{d.max_time} ({format_duration(d.max_time)})")
            table.add_row("delivery", d.delivery_method or "-")
            table.add_row("arbitrator", d.arbitrator)
            table.add_row("whitelist workers", "yes" if d.whitelist_workers else "no")
            console.print(table)


@cli.command("resolve-token")
@click.argument("address")
@click.option("--rpc", "rpc_urls", multiple=True, help="RPC endpoint URL; repeat to add fallbacks")
@click.option("--timeout", "timeout_s", type=float, default=5.0, show_default=True, help="Per-call timeout (s)")
def resolve_token_cmd(address: str, rpc_urls: tuple[str, ...], timeout_s: float) -> None:
    """Resolve a token address to symbol and decimals."""
    from jobrelay.clients.rpc import RPC
    from jobrelay.tokens import TokenMetadataResolver

    async def run() -> None:
        rpc = RPC(rpc_urls or DEFAULT_RPC_URLS, timeout_s=timeout_s)
        try:
            meta = await TokenMetadataResolver(rpc).resolve(address)
        finally:
            await rpc.aclose()
        console.print(f"[bold]{meta.symbol}[/] decimals={meta.decimals}")

    asyncio.run(run())
