#!/usr/bin/env python3
"""
Albatross RPC CLI

Command-line access to an Albatross node.

Usage:
    albatross-rpc [--url URL] [--timeout SECONDS] block current
    albatross-rpc block latest [--full]
    albatross-rpc call <method> [<json_param>...] [--metadata]
    albatross-rpc subscribe blocks [--once] [--count N] [--retrieve full|partial|hash]

The node URL comes from --url, then ALBATROSS_RPC_NODE_URL / albatross.toml,
then http://127.0.0.1:8648.
"""

import asyncio
import dataclasses
import json
from typing import Any, List, Optional

import click

from .. import __version__
from ..client import Client
from ..config import ClientConfig, load_config
from ..exceptions import ConfigurationError, TransportNotReadyError
from ..logger import configure_logging
from ..rpc.messages import CallResult, SubscriptionError
from ..rpc.websocket import StreamOptions
from ..types import RetrieveType

DEFAULT_NODE_URL = "http://127.0.0.1:8648"


def _json_default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return str(value)


def echo_json(value: Any, pretty: bool = True) -> None:
    """Print a value as JSON."""
    click.echo(json.dumps(value, indent=2 if pretty else None, default=_json_default))


def parse_param(raw: str) -> Any:
    """JSON if it parses (numbers, booleans, null, lists), otherwise the raw string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def unwrap(result: CallResult) -> Any:
    if not result.ok:
        raise click.ClickException(f"RPC error {result.error}")
    return result.data


def run(coro) -> Any:
    """Run a coroutine, turning client errors into CLI errors."""
    try:
        return asyncio.run(coro)
    except (SubscriptionError, ConfigurationError, TransportNotReadyError) as e:
        raise click.ClickException(str(e))


def make_client(ctx: click.Context) -> Client:
    config: ClientConfig = ctx.obj["config"]
    try:
        return Client.from_config(config, **ctx.obj.get("client_kwargs", {}))
    except ConfigurationError as e:
        raise click.ClickException(str(e))


@click.group()
@click.version_option(version=__version__, prog_name="albatross-rpc")
@click.option("--url", "-u", default=None, help="Node RPC URL")
@click.option("--timeout", "-t", type=float, default=None,
              help="Request timeout in seconds (0 disables it)")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              default=None, help="Log level for client diagnostics")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Path to albatross.toml")
@click.pass_context
def cli(ctx: click.Context, url: Optional[str], timeout: Optional[float], log_level: Optional[str],
        config_path: Optional[str]):
    """Albatross RPC Command Line Interface

    Query and stream an Albatross node over JSON-RPC.
    """
    ctx.ensure_object(dict)
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    if url:
        config.node.url = url
    if not config.node.url:
        config.node.url = DEFAULT_NODE_URL
    if timeout is not None:
        config.http.timeout = timeout if timeout > 0 else None
    if log_level:
        config.node.log_level = log_level.upper()

    configure_logging(log_level=config.node.log_level)
    ctx.obj["config"] = config


# -- block ------------------------------------------------------------------

@cli.group("block")
def block():
    """Block queries."""
    pass


@block.command("current")
@click.pass_context
def block_current(ctx: click.Context):
    """Print the current block number."""

    async def _run():
        async with make_client(ctx) as client:
            return unwrap(await client.blockchain.get_block_number())

    echo_json(run(_run()))


@block.command("latest")
@click.option("--full", is_flag=True, help="Include the block body")
@click.pass_context
def block_latest(ctx: click.Context, full: bool):
    """Print the current head block."""

    async def _run():
        async with make_client(ctx) as client:
            return unwrap(await client.blockchain.get_latest_block(include_body=full))

    echo_json(run(_run()))


# -- call -------------------------------------------------------------------

@cli.command("call")
@click.argument("method")
@click.argument("params", nargs=-1)
@click.option("--metadata", is_flag=True, help="Also print the chain state the answer refers to")
@click.pass_context
def call_cmd(ctx: click.Context, method: str, params: List[str], metadata: bool):
    """Call any node method.

    Each PARAM is parsed as JSON when possible, otherwise passed as a string.

    Examples:

        albatross-rpc call getBlockByNumber 100 false

        albatross-rpc call getAccountByAddress "NQ07 0000 ..." --metadata
    """

    async def _run():
        async with make_client(ctx) as client:
            return await client.call(method, [parse_param(p) for p in params], with_metadata=metadata)

    result = run(_run())
    data = unwrap(result)
    if metadata:
        echo_json({"data": data, "metadata": result.metadata})
    else:
        echo_json(data)


# -- subscribe --------------------------------------------------------------

@cli.group("subscribe")
def subscribe():
    """Streams."""
    pass


@subscribe.command("blocks")
@click.option("--once", is_flag=True, help="Stop after the first block")
@click.option("--count", "-n", type=click.IntRange(min=1), default=None, help="Stop after N blocks")
@click.option("--retrieve", type=click.Choice([r.value for r in RetrieveType]), default=RetrieveType.FULL.value,
              help="full, partial (header only) or hash")
@click.pass_context
def subscribe_blocks(ctx: click.Context, once: bool, count: Optional[int], retrieve: str):
    """Print new head blocks as JSON lines."""
    if once:
        count = 1
    config: ClientConfig = ctx.obj["config"]

    async def _run():
        async with make_client(ctx) as client:
            queue: asyncio.Queue = asyncio.Queue()
            options = StreamOptions(once=count == 1, timeout=config.websocket.subscribe_timeout)
            streams = client.blockchain_streams
            if RetrieveType(retrieve) is RetrieveType.HASH:
                subscription = await streams.subscribe_for_block_hashes(options, queue.put_nowait)
            else:
                subscription = await streams.subscribe_for_blocks(RetrieveType(retrieve), options, queue.put_nowait)

            received = 0
            try:
                while count is None or received < count:
                    message = await queue.get()
                    if not message.ok:
                        raise click.ClickException(f"Stream error {message.error}")
                    echo_json(message.data, pretty=False)
                    received += 1
            finally:
                subscription.close()

    run(_run())


def main():
    """Entry point for the albatross-rpc console script."""
    cli()


if __name__ == "__main__":
    main()
