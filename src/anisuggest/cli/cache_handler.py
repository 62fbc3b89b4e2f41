"""Cache command handlers."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict

import typer
from rich.console import Console
from rich.table import Table

from anisuggest.cli.common.context import get_cli_context
from anisuggest.cli.common.error_handler import handle_cli_error
from anisuggest.cli.json_formatter import format_json_output
from anisuggest.config import get_config
from anisuggest.config.models.settings import Settings
from anisuggest.services.cache_store import CacheStats, CacheStore
from anisuggest.services.kv_store import create_store
from anisuggest.shared.constants import CLICommands, CLIDefaults

logger = logging.getLogger(__name__)


def _open_cache(settings: Settings) -> CacheStore:
    return CacheStore(
        create_store(settings.cache),
        max_age=settings.cache.max_age,
        quota_bytes=settings.cache.quota_bytes,
        key_prefix=settings.cache.key_prefix,
    )


async def collect_stats(settings: Settings) -> CacheStats:
    cache = _open_cache(settings)
    try:
        return await cache.stats()
    finally:
        await cache.store.close()


async def clear_cache(settings: Settings) -> int:
    """Remove every cache entry. Returns the size freed in bytes."""
    cache = _open_cache(settings)
    try:
        size = await cache.size_in_bytes()
        await cache.remove_all()
        return size
    finally:
        await cache.store.close()


def cache_stats_command() -> int:
    command = f"{CLICommands.CACHE} {CLICommands.CACHE_STATS}"
    json_output = get_cli_context().is_json_output_enabled()
    try:
        settings = get_config()
        stats = asyncio.run(collect_stats(settings))
    except Exception as e:  # noqa: BLE001
        return handle_cli_error(e, command, json_output=json_output)

    if json_output:
        data = {"backend": settings.cache.backend, **asdict(stats)}
        typer.echo(format_json_output(success=True, command=command, data=data).decode("utf-8"))
        return CLIDefaults.EXIT_SUCCESS

    console = Console()
    console.print("[blue]Cache Statistics[/blue]")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Backend", settings.cache.backend)
    table.add_row("Results", str(stats.results))
    table.add_row("Aliases", str(stats.aliases))
    table.add_row("Expired Results", str(stats.expired))
    table.add_row("Size", f"{stats.size_bytes} bytes")
    table.add_row("Quota", f"{stats.quota_bytes} bytes")
    table.add_row("Usage", f"{stats.size_bytes / stats.quota_bytes:.1%}")

    console.print(table)
    return CLIDefaults.EXIT_SUCCESS


def cache_clear_command() -> int:
    command = f"{CLICommands.CACHE} {CLICommands.CACHE_CLEAR}"
    json_output = get_cli_context().is_json_output_enabled()
    try:
        freed = asyncio.run(clear_cache(get_config()))
    except Exception as e:  # noqa: BLE001
        return handle_cli_error(e, command, json_output=json_output)

    logger.info("Cleared suggestion cache (%d bytes)", freed)
    if json_output:
        output = format_json_output(success=True, command=command, data={"freed_bytes": freed})
        typer.echo(output.decode("utf-8"))
    else:
        Console().print(f"[green]Cache cleared successfully[/green] ({freed} bytes freed)")
    return CLIDefaults.EXIT_SUCCESS


__all__ = [
    "cache_clear_command",
    "cache_stats_command",
    "clear_cache",
    "collect_stats",
]
