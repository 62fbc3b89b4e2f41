"""
AniSuggest Typer CLI Application

This is the main Typer-based CLI application for AniSuggest. It exposes
the suggestion engine as a one-shot command, an interactive prompt and
cache maintenance commands.
"""

from __future__ import annotations

from typing import Annotated

import typer

from anisuggest.cli.cache_handler import cache_clear_command, cache_stats_command
from anisuggest.cli.common.context import CliContext, LogLevel, set_cli_context
from anisuggest.cli.common.options import (
    json_output_option,
    log_level_option,
    verbose_option,
    version_option,
)
from anisuggest.cli.interactive_handler import interactive_command
from anisuggest.cli.suggest_handler import suggest_command
from anisuggest.config import get_config
from anisuggest.shared.constants import CLICommands, CLIDefaults, CLIHelp
from anisuggest.shared.logging import setup_structured_logger

__version__ = CLIDefaults.VERSION


def main_callback(
    verbose: int,
    log_level: LogLevel,
    json_output: bool,
) -> None:
    """
    Process the common options.

    Called before any command is executed; sets up the global CLI context
    with the parsed options and configures logging from it and the
    logging settings.
    """
    context = CliContext(
        verbose=verbose,
        log_level=log_level,
        json_output=json_output,
    )
    set_cli_context(context)

    settings = get_config()
    log_settings = settings.logging
    setup_structured_logger(
        level="DEBUG" if settings.app.debug else context.get_effective_log_level(),
        log_file=log_settings.file,
        use_rich_console=log_settings.use_rich,
        console_output=log_settings.console_output,
        file_level=log_settings.level,
        max_bytes=log_settings.max_bytes,
        backup_count=log_settings.backup_count,
    )


app = typer.Typer(
    name=CLIHelp.APP_NAME,
    help=CLIHelp.APP_DESCRIPTION,
    rich_markup_mode=CLIHelp.APP_STYLE,
    no_args_is_help=True,
)

cache_app = typer.Typer(
    name=CLICommands.CACHE,
    help=CLIHelp.CACHE_HELP,
    no_args_is_help=True,
)
app.add_typer(cache_app, name=CLICommands.CACHE)


@app.callback()
def main(
    verbose: Annotated[int, verbose_option] = 0,
    log_level: Annotated[LogLevel, log_level_option] = LogLevel.WARNING,
    json_output: Annotated[bool, json_output_option] = False,
    version: Annotated[bool, version_option] = False,  # handled eagerly by version_callback
) -> None:
    """Main CLI callback with error handling."""
    try:
        main_callback(verbose, log_level, json_output)
    except Exception as e:
        from anisuggest.cli.common.error_handler import handle_cli_error

        exit_code = handle_cli_error(e, "main-callback", json_output=json_output)
        raise typer.Exit(exit_code) from e


@app.command(CLICommands.SUGGEST, help=CLIHelp.SUGGEST_HELP)
def suggest_command_typer(
    text: str = typer.Argument(
        ...,
        help="Query text, e.g. 'onizuka', 'bebop/c' or 'bebop!'",
    ),
    json_output: Annotated[bool, json_output_option] = False,
) -> None:
    """Print ranked suggestions for a query."""
    exit_code = suggest_command(text, json_output=json_output or None)
    if exit_code != CLIDefaults.EXIT_SUCCESS:
        raise typer.Exit(exit_code)


@app.command(CLICommands.INTERACTIVE, help=CLIHelp.INTERACTIVE_HELP)
def interactive_command_typer() -> None:
    """Type a query and get live suggestions."""
    exit_code = interactive_command()
    if exit_code != CLIDefaults.EXIT_SUCCESS:
        raise typer.Exit(exit_code)


@cache_app.command(CLICommands.CACHE_STATS)
def cache_stats_command_typer() -> None:
    """Show cache size and entry counts."""
    exit_code = cache_stats_command()
    if exit_code != CLIDefaults.EXIT_SUCCESS:
        raise typer.Exit(exit_code)


@cache_app.command(CLICommands.CACHE_CLEAR)
def cache_clear_command_typer() -> None:
    """Remove every cached suggestion."""
    exit_code = cache_clear_command()
    if exit_code != CLIDefaults.EXIT_SUCCESS:
        raise typer.Exit(exit_code)


if __name__ == "__main__":
    app()
