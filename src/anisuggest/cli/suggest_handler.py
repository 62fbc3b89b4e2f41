"""Suggest command handler.

Runs a single query through the coordinator and prints the ranked
suggestions, the summary line and the best match.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import typer
from rich.console import Console

from anisuggest.cli.common.context import get_cli_context
from anisuggest.cli.common.error_handler import handle_cli_error
from anisuggest.cli.json_formatter import format_json_output
from anisuggest.cli.presenters import BestMatchPanel, render_suggestions
from anisuggest.config import get_config
from anisuggest.config.models.settings import Settings
from anisuggest.core.models import CookedData, Suggestion
from anisuggest.services.coordinator import create_coordinator
from anisuggest.shared.constants import CLICommands, CLIDefaults

logger = logging.getLogger(__name__)


@dataclass
class SuggestOutcome:
    """What one suggest run produced."""

    query: str
    suggestions: list[Suggestion]
    description: str
    result: CookedData | None


async def run_suggest(
    settings: Settings,
    text: str,
    presenter: BestMatchPanel | None = None,
) -> SuggestOutcome:
    """Feed ``text`` to a fresh coordinator as a single input event."""
    async with create_coordinator(settings, presenter=presenter) as coordinator:
        suggestions = await coordinator.on_input_changed(text)
        return SuggestOutcome(
            query=text,
            suggestions=suggestions or [],
            description=coordinator.default_description,
            result=coordinator.last_result,
        )


def suggest_command(text: str, *, json_output: bool | None = None) -> int:
    """Handle the suggest command.

    Args:
        text: Raw query, optionally ending in ``/<letter>`` and/or ``!``
        json_output: Overrides the global ``--json`` flag when given

    Returns:
        Exit code
    """
    if json_output is None:
        json_output = get_cli_context().is_json_output_enabled()

    try:
        settings = get_config()
        presenter = BestMatchPanel()
        outcome = asyncio.run(run_suggest(settings, text, presenter))
    except Exception as e:  # noqa: BLE001
        return handle_cli_error(e, CLICommands.SUGGEST, json_output=json_output)

    if json_output:
        output = format_json_output(
            success=True,
            command=CLICommands.SUGGEST,
            data={
                "query": outcome.query,
                "description": outcome.description,
                "result": outcome.result,
            },
        )
        typer.echo(output.decode("utf-8"))
        return CLIDefaults.EXIT_SUCCESS

    console = Console()
    render_suggestions(console, outcome.suggestions, outcome.description)
    presenter.render(console)
    logger.debug("Printed %d suggestion(s) for %r", len(outcome.suggestions), text)
    return CLIDefaults.EXIT_SUCCESS


__all__ = [
    "SuggestOutcome",
    "run_suggest",
    "suggest_command",
]
