"""Terminal rendering of suggestions with rich.

Suggestion descriptions use a small markup vocabulary (``<match>``,
``<dim>``, ``<url>``) with XML-escaped text. These helpers translate it
into rich markup and render tables and panels.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

import typer
from rich.console import Console
from rich.markup import escape as rich_escape
from rich.panel import Panel
from rich.table import Table

from anisuggest.core.escaping import unescape
from anisuggest.core.models import BestMatch, Suggestion
from anisuggest.shared.constants import Markup

_TAG_PATTERN = re.compile(r"</?(match|dim|url)>")

_RICH_STYLES = {
    "match": "bold yellow",
    "dim": "dim",
    "url": "cyan",
}


def markup_to_rich(description: str) -> str:
    """Translate description markup into rich console markup.

    Example:
        >>> markup_to_rich("<dim>9.1</dim>&#x20;<url><match>Oni</match>zuka</url>")
        '[dim]9.1[/dim] [cyan][bold yellow]Oni[/bold yellow]zuka[/cyan]'
    """
    parts: list[str] = []
    position = 0
    for match in _TAG_PATTERN.finditer(description):
        parts.append(_text_to_rich(description[position : match.start()]))
        tag = match.group(0)
        style = _RICH_STYLES[match.group(1)]
        parts.append(f"[/{style}]" if tag.startswith("</") else f"[{style}]")
        position = match.end()
    parts.append(_text_to_rich(description[position:]))
    return "".join(parts)


def _text_to_rich(text: str) -> str:
    return rich_escape(unescape(text.replace(Markup.SPACE_ENTITY, " ")))


def render_suggestions(
    console: Console,
    suggestions: Sequence[Suggestion],
    summary: str = "",
) -> None:
    """Print suggestions as a numbered table followed by the summary line."""
    if not suggestions:
        console.print("[yellow]No suggestions found[/yellow]")
    else:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Suggestion")
        table.add_column("URL", style="blue", overflow="fold")

        for index, suggestion in enumerate(suggestions, start=1):
            table.add_row(
                str(index),
                markup_to_rich(suggestion.description),
                rich_escape(suggestion.content),
            )
        console.print(table)

    if summary:
        console.print(markup_to_rich(summary))


class BestMatchPanel:
    """Best match presenter that renders a rich panel on demand."""

    def __init__(self) -> None:
        self.best: BestMatch | None = None

    def show_best(self, best: BestMatch) -> None:
        self.best = best

    def render(self, console: Console) -> None:
        if self.best is None:
            return
        lines = [f"[bold]{rich_escape(self.best.title)}[/bold]"]
        if self.best.text:
            lines.append(rich_escape(self.best.text))
        if self.best.note:
            lines.append(f"Score: {rich_escape(self.best.note)}")
        if self.best.image:
            lines.append(f"[blue]{rich_escape(self.best.image)}[/blue]")
        console.print(Panel("\n".join(lines), title="Best match", expand=False))


class BrowserNavigator:
    """Opens URLs in the default browser."""

    def open_url(self, url: str) -> None:
        typer.launch(url)


__all__ = [
    "BestMatchPanel",
    "BrowserNavigator",
    "markup_to_rich",
    "render_suggestions",
]
