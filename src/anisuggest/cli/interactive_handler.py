"""Interactive command handler.

A prompt_toolkit session acts as the input surface: every edit is fed to
the coordinator, suggestions appear in the completion menu, the bottom
toolbar shows the default description and the best match, and submitting
opens the resolved URL.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator, Iterable
from xml.parsers.expat import ExpatError

from prompt_toolkit import PromptSession
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import HTML, AnyFormattedText, FormattedText
from prompt_toolkit.styles import Style

from anisuggest.cli.common.error_handler import handle_cli_error
from anisuggest.cli.presenters import BrowserNavigator
from anisuggest.config import get_config
from anisuggest.config.models.settings import Settings
from anisuggest.core.escaping import escape, unescape
from anisuggest.core.models import BestMatch, Suggestion
from anisuggest.services.coordinator import SuggestCoordinator, create_coordinator
from anisuggest.services.protocols import Navigator
from anisuggest.shared.constants import CLICommands, CLIDefaults, Markup

logger = logging.getLogger(__name__)

PROMPT_MESSAGE = "anidb> "

PROMPT_STYLE = Style.from_dict(
    {
        "match": "bold ansiyellow",
        "dim": "#888888",
        "url": "ansicyan",
        "bottom-toolbar": "noreverse",
    }
)


def description_html(description: str) -> AnyFormattedText:
    """Wrap description markup for prompt_toolkit.

    Falls back to plain text if the markup is not well-formed.
    """
    try:
        return HTML(description)
    except ExpatError:
        plain = description.replace(Markup.SPACE_ENTITY, " ")
        for tag in ("match", "dim", "url"):
            plain = plain.replace(f"<{tag}>", "").replace(f"</{tag}>", "")
        return FormattedText([("", unescape(plain))])


class InputFeed:
    """Feeds every edit of the prompt buffer to the coordinator.

    Each edit starts ``on_input_changed`` as a background task. A newer
    edit aborts the session of an older one inside the coordinator, so a
    burst of keystrokes fetches once for the settled text and every typed
    prefix becomes an alias of that result.
    """

    def __init__(self, coordinator: SuggestCoordinator) -> None:
        self.coordinator = coordinator
        self._latest: tuple[str, asyncio.Task[list[Suggestion] | None]] | None = None
        self._pending: set[asyncio.Task[list[Suggestion] | None]] = set()
        self._offered: set[str] = set()

    def on_text_changed(self, buffer: Buffer) -> None:
        self.feed(buffer.text)

    def feed(self, text: str) -> None:
        """Start a suggestion session for ``text`` unless it is already the latest."""
        if self._latest is not None and self._latest[0] == text:
            return
        if text in self._offered:
            # Browsing the completion menu puts suggestion URLs into the buffer
            return
        task = asyncio.create_task(self.coordinator.on_input_changed(text))
        self._pending.add(task)
        task.add_done_callback(self._collect)
        self._latest = (text, task)

    def _collect(self, task: asyncio.Task[list[Suggestion] | None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning("Suggestion session failed: %s", error, exc_info=error)

    async def suggestions_for(self, text: str) -> list[Suggestion]:
        """Wait for the session of ``text``; empty if newer input superseded it."""
        latest = self._latest
        if latest is None or latest[0] != text:
            return []
        try:
            suggestions = await asyncio.shield(latest[1]) or []
        except Exception:  # noqa: BLE001
            # Logged by _collect
            return []
        self._offered = {suggestion.content for suggestion in suggestions}
        return suggestions

    async def aclose(self) -> None:
        """Cancel sessions still in flight and wait for them to finish."""
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)


class SuggestCompleter(Completer):
    """Completer showing the suggestions of the latest input session.

    Completion replaces the whole input with the suggestion's URL.
    """

    def __init__(self, feed: InputFeed) -> None:
        self.feed = feed

    def get_completions(
        self,
        document: Document,
        complete_event: CompleteEvent,
    ) -> Iterable[Completion]:
        # Suggestions need network access; only the async path produces them
        return []

    async def get_completions_async(
        self,
        document: Document,
        complete_event: CompleteEvent,
    ) -> AsyncGenerator[Completion, None]:
        text = document.text
        for suggestion in await self.feed.suggestions_for(text):
            yield Completion(
                suggestion.content,
                start_position=-len(text),
                display=description_html(suggestion.description),
            )


class ToolbarPresenter:
    """Keeps the best match for display in the bottom toolbar."""

    def __init__(self) -> None:
        self.best: BestMatch | None = None

    def show_best(self, best: BestMatch) -> None:
        self.best = best

    def toolbar_markup(self) -> str:
        if self.best is None:
            return ""
        parts = [f"{Markup.URL_OPEN}{escape(self.best.title)}{Markup.URL_CLOSE}"]
        details = ", ".join(value for value in (self.best.text, self.best.note) if value)
        if details:
            parts.append(f"{Markup.DIM_OPEN}{escape(details)}{Markup.DIM_CLOSE}")
        return "Best: " + " ".join(parts)


async def run_interactive(settings: Settings, navigator: Navigator | None = None) -> None:
    """Run the prompt loop until the user cancels with Ctrl-C or Ctrl-D."""
    presenter = ToolbarPresenter()
    async with create_coordinator(
        settings,
        presenter=presenter,
        navigator=navigator,
    ) as coordinator:

        def bottom_toolbar() -> AnyFormattedText:
            markup = coordinator.default_description
            best = presenter.toolbar_markup()
            if best and coordinator.last_result is not None:
                markup = f"{markup}\n{best}"
            return description_html(markup)

        feed = InputFeed(coordinator)
        session: PromptSession[str] = PromptSession(
            completer=SuggestCompleter(feed),
            complete_while_typing=True,
            style=PROMPT_STYLE,
            bottom_toolbar=bottom_toolbar,
        )
        session.default_buffer.on_text_changed += feed.on_text_changed

        try:
            while True:
                try:
                    text = await session.prompt_async(PROMPT_MESSAGE)
                except (KeyboardInterrupt, EOFError):
                    coordinator.on_input_cancelled()
                    break
                url = coordinator.on_input_entered(text)
                logger.info("Opening %s", url)
        finally:
            await feed.aclose()


def interactive_command() -> int:
    """Handle the interactive command.

    Returns:
        Exit code
    """
    try:
        asyncio.run(run_interactive(get_config(), BrowserNavigator()))
    except Exception as e:  # noqa: BLE001
        return handle_cli_error(e, CLICommands.INTERACTIVE)
    return CLIDefaults.EXIT_SUCCESS


__all__ = [
    "InputFeed",
    "SuggestCompleter",
    "ToolbarPresenter",
    "description_html",
    "interactive_command",
    "run_interactive",
]
