"""Collaborator protocols for the suggestion coordinator.

The coordinator only talks to its surroundings through these small
interfaces, so an input surface (terminal prompt, test double, ...) can be
swapped without touching the engine.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from anisuggest.core.models import BestMatch, SearchRecord, Suggestion


@runtime_checkable
class SuggestCallback(Protocol):
    """Receives the suggestions computed for one input event."""

    def __call__(self, suggestions: Sequence[Suggestion]) -> None: ...


@runtime_checkable
class BestMatchPresenter(Protocol):
    """Renders supplementary media for the top-ranked record."""

    def show_best(self, best: BestMatch) -> None: ...


@runtime_checkable
class Navigator(Protocol):
    """Opens a URL picked or submitted by the user."""

    def open_url(self, url: str) -> None: ...


@runtime_checkable
class SearchClient(Protocol):
    """Remote search endpoint."""

    async def search(self, category: str, text: str) -> list[SearchRecord]: ...


__all__ = [
    "BestMatchPresenter",
    "Navigator",
    "SearchClient",
    "SuggestCallback",
]
