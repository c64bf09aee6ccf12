"""Protocols describing the collaborators of the interaction layer.

The candidate sources, the expansion engine, the recency list and the host
editor are all external to the orchestration code; these structural types
describe exactly what it needs from each of them.
"""

from typing import Protocol, Sequence

from snipflow.domain.types import (
    Candidate,
    ContextSnapshot,
    MessageLevel,
    Position,
    Range,
    TextEdit,
)

__all__ = [
    "CandidateSource",
    "RecencyTracker",
    "SnippetSession",
    "ExpansionEngine",
    "EditorHost",
]


class CandidateSource(Protocol):
    """Something that can tell which snippets match before the cursor."""

    async def query_trigger_candidates(
        self, context: ContextSnapshot, auto_trigger: bool = False
    ) -> list[Candidate]:
        """Return matching candidates in source order.

        Must not mutate the buffer and must be cheap enough to call on every
        settled keystroke.
        """
        ...


class RecencyTracker(Protocol):
    """Append-only recency list keyed by trigger prefix."""

    async def add(self, item: str) -> None: ...

    async def load(self) -> list[str]: ...


class SnippetSession(Protocol):
    """An active placeholder-navigation session."""

    @property
    def is_active(self) -> bool: ...

    async def advance_to_next_placeholder(self) -> None: ...


class ExpansionEngine(Protocol):
    """Inserts snippets and owns placeholder navigation."""

    async def insert_snippet(self, candidate: Candidate) -> None: ...

    def get_active_session(self, buffer_id: int) -> SnippetSession | None: ...


class EditorHost(Protocol):
    """Editor primitives used by the commands."""

    async def get_context(self) -> ContextSnapshot: ...

    async def buffer_id(self) -> int: ...

    async def mode(self) -> str: ...

    async def selection_marks(self) -> tuple[Position, Position]:
        """Return the inclusive start/end of the last visual selection."""
        ...

    async def get_line(self, line: int) -> str: ...

    async def get_text(self, range: Range) -> str: ...

    async def apply_edits(self, edits: Sequence[TextEdit]) -> None: ...

    async def move_to(self, position: Position) -> None: ...

    async def feed_keys(self, keys: str) -> None: ...

    async def pum_visible(self) -> bool: ...

    async def start_completion(self, source: str) -> None: ...

    async def select_next_popup_entry(self) -> None: ...

    async def confirm_popup_entry(self) -> None: ...

    async def show_quickpick(self, items: Sequence[str], title: str) -> int:
        """Let the user choose one item; ``-1`` means cancelled."""
        ...

    def show_message(self, message: str, level: MessageLevel = MessageLevel.INFO) -> None: ...

    async def set_filetype(self, buffer_id: int, filetype: str) -> None: ...
