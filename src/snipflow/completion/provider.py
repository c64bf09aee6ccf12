"""
Completion provider exposing snippets to the host's completion popup.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Sequence
from dataclasses import dataclass

from snipflow.domain.events import CompleteDone, EventBus
from snipflow.domain.protocols import ExpansionEngine, RecencyTracker
from snipflow.domain.snippet import Snippet
from snipflow.domain.types import Candidate, ContextSnapshot, Range, SnippetEdit
from snipflow.logger import get_logger
from snipflow.orchestration.state import InteractionState
from snipflow.sources.manager import ProviderManager

logger = get_logger("completion.provider")

_TRAILING_WORD = re.compile(r"[^\s]*$")


@dataclass(slots=True)
class CompletionItem:
    """One popup entry."""

    label: str
    detail: str
    candidate: Candidate
    source: str = "snippets"
    shortcut: str = "S"


def current_word(before_cursor: str) -> str:
    match = _TRAILING_WORD.search(before_cursor)
    return match.group(0) if match else ""


class SnippetCompletionProvider:
    """Lists snippets whose prefix starts with the word before the cursor."""

    name = "snippets"
    shortcut = "S"

    def __init__(
        self,
        manager: ProviderManager,
        engine: ExpansionEngine,
        recency: RecencyTracker,
        trigger_characters: Sequence[str] = (),
        priority: int = 90,
        state: InteractionState | None = None,
    ) -> None:
        self._manager = manager
        self._engine = engine
        self._recency = recency
        self._state = state
        self.trigger_characters = list(trigger_characters)
        self.priority = priority
        self._tasks: set[asyncio.Task] = set()

    def attach(self, bus: EventBus) -> None:
        bus.subscribe(CompleteDone, self.on_complete_done)

    def triggered_by(self, context: ContextSnapshot) -> bool:
        """True when the character just before the cursor is a trigger character."""
        before = context.before_cursor
        return bool(before) and before[-1] in self.trigger_characters

    def should_complete(self, context: ContextSnapshot) -> bool:
        return self.triggered_by(context) or bool(self._word(context.before_cursor))

    async def provide_completion_items(self, context: ContextSnapshot) -> list[CompletionItem]:
        word = self._word(context.before_cursor)
        snippets = [s for s in self._manager.get_snippets(context.filetype) if s.prefix.startswith(word)]
        recent = await self._recency.load()
        rank = {prefix: index for index, prefix in enumerate(recent)}
        # sorted() is stable: unranked items keep source order
        snippets = sorted(snippets, key=lambda s: rank.get(s.prefix, len(rank)))
        logger.debug(f"{len(snippets)} completion item(s) for {word!r}")
        return [self._to_item(snippet, context, word) for snippet in snippets]

    async def apply(self, item: CompletionItem) -> None:
        """Insert the item's snippet.

        The recency list is updated from the ``CompleteDone`` event the host
        publishes once the item is accepted.
        """
        if self._state is not None:
            self._state.clear_placeholder_marker()
        await self._engine.insert_snippet(item.candidate)

    def on_complete_done(self, event: CompleteDone) -> None:
        if event.source != self.name:
            return
        task = asyncio.create_task(self._recency.add(event.word))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _word(self, before_cursor: str) -> str:
        word = current_word(before_cursor)
        # Trigger characters end the previous word: "obj." completes from "".
        cut = max((word.rfind(ch) for ch in self.trigger_characters), default=-1)
        return word[cut + 1 :]

    def _to_item(self, snippet: Snippet, context: ContextSnapshot, word: str) -> CompletionItem:
        line = context.position.line
        end = context.position.character
        edit = SnippetEdit(
            range=Range.create(line, end - len(word), line, end),
            body=snippet.body,
            name=snippet.name,
            filetype=snippet.filetype,
        )
        candidate = Candidate(prefix=snippet.prefix, description=snippet.label, payload=edit)
        return CompletionItem(label=snippet.prefix, detail=snippet.label, candidate=candidate, source=self.name)
