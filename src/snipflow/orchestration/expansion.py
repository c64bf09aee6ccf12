"""
Manual expansion: ``expand`` and ``expand_or_jump``.

Manual invocation is an explicit user action, so candidates are queried
right away without any debounce.
"""

from __future__ import annotations

from snipflow.domain.protocols import CandidateSource, EditorHost, ExpansionEngine, RecencyTracker
from snipflow.domain.types import Candidate, ExpandOutcome, MessageLevel
from snipflow.logger import get_logger

from .fallback import FallbackDispatcher
from .state import InteractionState

logger = get_logger("orchestration.expansion")

PICKER_TITLE = "choose snippet:"


class ExpansionCoordinator:
    """Query, disambiguate, dispatch, or fall back."""

    def __init__(
        self,
        source: CandidateSource,
        engine: ExpansionEngine,
        recency: RecencyTracker,
        editor: EditorHost,
        state: InteractionState,
        fallback: FallbackDispatcher,
    ) -> None:
        self._source = source
        self._engine = engine
        self._recency = recency
        self._editor = editor
        self._state = state
        self._fallback = fallback

    async def expand(self) -> bool:
        """Expand the snippet before the cursor; True when one was inserted."""
        return await self.try_expand() is ExpandOutcome.EXPANDED

    async def try_expand(self) -> ExpandOutcome:
        """Like :meth:`expand` but tells a cancelled pick apart from no match."""
        candidates = await self._query()
        if not candidates:
            return ExpandOutcome.NO_MATCH

        if len(candidates) == 1:
            chosen = candidates[0]
        else:
            index = await self._editor.show_quickpick([c.description for c in candidates], PICKER_TITLE)
            if index is None or not 0 <= index < len(candidates):
                logger.debug("Snippet choice cancelled")
                return ExpandOutcome.CANCELLED
            chosen = candidates[index]

        await self._dispatch(chosen)
        return ExpandOutcome.EXPANDED

    async def expand_with_fallback(self) -> ExpandOutcome:
        """The *expand* command: fall back when nothing matched."""
        outcome = await self.try_expand()
        if outcome is ExpandOutcome.NO_MATCH:
            await self._fallback.dispatch()
        return outcome

    async def expand_or_jump(self) -> ExpandOutcome:
        """Expand, else jump to the next placeholder, else fall back."""
        outcome = await self.try_expand()
        if outcome is not ExpandOutcome.NO_MATCH:
            return outcome

        buffer_id = await self._editor.buffer_id()
        session = self._engine.get_active_session(buffer_id)
        if session is not None and session.is_active:
            await session.advance_to_next_placeholder()
            return outcome

        await self._fallback.dispatch()
        return outcome

    async def _dispatch(self, candidate: Candidate) -> None:
        self._state.clear_placeholder_marker()
        await self._engine.insert_snippet(candidate)
        # The engine has consumed the captured selection by now.
        self._state.clear_capture()
        await self._recency.add(candidate.prefix)
        logger.info(f"Expanded snippet '{candidate.prefix}'")

    async def _query(self) -> list[Candidate]:
        try:
            context = await self._editor.get_context()
            return list(await self._source.query_trigger_candidates(context, False))
        except Exception as e:
            logger.exception(f"Candidate query failed: {e}")
            self._editor.show_message(f"Snippet query failed: {e}", MessageLevel.ERROR)
            return []
