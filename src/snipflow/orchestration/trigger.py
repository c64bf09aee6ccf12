"""
Auto-trigger state machine.

Typing produces a stream of closely spaced events. A character insert arms
the orchestrator; a text change observed shortly afterwards starts an
evaluation which waits for a settle delay, queries the candidate source and
only then decides whether to expand. Evaluations superseded by newer input
are discarded at their resume point, so at most one attempt per settle
window ever applies a result.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from snipflow.domain.events import EditEvent, EditKind, EventBus
from snipflow.domain.protocols import CandidateSource, EditorHost, ExpansionEngine, RecencyTracker
from snipflow.domain.types import Candidate, MessageLevel, TriggerAttempt
from snipflow.logger import get_logger
from snipflow.utils import now_ms

from .state import InteractionState

logger = get_logger("orchestration.trigger")

AMBIGUOUS_MESSAGE = "Multiple snippets found for auto trigger, check the snipflow log"

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


class TriggerOrchestrator:
    """Decides, per edit event, whether a snippet fires without user action."""

    def __init__(
        self,
        source: CandidateSource,
        engine: ExpansionEngine,
        recency: RecencyTracker,
        editor: EditorHost,
        state: InteractionState,
        staleness_window_ms: float = 50.0,
        settle_delay_ms: float = 50.0,
        clock: Clock = now_ms,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._source = source
        self._engine = engine
        self._recency = recency
        self._editor = editor
        self._state = state
        self._staleness_window_ms = staleness_window_ms
        self._settle_delay_ms = settle_delay_ms
        self._clock = clock
        self._sleep = sleep
        self._tasks: set[asyncio.Task] = set()

    def attach(self, bus: EventBus) -> None:
        """Subscribe to edit events published by the host."""
        bus.subscribe(EditEvent, self.handle_edit)

    def detach(self, bus: EventBus) -> None:
        bus.unsubscribe(EditEvent, self.handle_edit)

    def handle_edit(self, event: EditEvent) -> None:
        """Synchronous event-bus handler."""
        if event.kind is EditKind.CHAR_INSERTED:
            self.on_char_inserted(event.timestamp_ms)
        else:
            self.on_text_changed(event.timestamp_ms)

    def on_char_inserted(self, timestamp_ms: float | None = None) -> None:
        ts = self._clock() if timestamp_ms is None else timestamp_ms
        self._state.arm_insert(ts)

    def on_text_changed(self, timestamp_ms: float | None = None) -> asyncio.Task | None:
        """Start an evaluation when the change closely follows an insert.

        Returns the scheduled task, or ``None`` when the change is unrelated
        to a recent insert.
        """
        ts = self._clock() if timestamp_ms is None else timestamp_ms
        arm = self._state.arm
        if arm is None or ts - arm.armed_at_ms > self._staleness_window_ms:
            if arm is not None:
                logger.debug(f"Dropping stale arm ({ts - arm.armed_at_ms:.0f}ms old)")
                self._state.drop_arm()
            self._state.note_change()
            return None

        attempt = self._state.begin_attempt(ts)
        task = asyncio.create_task(self._evaluate(attempt))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait for every in-flight evaluation to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def cancel_pending(self) -> None:
        for task in list(self._tasks):
            if not task.done():
                task.cancel()
        self._tasks.clear()

    async def _evaluate(self, attempt: TriggerAttempt) -> bool:
        """Run one evaluation; returns True when a snippet was expanded."""
        await self._sleep(self._settle_delay_ms / 1000.0)

        # Skip the query entirely when the attempt is already void.
        if not self._state.is_current(attempt):
            logger.debug(f"Discarding superseded attempt started at {attempt.started_at_ms:.0f}")
            return False

        candidates = await self._query()
        if not self._state.is_current(attempt):
            logger.debug(f"Discarding stale result of attempt started at {attempt.started_at_ms:.0f}")
            return False
        if not candidates:
            return False

        if len(candidates) > 1:
            prefixes = ", ".join(c.prefix for c in candidates)
            logger.warning(f"Multiple snippets found for auto trigger: {prefixes}")
            self._editor.show_message(AMBIGUOUS_MESSAGE, MessageLevel.WARNING)
            return False

        candidate = candidates[0]
        self._state.clear_placeholder_marker()
        try:
            await self._engine.insert_snippet(candidate)
            await self._recency.add(candidate.prefix)
        except Exception as e:
            logger.exception(f"Auto-triggered expansion of '{candidate.prefix}' failed: {e}")
            self._editor.show_message(f"Snippet expansion failed: {e}", MessageLevel.ERROR)
            return False
        logger.info(f"Auto-triggered snippet '{candidate.prefix}'")
        return True

    async def _query(self) -> list[Candidate]:
        try:
            context = await self._editor.get_context()
            return list(await self._source.query_trigger_candidates(context, True))
        except Exception as e:
            logger.exception(f"Candidate query failed during auto trigger: {e}")
            self._editor.show_message(f"Snippet query failed: {e}", MessageLevel.ERROR)
            return []
