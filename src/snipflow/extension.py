"""
SnippetExtension - wires sources, recency list and commands to a host.

This is the composition root: given a configuration, an editor host, an
expansion engine and the host's event bus it builds every component and
subscribes the event handlers.
"""

from __future__ import annotations

import asyncio

from snipflow.completion import SnippetCompletionProvider
from snipflow.config import SnippetsConfig
from snipflow.domain.events import DocumentOpened, EditEvent, EditKind, EventBus
from snipflow.domain.protocols import EditorHost, ExpansionEngine, RecencyTracker
from snipflow.infrastructure import MruList
from snipflow.logger import get_logger
from snipflow.orchestration import (
    ExpansionCoordinator,
    FallbackDispatcher,
    InteractionState,
    SnippetCommands,
    TriggerOrchestrator,
    VisualCapture,
)
from snipflow.sources import PlainTextSource, ProviderManager

logger = get_logger("extension")

MRU_NAME = "snippets-mru"


class SnippetExtension:
    """Owns every snippet component for one editor host."""

    def __init__(
        self,
        config: SnippetsConfig,
        editor: EditorHost,
        engine: ExpansionEngine,
        event_bus: EventBus,
        *,
        manager: ProviderManager | None = None,
        recency: RecencyTracker | None = None,
        state: InteractionState | None = None,
    ) -> None:
        self.config = config
        self.editor = editor
        self.engine = engine
        self.event_bus = event_bus
        self.state = state or InteractionState()
        self.recency = recency or MruList(MRU_NAME, base_dir=config.mru_dir, max_items=config.mru_max_items)

        if manager is None:
            manager = ProviderManager()
            if config.load_from_extensions:
                manager.register(
                    PlainTextSource(directories=config.snippet_dirs, extends=config.extends),
                    "snippets",
                )
        self.manager = manager

        self.fallback = FallbackDispatcher(editor, mode=config.expand_fallback_with_pum)
        self.coordinator = ExpansionCoordinator(
            self.manager, engine, self.recency, editor, self.state, self.fallback
        )
        self.capture = VisualCapture(editor, self.state)
        self.commands = SnippetCommands(self.coordinator, self.capture, editor)
        self.trigger = TriggerOrchestrator(
            self.manager,
            engine,
            self.recency,
            editor,
            self.state,
            staleness_window_ms=config.staleness_window_ms,
            settle_delay_ms=config.settle_delay_ms,
        )
        self.completion: SnippetCompletionProvider | None = None
        self._tasks: set[asyncio.Task] = set()
        self._typed = False

    async def activate(self) -> None:
        """Subscribe handlers and load the snippet sources."""
        if self.config.auto_trigger:
            self.trigger.attach(self.event_bus)
        self.event_bus.subscribe(DocumentOpened, self._on_document_opened)

        failed = await self.manager.init(self.editor)
        if failed:
            logger.warning(f"Snippet providers failed to load: {', '.join(failed)}")

        if self.manager.has_provider:
            self.completion = SnippetCompletionProvider(
                self.manager,
                self.engine,
                self.recency,
                trigger_characters=self.config.trigger_characters,
                priority=self.config.priority,
                state=self.state,
            )
            self.completion.attach(self.event_bus)
            if self.completion.trigger_characters:
                self.event_bus.subscribe(EditEvent, self._on_edit)
        logger.info(f"Snippets activated with providers: {self.manager.provider_names}")

    def deactivate(self) -> None:
        self.trigger.detach(self.event_bus)
        self.trigger.cancel_pending()
        self.event_bus.unsubscribe(DocumentOpened, self._on_document_opened)
        self.event_bus.unsubscribe(EditEvent, self._on_edit)

    def _on_document_opened(self, event: DocumentOpened) -> None:
        if not event.uri.endswith(".snippets"):
            return
        self._spawn(self.editor.set_filetype(event.buffer_id, "snippets"))

    def _on_edit(self, event: EditEvent) -> None:
        """Open the completion popup when a typed trigger character lands."""
        if event.kind is EditKind.CHAR_INSERTED:
            self._typed = True
            return
        if self._typed:
            self._typed = False
            self._spawn(self._complete_after_trigger_character())

    async def _complete_after_trigger_character(self) -> None:
        if self.completion is None:
            return
        try:
            context = await self.editor.get_context()
            if self.completion.triggered_by(context):
                await self.editor.start_completion(self.completion.name)
        except Exception as e:
            logger.exception(f"Opening snippet completion failed: {e}")

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
