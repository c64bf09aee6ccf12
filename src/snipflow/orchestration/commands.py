"""
The interactive commands exposed to the host editor.

Each command is a zero-argument coroutine. Failures are contained here:
they are logged and notified, and never propagate into the host's event
loop.
"""

from __future__ import annotations

from typing import Awaitable, Callable

from snipflow.domain.protocols import EditorHost
from snipflow.domain.types import MessageLevel
from snipflow.logger import get_logger

from .capture import VisualCapture
from .expansion import ExpansionCoordinator

logger = get_logger("orchestration.commands")

Command = Callable[[], Awaitable[None]]


class SnippetCommands:
    """Binds ``expand``, ``expand-jump`` and ``select`` to their handlers."""

    EXPAND = "snippets-expand"
    EXPAND_JUMP = "snippets-expand-jump"
    SELECT = "snippets-select"

    def __init__(self, coordinator: ExpansionCoordinator, capture: VisualCapture, editor: EditorHost) -> None:
        self._coordinator = coordinator
        self._capture = capture
        self._editor = editor

    async def expand(self) -> None:
        await self._run(self.EXPAND, self._coordinator.expand_with_fallback)

    async def expand_or_jump(self) -> None:
        await self._run(self.EXPAND_JUMP, self._coordinator.expand_or_jump)

    async def capture_selection(self) -> None:
        await self._run(self.SELECT, self._capture.capture_selection)

    def keymaps(self) -> dict[str, Command]:
        """Command name to handler, for registration with the host."""
        return {
            self.EXPAND: self.expand,
            self.EXPAND_JUMP: self.expand_or_jump,
            self.SELECT: self.capture_selection,
        }

    async def _run(self, name: str, handler: Callable[[], Awaitable[object]]) -> None:
        try:
            await handler()
        except Exception as e:
            logger.exception(f"Command {name} failed: {e}")
            self._editor.show_message(f"{name} failed: {e}", MessageLevel.ERROR)
