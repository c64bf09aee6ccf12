"""
TextAreaHost - EditorHost implementation over a Textual TextArea.

A TextArea has no modal editing, so the visual mode is inferred from the
selection: a selection covering whole lines is linewise, any other
non-empty selection is charwise, and no selection means insert mode.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Sequence

from textual.widgets import TextArea

from snipflow.domain.events import CompleteDone, EventBus
from snipflow.domain.types import (
    ContextSnapshot,
    MessageLevel,
    Position,
    Range,
    TextEdit,
    VisualMode,
)
from snipflow.logger import get_logger
from snipflow.presentation.widgets import CompletionMenu, QuickPickScreen

if TYPE_CHECKING:
    from textual.app import App

    from snipflow.completion import SnippetCompletionProvider

logger = get_logger("tui.host")

_SEVERITY = {
    MessageLevel.INFO: "information",
    MessageLevel.WARNING: "warning",
    MessageLevel.ERROR: "error",
}


class TextAreaHost:
    """Editor primitives backed by one TextArea and a completion menu."""

    def __init__(
        self,
        app: "App",
        text_area: TextArea,
        menu: CompletionMenu,
        event_bus: EventBus,
        filetype: str = "text",
        buffer_id: int = 1,
    ) -> None:
        self.app = app
        self.text_area = text_area
        self.menu = menu
        self.event_bus = event_bus
        self.filetype = filetype
        self._buffer_id = buffer_id
        self.completion_provider: "SnippetCompletionProvider | None" = None

    # -- positions ----------------------------------------------------------

    def _line(self, row: int) -> str:
        return self.text_area.document.get_line(row)

    def _clamp(self, position: Position) -> tuple[int, int]:
        last_row = self.text_area.document.line_count - 1
        row = max(0, min(position.line, last_row))
        col = max(0, min(position.character, len(self._line(row))))
        return row, col

    def _ordered_selection(self) -> tuple[tuple[int, int], tuple[int, int]]:
        selection = self.text_area.selection
        return min(selection.start, selection.end), max(selection.start, selection.end)

    # -- queries ------------------------------------------------------------

    async def get_context(self) -> ContextSnapshot:
        row, col = self.text_area.cursor_location
        return ContextSnapshot(
            buffer_id=self._buffer_id,
            filetype=self.filetype,
            position=Position(row, col),
            line=self._line(row),
        )

    async def buffer_id(self) -> int:
        return self._buffer_id

    async def mode(self) -> str:
        start, end = self._ordered_selection()
        if start == end:
            return VisualMode.INSERT.value
        whole_lines = start[1] == 0 and (
            (end[1] == 0 and end[0] > start[0]) or end[1] == len(self._line(end[0]))
        )
        return VisualMode.LINEWISE.value if whole_lines else VisualMode.CHARWISE.value

    async def selection_marks(self) -> tuple[Position, Position]:
        start, end = self._ordered_selection()
        if end[1] > 0:
            last = (end[0], end[1] - 1)
        elif end[0] > start[0]:
            previous = end[0] - 1
            last = (previous, max(len(self._line(previous)) - 1, 0))
        else:
            last = end
        return Position(*start), Position(*last)

    async def get_line(self, line: int) -> str:
        return self._line(line)

    async def get_text(self, range: Range) -> str:
        return self.text_area.get_text_range(self._clamp(range.start), self._clamp(range.end))

    async def pum_visible(self) -> bool:
        return self.menu.visible

    # -- mutations ----------------------------------------------------------

    async def apply_edits(self, edits: Sequence[TextEdit]) -> None:
        # Bottom-up so earlier ranges stay valid.
        for edit in sorted(edits, key=lambda e: e.range.start, reverse=True):
            self.text_area.replace(edit.new_text, self._clamp(edit.range.start), self._clamp(edit.range.end))

    async def move_to(self, position: Position) -> None:
        self.text_area.cursor_location = self._clamp(position)

    async def feed_keys(self, keys: str) -> None:
        logger.debug(f"Ignoring mode switch keys {keys!r}: TextArea is modeless")

    async def set_filetype(self, buffer_id: int, filetype: str) -> None:
        if buffer_id == self._buffer_id:
            self.filetype = filetype

    # -- completion popup ---------------------------------------------------

    async def start_completion(self, source: str) -> None:
        if self.completion_provider is None:
            logger.debug(f"No completion provider for source '{source}'")
            return
        context = await self.get_context()
        if not self.completion_provider.should_complete(context):
            self.menu.hide()
            return
        try:
            items = await self.completion_provider.provide_completion_items(context)
        except Exception as e:
            logger.exception(f"Completion query failed: {e}")
            self.show_message(f"Snippet query failed: {e}", MessageLevel.ERROR)
            return
        self.menu.show_items(items)

    async def select_next_popup_entry(self) -> None:
        self.menu.select_next()

    async def confirm_popup_entry(self) -> None:
        item = self.menu.current_item()
        self.menu.hide()
        if item is None or self.completion_provider is None:
            return
        await self.completion_provider.apply(item)
        self.event_bus.publish(CompleteDone(word=item.label, source=item.source))

    # -- user interaction ---------------------------------------------------

    async def show_quickpick(self, items: Sequence[str], title: str) -> int:
        future: asyncio.Future[int] = asyncio.get_running_loop().create_future()

        def _on_dismiss(result: int | None) -> None:
            if not future.done():
                future.set_result(-1 if result is None else result)

        self.app.push_screen(QuickPickScreen(list(items), title), callback=_on_dismiss)
        return await future

    def show_message(self, message: str, level: MessageLevel = MessageLevel.INFO) -> None:
        self.app.notify(message, severity=_SEVERITY[level])
