"""
Visual capture: turn the current visual selection into seed text.

The selected text is removed from the buffer and stored in the shared
capture slot, where the next snippet expansion picks it up (``$VISUAL``).
"""

from __future__ import annotations

from snipflow.domain.protocols import EditorHost
from snipflow.domain.types import (
    SUPPORTED_VISUAL_MODES,
    MessageLevel,
    Position,
    Range,
    SelectionCapture,
    TextEdit,
    VisualMode,
)
from snipflow.errors import UnsupportedModeError
from snipflow.logger import get_logger
from snipflow.utils import leading_indent, split_lines

from .state import InteractionState

logger = get_logger("orchestration.capture")

ESCAPE = "\x1b"
UNSUPPORTED_MESSAGE = "selection mode not supported"


def strip_common_indent(text: str, indent: str) -> str:
    """Strip ``indent`` from every line of ``text`` that starts with it."""
    if not indent:
        return "\n".join(split_lines(text))
    lines = [line[len(indent):] if line.startswith(indent) else line for line in split_lines(text)]
    return "\n".join(lines)


class VisualCapture:
    """Implements the *capture-selection* command."""

    def __init__(self, editor: EditorHost, state: InteractionState) -> None:
        self._editor = editor
        self._state = state

    async def capture_selection(self) -> SelectionCapture | None:
        """Capture the visual selection; None when the mode is unsupported."""
        raw_mode = await self._editor.mode()
        try:
            mode = self._check_mode(raw_mode)
        except UnsupportedModeError as e:
            logger.warning(str(e))
            self._editor.show_message(UNSUPPORTED_MESSAGE, MessageLevel.WARNING)
            return None

        await self._editor.feed_keys(ESCAPE)
        start, end = await self._editor.selection_marks()
        start, end = min(start, end), max(start, end)
        # Marks are inclusive; extend to cover the last character.
        end = Position(end.line, end.character + 1)

        if mode is VisualMode.BLOCKWISE:
            capture, edits = await self._capture_block(start, end)
        else:
            selection = Range(start, end)
            text = await self._editor.get_text(selection)
            if mode is VisualMode.CHARWISE:
                capture = SelectionCapture(range=selection, text=text)
            else:
                capture = await self._capture_lines(selection, text)
            edits = [TextEdit(capture.range, "")]

        await self._editor.feed_keys("i")
        await self._editor.apply_edits(edits)
        self._state.store_capture(capture)
        await self._editor.move_to(capture.range.start)
        logger.info(f"Captured {len(capture.text)} chars in mode {mode.name.lower()}")
        return capture

    def _check_mode(self, raw_mode: str) -> VisualMode:
        mode = VisualMode.parse(raw_mode)
        if mode not in SUPPORTED_VISUAL_MODES:
            raise UnsupportedModeError(raw_mode)
        return mode

    async def _capture_lines(self, selection: Range, text: str) -> SelectionCapture:
        # Keep the first line's indent in the buffer as the snippet's base indent.
        first_line = await self._editor.get_line(selection.start.line)
        indent = leading_indent(first_line)
        start_char = max(selection.start.character, len(indent))
        if start_char > selection.start.character:
            skipped = first_line[selection.start.character:start_char]
            text = text[len(skipped):] if text.startswith(skipped) else text
        remove = Range(Position(selection.start.line, start_char), selection.end)
        return SelectionCapture(range=remove, text=strip_common_indent(text, indent), indent=indent)

    async def _capture_block(self, start: Position, end: Position) -> tuple[SelectionCapture, list[TextEdit]]:
        left = min(start.character, end.character - 1)
        right = max(start.character, end.character - 1) + 1
        pieces: list[str] = []
        edits: list[TextEdit] = []
        for line_no in range(start.line, end.line + 1):
            line = await self._editor.get_line(line_no)
            pieces.append(line[left:right])
            if left < len(line):
                edits.append(TextEdit(Range.create(line_no, left, line_no, min(right, len(line))), ""))
        first = await self._editor.get_line(start.line)
        capture = SelectionCapture(
            range=Range.create(start.line, left, end.line, right),
            text="\n".join(pieces),
            indent=leading_indent(first[:left]),
        )
        return capture, edits
