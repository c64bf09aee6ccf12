"""
Minimal expansion engine for the Textual editor.

Understands ``$1``, ``${1:default}``, ``$0`` and ``$VISUAL`` /
``${VISUAL}`` (replaced by the last captured selection). Placeholder
positions are tracked as document offsets and shifted by the amount of
text typed into the previous placeholder.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from textual.widgets import TextArea
from textual.widgets.text_area import Selection

from snipflow.domain.types import Candidate, SnippetEdit
from snipflow.logger import get_logger
from snipflow.orchestration.state import InteractionState
from snipflow.utils import leading_indent

logger = get_logger("tui.engine")

_TOKEN = re.compile(r"\$\{(\d+):([^}]*)\}|\$(\d+)|\$\{VISUAL\}|\$VISUAL")


@dataclass
class Placeholder:
    index: int
    start: int
    end: int


def expand_body(body: str, visual: str = "", indent: str = "") -> tuple[str, list[Placeholder]]:
    """Render ``body`` and return the text with its placeholders in jump order.

    Continuation lines (including those of ``visual``) get ``indent`` prepended.
    """
    body = body.replace("\n", "\n" + indent)
    visual = visual.replace("\n", "\n" + indent)

    parts: list[str] = []
    placeholders: list[Placeholder] = []
    offset = 0
    last = 0
    for match in _TOKEN.finditer(body):
        literal = body[last:match.start()]
        parts.append(literal)
        offset += len(literal)
        last = match.end()

        if match.group(1) is not None:
            index, text = int(match.group(1)), match.group(2)
        elif match.group(3) is not None:
            index, text = int(match.group(3)), ""
        else:
            parts.append(visual)
            offset += len(visual)
            continue

        parts.append(text)
        placeholders.append(Placeholder(index, offset, offset + len(text)))
        offset += len(text)
    parts.append(body[last:])

    # $0 is the final stop
    placeholders.sort(key=lambda p: (p.index == 0, p.index))
    return "".join(parts), placeholders


def location_to_offset(text: str, location: tuple[int, int]) -> int:
    row, col = location
    lines = text.split("\n")
    return sum(len(line) + 1 for line in lines[:row]) + col


def offset_to_location(text: str, offset: int) -> tuple[int, int]:
    before = text[:offset]
    row = before.count("\n")
    return row, len(before) - (before.rfind("\n") + 1)


class TextAreaSession:
    """Placeholder navigation over one inserted snippet."""

    def __init__(self, text_area: TextArea, placeholders: list[Placeholder], state: InteractionState) -> None:
        self._text_area = text_area
        self._placeholders = placeholders
        self._state = state
        self._current = -1
        self._length = len(text_area.text)

    @property
    def owns_marker(self) -> bool:
        """True while the shared placeholder marker points into this session."""
        marker = self._state.last_placeholder
        return any(placeholder is marker for placeholder in self._placeholders)

    @property
    def is_active(self) -> bool:
        return self.owns_marker and self._current < len(self._placeholders) - 1

    def start(self) -> None:
        self._current = 0
        self._select(self._placeholders[0])

    def _select(self, placeholder: Placeholder) -> None:
        text = self._text_area.text
        start = offset_to_location(text, placeholder.start)
        end = offset_to_location(text, placeholder.end)
        self._text_area.selection = Selection(start, end)
        self._state.set_last_placeholder(placeholder)

    async def advance_to_next_placeholder(self) -> None:
        if not self.is_active:
            return
        # Shift later stops by whatever was typed into the current one.
        delta = len(self._text_area.text) - self._length
        if delta:
            current = self._placeholders[self._current]
            for placeholder in self._placeholders[self._current + 1 :]:
                if placeholder.start >= current.start:
                    placeholder.start += delta
                    placeholder.end += delta
        self._length = len(self._text_area.text)
        self._current += 1
        self._select(self._placeholders[self._current])


class TextAreaSnippetEngine:
    """Inserts ``SnippetEdit`` payloads into a TextArea."""

    def __init__(self, text_area: TextArea, state: InteractionState, buffer_id: int = 1) -> None:
        self._text_area = text_area
        self._state = state
        self._buffer_id = buffer_id
        self._session: TextAreaSession | None = None

    async def insert_snippet(self, candidate: Candidate) -> None:
        edit = candidate.payload
        if not isinstance(edit, SnippetEdit):
            raise TypeError(f"Unsupported snippet payload: {type(edit).__name__}")

        start = (edit.range.start.line, edit.range.start.character)
        end = (edit.range.end.line, edit.range.end.character)
        indent = leading_indent(self._text_area.document.get_line(start[0]))
        text, placeholders = expand_body(edit.body, self._state.selected_text or "", indent)

        self._text_area.replace(text, start, end)
        base = location_to_offset(self._text_area.text, start)
        for placeholder in placeholders:
            placeholder.start += base
            placeholder.end += base

        if not placeholders:
            self._text_area.cursor_location = offset_to_location(self._text_area.text, base + len(text))
            return

        self._session = TextAreaSession(self._text_area, placeholders, self._state)
        self._session.start()
        logger.debug(f"Inserted '{candidate.prefix}' with {len(placeholders)} placeholder(s)")

    def get_active_session(self, buffer_id: int) -> TextAreaSession | None:
        if buffer_id != self._buffer_id or self._session is None:
            return None
        return self._session if self._session.is_active else None
