"""Core value types shared by the trigger, expansion and capture flows."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based line/character position in a buffer."""

    line: int
    character: int


@dataclass(frozen=True)
class Range:
    """Half-open range ``[start, end)`` in a buffer."""

    start: Position
    end: Position

    @classmethod
    def create(cls, start_line: int, start_char: int, end_line: int, end_char: int) -> Range:
        return cls(Position(start_line, start_char), Position(end_line, end_char))

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


@dataclass(frozen=True)
class TextEdit:
    """Replace ``range`` with ``new_text``."""

    range: Range
    new_text: str


@dataclass(frozen=True)
class Candidate:
    """A snippet that matches the text before the cursor.

    ``payload`` is opaque to the interaction layer and only interpreted by
    the expansion engine.
    """

    prefix: str
    description: str
    payload: Any = None


CandidateSet = Sequence[Candidate]


@dataclass(frozen=True)
class ContextSnapshot:
    """What a candidate source needs to know about the cursor."""

    buffer_id: int
    filetype: str
    position: Position
    line: str

    @property
    def before_cursor(self) -> str:
        return self.line[: self.position.character]


@dataclass(frozen=True)
class TriggerAttempt:
    """One in-flight auto-trigger evaluation.

    ``arm_generation`` identifies the char-insert that armed it and
    ``change_generation`` the text change that started it; both are checked
    again once the evaluation resumes.
    """

    started_at_ms: float
    armed_at_ms: float
    arm_generation: int
    change_generation: int


@dataclass(frozen=True)
class SelectionCapture:
    """Text removed from the buffer to seed the next expansion."""

    range: Range
    text: str
    indent: str = ""


class FallbackAction(str, Enum):
    """Secondary action taken when no snippet expands."""

    REFRESH = "refresh"
    NEXT_POPUP_ENTRY = "next"
    CONFIRM_POPUP_ENTRY = "confirm"
    NOTIFY_NO_MATCH = "notify"

    @classmethod
    def from_mode(cls, mode: str) -> FallbackAction:
        """Map the ``expand_fallback_with_pum`` setting; unknown values notify."""
        for action in (cls.REFRESH, cls.NEXT_POPUP_ENTRY, cls.CONFIRM_POPUP_ENTRY):
            if action.value == mode:
                return action
        return cls.NOTIFY_NO_MATCH


class VisualMode(str, Enum):
    """Editor modes as reported by the host (vim ``mode()`` values)."""

    CHARWISE = "v"
    LINEWISE = "V"
    BLOCKWISE = "\x16"
    INSERT = "i"
    NORMAL = "n"

    @classmethod
    def parse(cls, value: str) -> VisualMode | None:
        try:
            return cls(value)
        except ValueError:
            return None


SUPPORTED_VISUAL_MODES = frozenset({VisualMode.CHARWISE, VisualMode.LINEWISE, VisualMode.BLOCKWISE})


class ExpandOutcome(str, Enum):
    """Result of a manual expansion attempt."""

    EXPANDED = "expanded"
    NO_MATCH = "no_match"
    CANCELLED = "cancelled"


class MessageLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class SnippetEdit:
    """Payload produced by the bundled sources: replace ``range`` with ``body``."""

    range: Range
    body: str
    name: str = ""
    filetype: str = ""
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
