"""Event types published by the host editor.

Every event carries a millisecond timestamp; the auto-trigger state machine
compares these timestamps to tell a genuine typing pause from noise.
"""

from dataclasses import dataclass, field
from enum import Enum

from snipflow.utils import now_ms


class EditKind(str, Enum):
    """Kind of edit notification."""

    CHAR_INSERTED = "char_inserted"
    TEXT_CHANGED = "text_changed"


@dataclass
class Event:
    """Base class for all events."""

    timestamp_ms: float = field(default_factory=now_ms, kw_only=True)
    """Monotonic time the event was observed, in milliseconds."""


@dataclass
class EditEvent(Event):
    """A keystroke-level edit notification.

    ``CHAR_INSERTED`` is published before a typed character lands in the
    buffer, ``TEXT_CHANGED`` after the buffer text changed (in insert mode or
    while the completion popup is visible).
    """

    kind: EditKind
    buffer_id: int = 0


@dataclass
class CompleteDone(Event):
    """A completion item was accepted from the popup."""

    word: str
    source: str = ""


@dataclass
class DocumentOpened(Event):
    """A document was opened in the host."""

    uri: str
    buffer_id: int = 0
