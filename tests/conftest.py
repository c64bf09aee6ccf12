"""Shared fakes for the snippet interaction tests."""

import asyncio
from typing import Callable, Optional, Sequence

import pytest

from snipflow.domain.types import (
    Candidate,
    ContextSnapshot,
    MessageLevel,
    Position,
    Range,
    TextEdit,
)
from snipflow.orchestration import InteractionState


class FakeEditor:
    """In-memory editor host; records every interaction."""

    def __init__(
        self,
        text: str = "",
        cursor: tuple[int, int] = (0, 0),
        mode: str = "i",
        marks: Optional[tuple[Position, Position]] = None,
        filetype: str = "python",
    ):
        self.lines = text.split("\n")
        self.cursor = Position(*cursor)
        self.current_mode = mode
        self.marks = marks
        self.filetype = filetype
        self.pum = False
        self.quickpick_result = 0
        self.quickpick_calls: list[tuple[list[str], str]] = []
        self.messages: list[tuple[MessageLevel, str]] = []
        self.keys: list[str] = []
        self.calls: list[tuple] = []
        self.fail_apply = False

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def _offset(self, position: Position) -> int:
        line = max(0, min(position.line, len(self.lines) - 1))
        char = max(0, min(position.character, len(self.lines[line])))
        return sum(len(l) + 1 for l in self.lines[:line]) + char

    async def get_context(self) -> ContextSnapshot:
        return ContextSnapshot(1, self.filetype, self.cursor, self.lines[self.cursor.line])

    async def buffer_id(self) -> int:
        return 1

    async def mode(self) -> str:
        return self.current_mode

    async def selection_marks(self) -> tuple[Position, Position]:
        return self.marks

    async def get_line(self, line: int) -> str:
        return self.lines[line]

    async def get_text(self, range: Range) -> str:
        return self.text[self._offset(range.start) : self._offset(range.end)]

    async def apply_edits(self, edits: Sequence[TextEdit]) -> None:
        if self.fail_apply:
            raise RuntimeError("buffer is read-only")
        text = self.text
        for edit in sorted(edits, key=lambda e: e.range.start, reverse=True):
            start, end = self._offset(edit.range.start), self._offset(edit.range.end)
            text = text[:start] + edit.new_text + text[end:]
            self.lines = text.split("\n")
        self.calls.append(("apply_edits", list(edits)))

    async def move_to(self, position: Position) -> None:
        self.cursor = position

    async def feed_keys(self, keys: str) -> None:
        self.keys.append(keys)

    async def pum_visible(self) -> bool:
        return self.pum

    async def start_completion(self, source: str) -> None:
        self.calls.append(("start_completion", source))

    async def select_next_popup_entry(self) -> None:
        self.calls.append(("next",))

    async def confirm_popup_entry(self) -> None:
        self.calls.append(("confirm",))

    async def show_quickpick(self, items: Sequence[str], title: str) -> int:
        self.quickpick_calls.append((list(items), title))
        return self.quickpick_result

    def show_message(self, message: str, level: MessageLevel = MessageLevel.INFO) -> None:
        self.messages.append((level, message))

    async def set_filetype(self, buffer_id: int, filetype: str) -> None:
        self.filetype = filetype


class StubSource:
    """Candidate source returning canned results."""

    def __init__(self, candidates: Sequence[Candidate] = (), error: Optional[Exception] = None):
        self.candidates = list(candidates)
        self.error = error
        self.calls: list[tuple[ContextSnapshot, bool]] = []
        self.gate: Optional[asyncio.Event] = None
        self.on_query: Optional[Callable[[], None]] = None

    async def query_trigger_candidates(self, context: ContextSnapshot, auto_trigger: bool = False):
        self.calls.append((context, auto_trigger))
        if self.on_query is not None:
            self.on_query()
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.candidates)


class FakeSession:
    def __init__(self, active: bool = True):
        self.active = active
        self.advanced = 0

    @property
    def is_active(self) -> bool:
        return self.active

    async def advance_to_next_placeholder(self) -> None:
        self.advanced += 1


class RecordingEngine:
    def __init__(self):
        self.inserted: list[Candidate] = []
        self.sessions: dict[int, FakeSession] = {}

    async def insert_snippet(self, candidate: Candidate) -> None:
        self.inserted.append(candidate)

    def get_active_session(self, buffer_id: int):
        return self.sessions.get(buffer_id)


class MemoryRecency:
    def __init__(self):
        self.added: list[str] = []

    async def add(self, item: str) -> None:
        self.added.append(item)

    async def load(self) -> list[str]:
        # newest first, de-duplicated
        seen: list[str] = []
        for item in reversed(self.added):
            if item not in seen:
                seen.append(item)
        return seen


async def instant_sleep(_seconds: float) -> None:
    await asyncio.sleep(0)


def make_candidate(prefix: str, description: str = "") -> Candidate:
    return Candidate(prefix=prefix, description=description or f"{prefix} snippet", payload={"prefix": prefix})


@pytest.fixture
def editor() -> FakeEditor:
    return FakeEditor(text="fori", cursor=(0, 4))


@pytest.fixture
def engine() -> RecordingEngine:
    return RecordingEngine()


@pytest.fixture
def recency() -> MemoryRecency:
    return MemoryRecency()


@pytest.fixture
def state() -> InteractionState:
    return InteractionState()
