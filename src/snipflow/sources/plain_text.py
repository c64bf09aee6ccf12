"""
Snippet source backed by VSCode style JSON snippet files.

Files are named after the filetype they apply to (``python.json``);
``all.json`` and ``global.json`` apply to every filetype. Each file maps a
snippet name to ``{"prefix", "body", "description", "autotrigger"}``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from pathlib import Path

from pydantic import ValidationError

from snipflow.domain.snippet import Snippet, SnippetFileEntry
from snipflow.domain.types import Candidate, ContextSnapshot, Range, SnippetEdit
from snipflow.errors import SnippetLoadError
from snipflow.logger import get_logger

logger = get_logger("sources.plain_text")

GLOBAL_FILETYPES = ("all", "global")
_WORD_CHAR = re.compile(r"\w")


def is_trigger_boundary(before_cursor: str, prefix: str) -> bool:
    """True when ``prefix`` ends ``before_cursor`` on a word boundary.

    Word-like prefixes must not be glued to a preceding word character;
    prefixes starting with punctuation may follow anything.
    """
    if not prefix or not before_cursor.endswith(prefix):
        return False
    start = len(before_cursor) - len(prefix)
    if start == 0 or not _WORD_CHAR.match(prefix[0]):
        return True
    return not _WORD_CHAR.match(before_cursor[start - 1])


def load_snippet_file(path: Path, source: str = "snippets") -> list[Snippet]:
    """Parse one snippet file; raises SnippetLoadError on bad content."""
    filetype = path.stem
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise SnippetLoadError(str(path), str(e)) from e
    if not isinstance(raw, dict):
        raise SnippetLoadError(str(path), "top level must be an object")

    snippets: list[Snippet] = []
    for name, data in raw.items():
        try:
            entry = SnippetFileEntry.model_validate(data)
            for prefix in entry.prefixes():
                snippets.append(
                    Snippet(
                        name=name,
                        prefix=prefix,
                        body=entry.body,
                        description=entry.description,
                        filetype=filetype,
                        auto_trigger=entry.auto_trigger,
                        source=source,
                    )
                )
        except ValidationError as e:
            raise SnippetLoadError(str(path), f"invalid snippet {name!r}: {e}") from e
    return snippets


class PlainTextSource:
    """In-memory snippet table with optional JSON directories."""

    def __init__(
        self,
        snippets: Iterable[Snippet] = (),
        directories: Iterable[str | Path] = (),
        extends: Mapping[str, list[str]] | None = None,
        name: str = "snippets",
    ) -> None:
        self.name = name
        self._directories = [Path(d).expanduser() for d in directories]
        self._extends = dict(extends or {})
        self._by_filetype: dict[str, list[Snippet]] = {}
        for snippet in snippets:
            self.add(snippet)

    def add(self, snippet: Snippet) -> None:
        self._by_filetype.setdefault(snippet.filetype, []).append(snippet)

    async def init(self) -> None:
        """Load every ``*.json`` file of the configured directories."""
        for directory in self._directories:
            if not directory.is_dir():
                logger.warning(f"Snippet directory not found: {directory}")
                continue
            for path in sorted(directory.glob("*.json")):
                loaded = load_snippet_file(path, source=self.name)
                for snippet in loaded:
                    self.add(snippet)
                logger.info(f"Loaded {len(loaded)} snippets from {path}")

    def filetypes_for(self, filetype: str) -> list[str]:
        """``filetype`` followed by its extended parents and the global ones."""
        ordered: list[str] = []
        pending = [filetype]
        while pending:
            current = pending.pop(0)
            if current in ordered:
                continue
            ordered.append(current)
            pending.extend(self._extends.get(current, []))
        ordered.extend(ft for ft in GLOBAL_FILETYPES if ft not in ordered)
        return ordered

    def get_snippets(self, filetype: str) -> list[Snippet]:
        snippets: list[Snippet] = []
        for ft in self.filetypes_for(filetype):
            snippets.extend(self._by_filetype.get(ft, []))
        return snippets

    async def query_trigger_candidates(self, context: ContextSnapshot, auto_trigger: bool = False) -> list[Candidate]:
        before = context.before_cursor
        candidates: list[Candidate] = []
        for snippet in self.get_snippets(context.filetype):
            if auto_trigger and not snippet.auto_trigger:
                continue
            if not is_trigger_boundary(before, snippet.prefix):
                continue
            candidates.append(self._to_candidate(snippet, context))
        return candidates

    def _to_candidate(self, snippet: Snippet, context: ContextSnapshot) -> Candidate:
        line = context.position.line
        end = context.position.character
        edit = SnippetEdit(
            range=Range.create(line, end - len(snippet.prefix), line, end),
            body=snippet.body,
            name=snippet.name,
            filetype=snippet.filetype,
        )
        return Candidate(prefix=snippet.prefix, description=snippet.label, payload=edit)
