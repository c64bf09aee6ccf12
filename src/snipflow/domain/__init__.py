"""Domain layer: value types, snippet models, protocols and events."""

from snipflow.domain.snippet import Snippet, SnippetFileEntry
from snipflow.domain.types import (
    SUPPORTED_VISUAL_MODES,
    Candidate,
    CandidateSet,
    ContextSnapshot,
    ExpandOutcome,
    FallbackAction,
    MessageLevel,
    Position,
    Range,
    SelectionCapture,
    SnippetEdit,
    TextEdit,
    TriggerAttempt,
    VisualMode,
)

__all__ = [
    "SUPPORTED_VISUAL_MODES",
    "Candidate",
    "CandidateSet",
    "ContextSnapshot",
    "ExpandOutcome",
    "FallbackAction",
    "MessageLevel",
    "Position",
    "Range",
    "SelectionCapture",
    "Snippet",
    "SnippetEdit",
    "SnippetFileEntry",
    "TextEdit",
    "TriggerAttempt",
    "VisualMode",
]
