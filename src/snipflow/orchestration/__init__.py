"""Trigger orchestration and the interactive snippet commands."""

from .capture import VisualCapture, strip_common_indent
from .commands import SnippetCommands
from .expansion import ExpansionCoordinator
from .fallback import FallbackDispatcher
from .state import ArmRecord, InteractionState
from .trigger import TriggerOrchestrator

__all__ = [
    "ArmRecord",
    "ExpansionCoordinator",
    "FallbackDispatcher",
    "InteractionState",
    "SnippetCommands",
    "TriggerOrchestrator",
    "VisualCapture",
    "strip_common_indent",
]
