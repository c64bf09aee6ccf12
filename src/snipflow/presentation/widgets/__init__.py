"""Widgets for the snippet editor."""

from .completion_menu import CompletionMenu
from .quick_pick import QuickPickScreen
from .snippet_editor import SnippetTextArea

__all__ = ["CompletionMenu", "QuickPickScreen", "SnippetTextArea"]
