"""Completion-provider interface for the host's popup."""

from .provider import CompletionItem, SnippetCompletionProvider, current_word

__all__ = ["CompletionItem", "SnippetCompletionProvider", "current_word"]
