"""Candidate sources and their aggregator."""

from .manager import ProviderManager, SnippetSource
from .plain_text import PlainTextSource, is_trigger_boundary, load_snippet_file

__all__ = [
    "PlainTextSource",
    "ProviderManager",
    "SnippetSource",
    "is_trigger_boundary",
    "load_snippet_file",
]
