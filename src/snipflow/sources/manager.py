"""
Aggregates the registered snippet sources behind one query interface.
"""

from __future__ import annotations

from typing import Protocol

from snipflow.domain.protocols import EditorHost
from snipflow.domain.snippet import Snippet
from snipflow.domain.types import Candidate, ContextSnapshot, MessageLevel
from snipflow.logger import get_logger

logger = get_logger("sources.manager")


class SnippetSource(Protocol):
    """A loadable candidate source that can also list its snippets."""

    async def init(self) -> None: ...

    async def query_trigger_candidates(
        self, context: ContextSnapshot, auto_trigger: bool = False
    ) -> list[Candidate]: ...

    def get_snippets(self, filetype: str) -> list[Snippet]: ...


class ProviderManager:
    """Ordered merge of registered sources.

    Candidates keep the registration order of their sources, then each
    source's own order. Query errors propagate so the caller can report them.
    """

    def __init__(self) -> None:
        self._providers: dict[str, SnippetSource] = {}

    def register(self, provider: SnippetSource, name: str) -> None:
        if name in self._providers:
            logger.warning(f"Replacing snippet provider '{name}'")
        self._providers[name] = provider
        logger.debug(f"Registered snippet provider '{name}'")

    def unregister(self, name: str) -> None:
        self._providers.pop(name, None)

    @property
    def has_provider(self) -> bool:
        return bool(self._providers)

    @property
    def provider_names(self) -> list[str]:
        return list(self._providers)

    async def init(self, editor: EditorHost | None = None) -> list[str]:
        """Load every provider; returns the names that failed.

        A failing provider does not prevent the others from loading.
        """
        failed: list[str] = []
        for name, provider in self._providers.items():
            try:
                await provider.init()
            except Exception as e:
                failed.append(name)
                logger.exception(f"Error on load snippets from '{name}': {e}")
                if editor is not None:
                    editor.show_message(f"Error on load snippets: {e}", MessageLevel.ERROR)
        return failed

    async def query_trigger_candidates(self, context: ContextSnapshot, auto_trigger: bool = False) -> list[Candidate]:
        candidates: list[Candidate] = []
        for provider in self._providers.values():
            candidates.extend(await provider.query_trigger_candidates(context, auto_trigger))
        logger.debug(
            f"{len(candidates)} candidate(s) for {context.before_cursor[-20:]!r} (auto={auto_trigger})"
        )
        return candidates

    def get_snippets(self, filetype: str) -> list[Snippet]:
        snippets: list[Snippet] = []
        for provider in self._providers.values():
            snippets.extend(provider.get_snippets(filetype))
        return snippets
