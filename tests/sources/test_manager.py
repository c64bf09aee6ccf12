"""Tests for the provider aggregator."""

import pytest

from conftest import FakeEditor, make_candidate
from snipflow.domain.snippet import Snippet
from snipflow.domain.types import ContextSnapshot, MessageLevel, Position
from snipflow.sources import ProviderManager


class FakeProvider:
    def __init__(self, prefixes=(), fail_init=False):
        self.prefixes = list(prefixes)
        self.fail_init = fail_init
        self.initialized = False

    async def init(self):
        if self.fail_init:
            raise ValueError("broken file")
        self.initialized = True

    async def query_trigger_candidates(self, context, auto_trigger=False):
        return [make_candidate(p) for p in self.prefixes]

    def get_snippets(self, filetype):
        return [Snippet(name=p, prefix=p, body=p) for p in self.prefixes]


CONTEXT = ContextSnapshot(buffer_id=1, filetype="python", position=Position(0, 0), line="")


@pytest.mark.asyncio
async def test_candidates_follow_registration_order():
    manager = ProviderManager()
    manager.register(FakeProvider(["b", "a"]), "ultisnips")
    manager.register(FakeProvider(["c"]), "snippets")

    candidates = await manager.query_trigger_candidates(CONTEXT)

    assert [c.prefix for c in candidates] == ["b", "a", "c"]
    assert manager.provider_names == ["ultisnips", "snippets"]


@pytest.mark.asyncio
async def test_init_failure_is_reported_and_others_load():
    editor = FakeEditor()
    good = FakeProvider(["a"])
    manager = ProviderManager()
    manager.register(FakeProvider(fail_init=True), "broken")
    manager.register(good, "snippets")

    failed = await manager.init(editor)

    assert failed == ["broken"]
    assert good.initialized
    assert editor.messages == [(MessageLevel.ERROR, "Error on load snippets: broken file")]


def test_has_provider():
    manager = ProviderManager()
    assert manager.has_provider is False
    manager.register(FakeProvider(), "snippets")
    assert manager.has_provider is True
    manager.unregister("snippets")
    assert manager.has_provider is False


def test_get_snippets_merges_providers():
    manager = ProviderManager()
    manager.register(FakeProvider(["a"]), "one")
    manager.register(FakeProvider(["b"]), "two")
    assert [s.prefix for s in manager.get_snippets("python")] == ["a", "b"]
