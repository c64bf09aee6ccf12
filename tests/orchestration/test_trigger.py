"""Tests for the auto-trigger state machine."""

import asyncio

import pytest

from conftest import FakeEditor, MemoryRecency, RecordingEngine, StubSource, instant_sleep, make_candidate
from snipflow.domain.events import EditEvent, EditKind, EventBus
from snipflow.domain.types import MessageLevel
from snipflow.orchestration import InteractionState, TriggerOrchestrator
from snipflow.orchestration.trigger import AMBIGUOUS_MESSAGE


def make_orchestrator(source, editor=None, engine=None, recency=None, state=None):
    editor = editor or FakeEditor(text="=>", cursor=(0, 2))
    engine = engine or RecordingEngine()
    recency = recency or MemoryRecency()
    state = state or InteractionState()
    orchestrator = TriggerOrchestrator(
        source,
        engine,
        recency,
        editor,
        state,
        staleness_window_ms=50,
        settle_delay_ms=50,
        clock=lambda: 0.0,
        sleep=instant_sleep,
    )
    return orchestrator, editor, engine, recency, state


class TestArming:
    def test_text_change_without_insert_is_ignored(self):
        orchestrator, *_ = make_orchestrator(StubSource([make_candidate("=>")]))
        assert orchestrator.on_text_changed(10.0) is None

    def test_text_change_outside_window_drops_arm(self):
        orchestrator, _, _, _, state = make_orchestrator(StubSource([make_candidate("=>")]))
        orchestrator.on_char_inserted(0.0)

        assert orchestrator.on_text_changed(51.0) is None
        assert state.arm is None

    @pytest.mark.asyncio
    async def test_text_change_at_window_edge_starts_evaluation(self):
        source = StubSource([make_candidate("=>")])
        orchestrator, _, engine, _, _ = make_orchestrator(source)
        orchestrator.on_char_inserted(0.0)

        task = orchestrator.on_text_changed(50.0)
        assert task is not None
        assert await task is True
        assert [c.prefix for c in engine.inserted] == ["=>"]


class TestEvaluation:
    @pytest.mark.asyncio
    async def test_single_candidate_expands_and_records(self):
        source = StubSource([make_candidate("=>")])
        orchestrator, _, engine, recency, _ = make_orchestrator(source)

        orchestrator.on_char_inserted(100.0)
        orchestrator.on_text_changed(110.0)
        await orchestrator.wait_idle()

        assert [c.prefix for c in engine.inserted] == ["=>"]
        assert recency.added == ["=>"]
        assert source.calls[0][1] is True

    @pytest.mark.asyncio
    async def test_empty_result_has_no_effect(self):
        orchestrator, editor, engine, recency, _ = make_orchestrator(StubSource([]))

        orchestrator.on_char_inserted(0.0)
        orchestrator.on_text_changed(5.0)
        await orchestrator.wait_idle()

        assert engine.inserted == []
        assert recency.added == []
        assert editor.messages == []

    @pytest.mark.asyncio
    async def test_multiple_candidates_warn_and_do_not_expand(self):
        source = StubSource([make_candidate("=>"), make_candidate(">")])
        orchestrator, editor, engine, recency, _ = make_orchestrator(source)

        orchestrator.on_char_inserted(0.0)
        orchestrator.on_text_changed(5.0)
        await orchestrator.wait_idle()

        assert engine.inserted == []
        assert recency.added == []
        assert editor.messages == [(MessageLevel.WARNING, AMBIGUOUS_MESSAGE)]

    @pytest.mark.asyncio
    async def test_source_failure_is_reported_and_contained(self):
        source = StubSource(error=RuntimeError("boom"))
        orchestrator, editor, engine, _, state = make_orchestrator(source)

        orchestrator.on_char_inserted(0.0)
        arm = state.arm
        orchestrator.on_text_changed(5.0)
        await orchestrator.wait_idle()

        assert engine.inserted == []
        assert editor.messages[0][0] is MessageLevel.ERROR
        assert "boom" in editor.messages[0][1]
        assert state.arm == arm

    @pytest.mark.asyncio
    async def test_engine_failure_is_reported_and_contained(self):
        class FailingEngine(RecordingEngine):
            async def insert_snippet(self, candidate):
                raise TypeError("Unsupported snippet payload: dict")

        orchestrator, editor, _, recency, _ = make_orchestrator(
            StubSource([make_candidate("=>")]), engine=FailingEngine()
        )

        orchestrator.on_char_inserted(0.0)
        task = orchestrator.on_text_changed(5.0)

        assert await task is False
        assert recency.added == []
        assert editor.messages[0][0] is MessageLevel.ERROR
        assert "Unsupported snippet payload" in editor.messages[0][1]

    @pytest.mark.asyncio
    async def test_expansion_detaches_previous_session_marker(self):
        orchestrator, _, engine, _, state = make_orchestrator(StubSource([make_candidate("=>")]))
        state.set_last_placeholder(object())

        orchestrator.on_char_inserted(0.0)
        assert await orchestrator.on_text_changed(5.0) is True

        assert state.last_placeholder is None
        assert len(engine.inserted) == 1


class TestStaleness:
    @pytest.mark.asyncio
    async def test_superseded_insert_voids_earlier_attempt(self):
        source = StubSource([make_candidate("=>")])
        orchestrator, _, engine, recency, _ = make_orchestrator(source)

        orchestrator.on_char_inserted(0.0)
        first = orchestrator.on_text_changed(5.0)
        # Second keystroke before the first settle delay elapsed
        orchestrator.on_char_inserted(20.0)
        second = orchestrator.on_text_changed(25.0)

        assert await first is False
        assert await second is True
        assert len(engine.inserted) == 1
        assert recency.added == ["=>"]

    @pytest.mark.asyncio
    async def test_insert_during_query_discards_non_empty_result(self):
        source = StubSource([make_candidate("=>")])
        source.gate = asyncio.Event()
        orchestrator, editor, engine, recency, _ = make_orchestrator(source)

        orchestrator.on_char_inserted(0.0)
        task = orchestrator.on_text_changed(5.0)
        while not source.calls:
            await asyncio.sleep(0)

        orchestrator.on_char_inserted(30.0)
        source.gate.set()

        assert await task is False
        assert engine.inserted == []
        assert recency.added == []
        assert editor.messages == []

    @pytest.mark.asyncio
    async def test_unrelated_text_change_during_query_voids_attempt(self):
        source = StubSource([make_candidate("=>")])
        orchestrator, _, engine, _, _ = make_orchestrator(source)
        source.on_query = lambda: orchestrator.on_text_changed(500.0)

        orchestrator.on_char_inserted(0.0)
        task = orchestrator.on_text_changed(5.0)

        assert await task is False
        assert engine.inserted == []

    @pytest.mark.asyncio
    async def test_burst_of_inserts_applies_at_most_once(self):
        source = StubSource([make_candidate("=>")])
        orchestrator, _, engine, _, _ = make_orchestrator(source)

        for ts in (0.0, 10.0, 20.0, 30.0):
            orchestrator.on_char_inserted(ts)
            orchestrator.on_text_changed(ts + 2.0)
        await orchestrator.wait_idle()

        assert len(engine.inserted) == 1


class TestEventBus:
    @pytest.mark.asyncio
    async def test_attach_routes_edit_events(self):
        source = StubSource([make_candidate("=>")])
        orchestrator, _, engine, _, _ = make_orchestrator(source)
        bus = EventBus()
        orchestrator.attach(bus)

        bus.publish(EditEvent(kind=EditKind.CHAR_INSERTED, timestamp_ms=0.0))
        bus.publish(EditEvent(kind=EditKind.TEXT_CHANGED, timestamp_ms=3.0))
        await orchestrator.wait_idle()

        assert len(engine.inserted) == 1

    @pytest.mark.asyncio
    async def test_detach_stops_routing(self):
        source = StubSource([make_candidate("=>")])
        orchestrator, _, engine, _, _ = make_orchestrator(source)
        bus = EventBus()
        orchestrator.attach(bus)
        orchestrator.detach(bus)

        bus.publish(EditEvent(kind=EditKind.CHAR_INSERTED, timestamp_ms=0.0))
        bus.publish(EditEvent(kind=EditKind.TEXT_CHANGED, timestamp_ms=3.0))
        await orchestrator.wait_idle()

        assert engine.inserted == []
