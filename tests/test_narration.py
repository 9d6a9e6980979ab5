"""
Tests for the narration dispatcher.
"""

import pytest

from conftest import FakeSink
from sceneware.config import UtteranceSettings
from sceneware.narration import NarrationDispatcher


class TestNarrationDispatcher:

    @pytest.mark.asyncio
    async def test_cancel_then_speak(self):
        sink = FakeSink()
        settings = UtteranceSettings(rate=1.5)
        dispatcher = NarrationDispatcher(sink=sink, settings=settings, debounce=0)

        assert await dispatcher.dispatch("I see a cup") is True
        assert sink.events == ["cancel", "speak:I see a cup"]
        assert sink.settings == [settings]

    @pytest.mark.asyncio
    async def test_empty_text_skipped(self):
        sink = FakeSink()
        dispatcher = NarrationDispatcher(sink=sink, debounce=0)

        assert await dispatcher.dispatch("") is False
        assert sink.events == []

    @pytest.mark.asyncio
    async def test_missing_sink_skipped(self):
        dispatcher = NarrationDispatcher(sink=None, debounce=0)
        assert await dispatcher.dispatch("I see a cup") is False

    @pytest.mark.asyncio
    async def test_suppressed_when_stopped_during_debounce(self):
        sink = FakeSink()
        running = {"value": True}
        dispatcher = NarrationDispatcher(
            sink=sink, debounce=0.01, should_speak=lambda: running["value"],
        )

        running["value"] = False
        assert await dispatcher.dispatch("I see a cup") is False
        assert sink.events == ["cancel"]

    @pytest.mark.asyncio
    async def test_sink_failure_swallowed(self):
        sink = FakeSink(fail=True)
        dispatcher = NarrationDispatcher(sink=sink, debounce=0)

        assert await dispatcher.dispatch("I see a cup") is False
        assert sink.events == ["cancel", "speak:I see a cup"]

    def test_cancel_never_raises(self):
        class BrokenSink(FakeSink):
            def cancel(self):
                raise RuntimeError("gone")

        NarrationDispatcher(sink=BrokenSink()).cancel()
        NarrationDispatcher(sink=None).cancel()

    def test_default_settings(self):
        dispatcher = NarrationDispatcher()
        assert dispatcher.settings == UtteranceSettings()
        assert dispatcher.debounce == pytest.approx(0.1)
