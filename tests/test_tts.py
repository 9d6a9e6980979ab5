"""
Tests for the TTS narration sink.
"""

import asyncio
import subprocess
import time
from unittest.mock import MagicMock, patch

import pytest

from sceneware.config import UtteranceSettings
from sceneware.exceptions import NarrationError
from sceneware.narration import NarrationDispatcher
from sceneware.tts import (
    TTSEngine,
    TTSNarrationSink,
    build_command,
    clean_text,
    engine_priority,
)


class TestBuildCommand:

    def test_espeak_defaults(self):
        cmd = build_command(TTSEngine.ESPEAK, "I see a cup", UtteranceSettings())
        assert cmd == ["espeak", "-s", "175", "-p", "50", "-a", "100", "-v", "en", "I see a cup"]

    def test_espeak_rate_pitch_volume(self):
        settings = UtteranceSettings(rate=2.0, pitch=0.5, volume=0.5, lang="pl-PL")
        cmd = build_command(TTSEngine.ESPEAK, "hello", settings, voice="")
        assert cmd == ["espeak", "-s", "350", "-p", "25", "-a", "50", "-v", "pl", "hello"]

    def test_minimum_words_per_minute(self):
        cmd = build_command(TTSEngine.SAY, "hello", UtteranceSettings(rate=0.1))
        assert cmd == ["say", "-r", "80", "hello"]

    def test_say_with_voice(self):
        cmd = build_command(TTSEngine.SAY, "hello", UtteranceSettings(), voice="Samantha")
        assert cmd == ["say", "-r", "175", "-v", "Samantha", "hello"]

    def test_powershell_escapes_quotes(self):
        cmd = build_command(TTSEngine.POWERSHELL, "it's here", UtteranceSettings(rate=1.5))
        assert cmd[:2] == ["powershell", "-Command"]
        assert "$s.Rate = 5" in cmd[2]
        assert "Speak('it''s here')" in cmd[2]

    def test_pyttsx3_not_a_command(self):
        with pytest.raises(NarrationError):
            build_command(TTSEngine.PYTTSX3, "hello", UtteranceSettings())


class TestEngineSelection:

    def test_priority_per_platform(self):
        assert engine_priority("Darwin")[0] == TTSEngine.SAY
        assert engine_priority("Windows") == [TTSEngine.PYTTSX3, TTSEngine.POWERSHELL]
        assert engine_priority("Linux") == [TTSEngine.ESPEAK, TTSEngine.PYTTSX3]

    def test_no_engine_available(self):
        sink = TTSNarrationSink(engine="auto")
        with patch("sceneware.tts.is_engine_available", return_value=False):
            with pytest.raises(NarrationError):
                _ = sink.engine

    def test_unknown_engine(self):
        with pytest.raises(NarrationError):
            TTSNarrationSink(engine="festival")

    def test_clean_text(self):
        assert clean_text('  I  see "a"\n`cup` ') == "I see a cup"
        assert clean_text("") == ""


class TestTTSNarrationSink:

    def test_speak_starts_process(self):
        sink = TTSNarrationSink(engine="espeak")
        with patch("sceneware.tts.subprocess.Popen") as popen:
            sink.speak("I see a cup", UtteranceSettings())

        args = popen.call_args[0][0]
        assert args[0] == "espeak"
        assert args[-1] == "I see a cup"

    def test_cancel_terminates_running_process(self):
        sink = TTSNarrationSink(engine="espeak")
        process = MagicMock()
        process.poll.return_value = None
        with patch("sceneware.tts.subprocess.Popen", return_value=process):
            sink.speak("I see a cup", UtteranceSettings())

        sink.cancel()
        process.terminate.assert_called_once()
        sink._reaper.join(timeout=2.0)
        process.wait.assert_called_once_with(timeout=1.0)
        process.kill.assert_not_called()

        sink.cancel()
        process.terminate.assert_called_once()

    def test_cancel_kills_stuck_process(self):
        sink = TTSNarrationSink(engine="say")
        process = MagicMock()
        process.poll.return_value = None
        process.wait.side_effect = subprocess.TimeoutExpired("say", 1.0)
        with patch("sceneware.tts.subprocess.Popen", return_value=process):
            sink.speak("hello", UtteranceSettings())

        sink.cancel()
        sink._reaper.join(timeout=2.0)
        process.kill.assert_called_once()

    def test_cancel_does_not_wait_for_process_exit(self):
        sink = TTSNarrationSink(engine="espeak")
        process = MagicMock()
        process.poll.return_value = None

        def ignore_terminate(timeout=None):
            time.sleep(0.5)
            raise subprocess.TimeoutExpired("espeak", timeout)

        process.wait.side_effect = ignore_terminate
        with patch("sceneware.tts.subprocess.Popen", return_value=process):
            sink.speak("I see a cup", UtteranceSettings())

        started = time.monotonic()
        sink.cancel()
        assert time.monotonic() - started < 0.2
        process.terminate.assert_called_once()
        process.kill.assert_not_called()

        sink._reaper.join(timeout=2.0)
        process.kill.assert_called_once()

    @pytest.mark.asyncio
    async def test_dispatcher_cancel_keeps_event_loop_responsive(self):
        sink = TTSNarrationSink(engine="espeak")
        process = MagicMock()
        process.poll.return_value = None
        process.wait.side_effect = lambda timeout=None: time.sleep(0.3)
        with patch("sceneware.tts.subprocess.Popen", return_value=process):
            sink.speak("I see a cup", UtteranceSettings())

        loop = asyncio.get_running_loop()
        started = loop.time()
        NarrationDispatcher(sink=sink).cancel()
        await asyncio.sleep(0)

        assert loop.time() - started < 0.2
        assert sink._reaper.is_alive()
        sink._reaper.join(timeout=2.0)
        process.kill.assert_not_called()

    def test_missing_binary_raises(self):
        sink = TTSNarrationSink(engine="espeak")
        with patch("sceneware.tts.subprocess.Popen", side_effect=FileNotFoundError("espeak")):
            with pytest.raises(NarrationError):
                sink.speak("hello", UtteranceSettings())

    def test_blank_text_not_spoken(self):
        sink = TTSNarrationSink(engine="espeak")
        with patch("sceneware.tts.subprocess.Popen") as popen:
            sink.speak("   ", UtteranceSettings())
        popen.assert_not_called()
