"""
Text-to-Speech Narration Sink

Cross-platform, non-blocking speech output with cancellation:
- espeak (Linux, lightweight)
- say (macOS)
- pyttsx3 (cross-platform, Python)
- powershell (Windows)

Only one utterance plays at a time; ``cancel`` stops it.

Usage:
    from sceneware.tts import TTSNarrationSink
    from sceneware.config import UtteranceSettings

    sink = TTSNarrationSink()
    sink.speak("I see a laptop", UtteranceSettings(rate=1.2))
    sink.cancel()
"""

import importlib.util
import logging
import platform
import shutil
import subprocess
import threading
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .config import UtteranceSettings, config
from .exceptions import NarrationError

logger = logging.getLogger(__name__)

BASE_WPM = 175          # espeak / say default words per minute
ESPEAK_BASE_PITCH = 50  # espeak pitch range 0-99
MAX_TEXT_LENGTH = 500
REAP_TIMEOUT = 1.0      # seconds between terminate and kill


class TTSEngine(str, Enum):
    AUTO = "auto"
    ESPEAK = "espeak"
    SAY = "say"  # macOS
    PYTTSX3 = "pyttsx3"
    POWERSHELL = "powershell"  # Windows


@dataclass
class TTSConfig:
    """TTS configuration."""
    engine: TTSEngine = TTSEngine.AUTO
    voice: str = ""

    @classmethod
    def from_env(cls) -> "TTSConfig":
        """Load from environment/.env"""
        engine_str = config.get("SN_TTS_ENGINE", "auto").lower()
        try:
            engine = TTSEngine(engine_str)
        except ValueError:
            logger.warning(f"Unknown TTS engine {engine_str!r}, using auto")
            engine = TTSEngine.AUTO

        return cls(engine=engine, voice=config.get("SN_TTS_VOICE", ""))


def clean_text(text: str) -> str:
    """Clean text for TTS."""
    if not text:
        return ""
    text = text.replace('"', '').replace('`', '')
    text = ' '.join(text.split())
    return text[:MAX_TEXT_LENGTH]


def engine_priority(system: Optional[str] = None) -> List[TTSEngine]:
    """Get engines to try in priority order for a platform."""
    system = (system or platform.system()).lower()

    if system == "darwin":
        return [TTSEngine.SAY, TTSEngine.PYTTSX3]
    elif system == "windows":
        return [TTSEngine.PYTTSX3, TTSEngine.POWERSHELL]
    else:
        return [TTSEngine.ESPEAK, TTSEngine.PYTTSX3]


def is_engine_available(engine: TTSEngine) -> bool:
    if engine == TTSEngine.PYTTSX3:
        return importlib.util.find_spec("pyttsx3") is not None
    if engine == TTSEngine.AUTO:
        return False
    return shutil.which(engine.value) is not None


def get_available_engines() -> List[TTSEngine]:
    """Check which TTS engines are installed."""
    return [e for e in TTSEngine if e != TTSEngine.AUTO and is_engine_available(e)]


def build_command(
    engine: TTSEngine,
    text: str,
    settings: UtteranceSettings,
    voice: str = "",
) -> List[str]:
    """
    Build the speech command for a subprocess engine.

    Args:
        engine: espeak, say or powershell
        text: Cleaned text to speak
        settings: Rate/pitch/volume multipliers and language
        voice: Engine-specific voice name; overrides the language for espeak

    Returns:
        Command line as a list
    """
    wpm = max(80, int(BASE_WPM * settings.rate))

    if engine == TTSEngine.ESPEAK:
        pitch = min(99, max(0, int(ESPEAK_BASE_PITCH * settings.pitch)))
        amplitude = min(200, max(0, int(100 * settings.volume)))
        lang = settings.lang.split("-")[0].lower() if settings.lang else ""
        cmd = ["espeak", "-s", str(wpm), "-p", str(pitch), "-a", str(amplitude)]
        if voice or lang:
            cmd.extend(["-v", voice or lang])
        cmd.append(text)
        return cmd

    if engine == TTSEngine.SAY:
        cmd = ["say", "-r", str(wpm)]
        if voice:
            cmd.extend(["-v", voice])
        cmd.append(text)
        return cmd

    if engine == TTSEngine.POWERSHELL:
        # SpeechSynthesizer.Rate is -10..10, Volume 0..100
        rate = min(10, max(-10, int(round((settings.rate - 1.0) * 10))))
        volume = min(100, max(0, int(100 * settings.volume)))
        safe_text = text.replace("'", "''")
        script = (
            "Add-Type -AssemblyName System.Speech; "
            "$s = New-Object System.Speech.Synthesis.SpeechSynthesizer; "
            f"$s.Rate = {rate}; $s.Volume = {volume}; "
            f"$s.Speak('{safe_text}')"
        )
        return ["powershell", "-Command", script]

    raise NarrationError(f"{engine.value} is not a subprocess engine")


class TTSNarrationSink:
    """Narration sink speaking through a local TTS engine."""

    def __init__(self, engine: Optional[str] = None, voice: Optional[str] = None):
        tts_config = TTSConfig.from_env()
        if engine:
            try:
                tts_config.engine = TTSEngine(engine.lower())
            except ValueError:
                raise NarrationError(f"Unknown TTS engine: {engine}")
        if voice is not None:
            tts_config.voice = voice

        self.config = tts_config
        self._lock = threading.Lock()
        self._process: Optional[subprocess.Popen] = None
        self._pyttsx3_engine = None
        self._pyttsx3_thread: Optional[threading.Thread] = None
        self._reaper: Optional[threading.Thread] = None
        self._engine: Optional[TTSEngine] = None

    @property
    def engine(self) -> TTSEngine:
        """Engine used for speech, resolved on first use."""
        if self._engine is None:
            self._engine = self._resolve_engine()
        return self._engine

    def _resolve_engine(self) -> TTSEngine:
        if self.config.engine != TTSEngine.AUTO:
            return self.config.engine

        for engine in engine_priority():
            if is_engine_available(engine):
                logger.debug(f"TTS engine selected: {engine.value}")
                return engine

        raise NarrationError("No TTS engine available. Run: sceneware check tts")

    @property
    def speaking(self) -> bool:
        with self._lock:
            if self._process is not None and self._process.poll() is None:
                return True
            return self._pyttsx3_thread is not None and self._pyttsx3_thread.is_alive()

    def speak(self, text: str, settings: UtteranceSettings):
        """Start speaking ``text`` without blocking."""
        text = clean_text(text)
        if not text:
            return

        engine = self.engine
        if engine == TTSEngine.PYTTSX3:
            self._speak_pyttsx3(text, settings)
            return

        cmd = build_command(engine, text, settings, self.config.voice)
        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
            )
        except OSError as e:
            raise NarrationError(f"TTS engine {engine.value} failed: {e}") from e

        with self._lock:
            self._process = process

    def _speak_pyttsx3(self, text: str, settings: UtteranceSettings):
        def _do_speak():
            try:
                import pyttsx3

                engine = pyttsx3.init()
                engine.setProperty('rate', int(BASE_WPM * settings.rate))
                engine.setProperty('volume', settings.volume)

                if self.config.voice:
                    for v in engine.getProperty('voices'):
                        if self.config.voice.lower() in v.name.lower():
                            engine.setProperty('voice', v.id)
                            break

                with self._lock:
                    self._pyttsx3_engine = engine
                engine.say(text)
                engine.runAndWait()
            except Exception as e:
                logger.warning(f"pyttsx3 failed: {e}")
            finally:
                with self._lock:
                    self._pyttsx3_engine = None

        thread = threading.Thread(target=_do_speak, daemon=True)
        with self._lock:
            self._pyttsx3_thread = thread
        thread.start()

    def cancel(self):
        """Stop the utterance in progress, if any."""
        with self._lock:
            process, self._process = self._process, None
            pyttsx3_engine = self._pyttsx3_engine

        if process is not None and process.poll() is None:
            process.terminate()
            # Runs on the event loop thread; reaping happens off it.
            reaper = threading.Thread(target=self._reap, args=(process,), daemon=True)
            self._reaper = reaper
            reaper.start()

        if pyttsx3_engine is not None:
            pyttsx3_engine.stop()

    @staticmethod
    def _reap(process: subprocess.Popen):
        try:
            process.wait(timeout=REAP_TIMEOUT)
        except subprocess.TimeoutExpired:
            logger.debug("TTS process ignored terminate, killing it")
            process.kill()

    def wait(self, timeout: float = 10.0):
        """Wait for the current utterance to finish."""
        with self._lock:
            process = self._process
            thread = self._pyttsx3_thread

        if process is not None:
            try:
                process.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                logger.debug("TTS still speaking after wait timeout")
        if thread is not None and thread.is_alive():
            thread.join(timeout=timeout)


def check_tts() -> dict:
    """Report configured and installed TTS engines."""
    tts_config = TTSConfig.from_env()
    return {
        "configured_engine": tts_config.engine.value,
        "available_engines": [e.value for e in get_available_engines()],
        "platform": platform.system(),
    }
