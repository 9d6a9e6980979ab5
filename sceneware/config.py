"""
Sceneware Configuration Module

Handles loading configuration from:
1. .env file
2. Environment variables
3. Default values

Validated engine settings are built on top of the raw string values.

Usage:
    from sceneware.config import config, EngineSettings

    interval = config.get_int("SN_DETECTION_INTERVAL_MS", 4000)
    settings = EngineSettings.from_config()
"""

__all__ = [
    "config",
    "Config",
    "DEFAULTS",
    "CONFIG_CATEGORIES",
    "EngineSettings",
    "UtteranceSettings",
]

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ConfigurationError

# Default configuration values
DEFAULTS = {
    # Detection loop
    "SN_DETECTION_INTERVAL_MS": "4000",
    "SN_MIN_CONFIDENCE": "0.5",
    "SN_MAX_OBJECTS": "5",
    "SN_MIN_PERSON_AREA": "50000",   # px^2, largest-to-largest fallback
    "SN_NARRATION_DEBOUNCE_MS": "100",
    "SN_HISTORY_SIZE": "20",

    # Speech
    "SN_SPEECH_RATE": "1.0",         # multiplier, 1.0 = normal speed
    "SN_SPEECH_PITCH": "1.0",
    "SN_SPEECH_VOLUME": "1.0",
    "SN_SPEECH_LANG": "en-US",
    "SN_TTS_ENGINE": "auto",         # auto, espeak, say, pyttsx3, powershell
    "SN_TTS_VOICE": "",

    # Detection provider
    "SN_YOLO_MODEL": "yolov8n.pt",
    "SN_DETECTION_BACKEND": "cuda",  # host-supplied; cpu on machines without GPU
    "SN_FALLBACK_BACKEND": "cpu",

    # Camera
    "SN_CAMERA_DEVICE": "0",

    # Logging
    "SN_LOG_LEVEL": "INFO",
    "SN_LOG_FILE": "",
}

# Configuration categories for `sceneware config --show`
CONFIG_CATEGORIES = {
    "Detection Loop": [
        ("SN_DETECTION_INTERVAL_MS", "Interval (ms)", "Delay between detection cycles"),
        ("SN_MIN_CONFIDENCE", "Min Confidence", "Discard detections below this confidence"),
        ("SN_MAX_OBJECTS", "Max Objects", "Narrate at most this many objects"),
        ("SN_MIN_PERSON_AREA", "Min Person Area", "Pixel area for largest-person fallback"),
        ("SN_NARRATION_DEBOUNCE_MS", "Debounce (ms)", "Wait after cancelling speech"),
        ("SN_HISTORY_SIZE", "History Size", "Narrations kept in memory"),
    ],
    "Speech": [
        ("SN_SPEECH_RATE", "Rate", "Speech rate multiplier (1.0 = normal)"),
        ("SN_SPEECH_PITCH", "Pitch", "Speech pitch multiplier"),
        ("SN_SPEECH_VOLUME", "Volume", "Speech volume (0.0 - 1.0)"),
        ("SN_SPEECH_LANG", "Language", "Speech language tag"),
        ("SN_TTS_ENGINE", "TTS Engine", "auto, espeak, say, pyttsx3, powershell"),
        ("SN_TTS_VOICE", "TTS Voice", "Preferred voice name (engine-specific)"),
    ],
    "Detection Provider": [
        ("SN_YOLO_MODEL", "YOLO Model", "Model file or name"),
        ("SN_DETECTION_BACKEND", "Backend", "Primary compute backend (cuda, mps, cpu)"),
        ("SN_FALLBACK_BACKEND", "Fallback Backend", "Backend used after a backend fault"),
    ],
    "Camera": [
        ("SN_CAMERA_DEVICE", "Camera Device", "OpenCV camera index"),
    ],
    "Logging": [
        ("SN_LOG_LEVEL", "Log Level", "DEBUG, INFO, WARNING, ERROR"),
        ("SN_LOG_FILE", "Log File", "Path to log file (empty = console only)"),
    ],
}


class Config:
    """Configuration manager for Sceneware"""

    def __init__(self):
        self._config: Dict[str, str] = {}
        self._env_file: Optional[Path] = None
        self._load()

    def _find_env_file(self) -> Optional[Path]:
        """Find .env file in current directory or parent directories"""
        current = Path.cwd()

        for _ in range(5):
            env_path = current / ".env"
            if env_path.exists():
                return env_path
            current = current.parent

        return None

    def _load(self):
        """Load configuration from .env file and environment"""
        self._config = DEFAULTS.copy()

        self._env_file = self._find_env_file()
        if self._env_file:
            self._load_env_file(self._env_file)

        # Environment wins over .env
        for key in DEFAULTS.keys():
            env_val = os.environ.get(key)
            if env_val is not None:
                self._config[key] = env_val

    def _load_env_file(self, path: Path):
        """Load configuration from .env file"""
        try:
            with open(path, "r") as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith("#"):
                        continue
                    if "=" in line:
                        key, _, value = line.partition("=")
                        key = key.strip()
                        value = value.strip().strip('"').strip("'")
                        if key in DEFAULTS:
                            self._config[key] = value
        except OSError:
            pass

    def get(self, key: str, default: Any = None) -> str:
        """Get configuration value"""
        return self._config.get(key, default or DEFAULTS.get(key, ""))

    def get_int(self, key: str, default: int = 0) -> int:
        """Get configuration value as integer"""
        try:
            return int(self.get(key, str(default)))
        except ValueError:
            return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Get configuration value as float"""
        try:
            return float(self.get(key, str(default)))
        except ValueError:
            return default

    def set(self, key: str, value: str):
        """Set configuration value"""
        self._config[key] = str(value)

    def save(self, path: Optional[Path] = None, keys_only: List[str] = None):
        """Save configuration to .env file.

        Args:
            path: Path to save to (default: current .env file)
            keys_only: If provided, only update these keys in an existing file
        """
        if path is None:
            path = self._env_file or Path.cwd() / ".env"

        if keys_only and path.exists():
            with open(path, "r") as f:
                existing_lines = f.readlines()

            updated_lines = []
            for line in existing_lines:
                stripped = line.strip()
                if stripped and not stripped.startswith("#") and "=" in stripped:
                    key = stripped.split("=", 1)[0].strip()
                    if key in keys_only and key in self._config:
                        updated_lines.append(f"{key}={self._config[key]}\n")
                        continue
                updated_lines.append(line)

            with open(path, "w") as f:
                f.writelines(updated_lines)

            self._env_file = path
            return

        lines = []
        for category, items in CONFIG_CATEGORIES.items():
            lines.append(f"\n# {category}")
            for key, label, desc in items:
                lines.append(f"{key}={self._config.get(key, DEFAULTS.get(key, ''))}")

        with open(path, "w") as f:
            f.write("# Sceneware Configuration\n")
            f.write("# Generated by: sceneware config --save\n")
            f.write("\n".join(lines) + "\n")

        self._env_file = path

    def to_dict(self) -> Dict[str, str]:
        """Get all configuration as dictionary"""
        return self._config.copy()

    def reload(self):
        """Reload configuration from files"""
        self._load()


# Global config instance
config = Config()


# =============================================================================
# VALIDATED SETTINGS
# =============================================================================

class EngineSettings(BaseModel):
    """Validated settings of the detection loop."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    detection_interval_ms: int = Field(4000, ge=1)
    min_confidence: float = Field(0.5, ge=0.0, le=1.0)
    max_objects: int = Field(5, ge=1)
    min_person_area: float = Field(50000.0, ge=0.0)
    narration_debounce_ms: int = Field(100, ge=0)
    history_size: int = Field(20, ge=0)

    @classmethod
    def from_config(cls, cfg: Optional[Config] = None) -> "EngineSettings":
        """Load from environment/.env"""
        cfg = cfg or config
        return cls.build(
            detection_interval_ms=cfg.get_int("SN_DETECTION_INTERVAL_MS", 4000),
            min_confidence=cfg.get_float("SN_MIN_CONFIDENCE", 0.5),
            max_objects=cfg.get_int("SN_MAX_OBJECTS", 5),
            min_person_area=cfg.get_float("SN_MIN_PERSON_AREA", 50000.0),
            narration_debounce_ms=cfg.get_int("SN_NARRATION_DEBOUNCE_MS", 100),
            history_size=cfg.get_int("SN_HISTORY_SIZE", 20),
        )

    @classmethod
    def build(cls, **values) -> "EngineSettings":
        """Validate values, raising ConfigurationError instead of pydantic's error."""
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid engine settings: {e}") from e

    def merged(self, **overrides) -> "EngineSettings":
        """Return a copy with ``overrides`` applied and re-validated."""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return self.build(**values)

    @property
    def interval_seconds(self) -> float:
        return self.detection_interval_ms / 1000.0

    @property
    def debounce_seconds(self) -> float:
        return self.narration_debounce_ms / 1000.0


class UtteranceSettings(BaseModel):
    """Fixed speech parameters applied to every narration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    rate: float = Field(1.0, ge=0.1, le=10.0)
    pitch: float = Field(1.0, ge=0.0, le=2.0)
    volume: float = Field(1.0, ge=0.0, le=1.0)
    lang: str = "en-US"

    @classmethod
    def from_config(cls, cfg: Optional[Config] = None) -> "UtteranceSettings":
        """Load from environment/.env"""
        cfg = cfg or config
        try:
            return cls(
                rate=cfg.get_float("SN_SPEECH_RATE", 1.0),
                pitch=cfg.get_float("SN_SPEECH_PITCH", 1.0),
                volume=cfg.get_float("SN_SPEECH_VOLUME", 1.0),
                lang=cfg.get("SN_SPEECH_LANG", "en-US"),
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid speech settings: {e}") from e

    def with_rate(self, rate: float) -> "UtteranceSettings":
        try:
            return UtteranceSettings(**{**self.model_dump(), "rate": rate})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid speech rate {rate!r}: {e}") from e
