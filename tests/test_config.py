"""
Tests for configuration loading and validated settings.
"""

import os
from unittest.mock import patch

import pytest

from sceneware.config import DEFAULTS, Config, EngineSettings, UtteranceSettings
from sceneware.exceptions import ConfigurationError


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch):
    """Run in an empty directory without SN_* environment variables."""
    monkeypatch.chdir(tmp_path)
    for key in DEFAULTS:
        monkeypatch.delenv(key, raising=False)
    return tmp_path


class TestConfig:

    def test_defaults(self, isolated_cwd):
        cfg = Config()
        assert cfg.get_int("SN_DETECTION_INTERVAL_MS") == 4000
        assert cfg.get_float("SN_MIN_CONFIDENCE") == 0.5
        assert cfg.get("SN_DETECTION_BACKEND") == "cuda"

    def test_env_file_then_environment(self, isolated_cwd):
        (isolated_cwd / ".env").write_text(
            "# comment\n"
            "SN_MAX_OBJECTS=3\n"
            "SN_SPEECH_LANG=\"pl-PL\"\n"
            "UNRELATED=1\n"
        )

        with patch.dict(os.environ, {"SN_MAX_OBJECTS": "7"}):
            cfg = Config()

        assert cfg.get_int("SN_MAX_OBJECTS") == 7
        assert cfg.get("SN_SPEECH_LANG") == "pl-PL"
        assert "UNRELATED" not in cfg.to_dict()

    def test_typed_getters_fall_back(self, isolated_cwd):
        cfg = Config()
        cfg.set("SN_MAX_OBJECTS", "many")
        assert cfg.get_int("SN_MAX_OBJECTS", 5) == 5
        cfg.set("SN_MIN_CONFIDENCE", "high")
        assert cfg.get_float("SN_MIN_CONFIDENCE", 0.5) == 0.5

    def test_save_and_reload(self, isolated_cwd):
        cfg = Config()
        cfg.set("SN_DETECTION_INTERVAL_MS", "2500")
        cfg.save(isolated_cwd / ".env")

        reloaded = Config()
        assert reloaded.get_int("SN_DETECTION_INTERVAL_MS") == 2500

    def test_save_keys_only(self, isolated_cwd):
        env = isolated_cwd / ".env"
        env.write_text("SN_MAX_OBJECTS=3\nSN_MIN_CONFIDENCE=0.4\n")
        cfg = Config()
        cfg.set("SN_MAX_OBJECTS", "9")
        cfg.set("SN_MIN_CONFIDENCE", "0.9")
        cfg.save(env, keys_only=["SN_MAX_OBJECTS"])

        assert env.read_text() == "SN_MAX_OBJECTS=9\nSN_MIN_CONFIDENCE=0.4\n"


class TestEngineSettings:

    def test_from_config(self, isolated_cwd):
        cfg = Config()
        cfg.set("SN_DETECTION_INTERVAL_MS", "1500")
        cfg.set("SN_HISTORY_SIZE", "3")

        settings = EngineSettings.from_config(cfg)
        assert settings.detection_interval_ms == 1500
        assert settings.history_size == 3
        assert settings.interval_seconds == pytest.approx(1.5)
        assert settings.debounce_seconds == pytest.approx(0.1)

    def test_merged_ignores_none(self):
        settings = EngineSettings().merged(min_confidence=None, max_objects=2)
        assert settings.min_confidence == 0.5
        assert settings.max_objects == 2

    def test_invalid_from_config(self, isolated_cwd):
        cfg = Config()
        cfg.set("SN_MIN_CONFIDENCE", "2")
        with pytest.raises(ConfigurationError):
            EngineSettings.from_config(cfg)


class TestUtteranceSettings:

    def test_defaults(self):
        settings = UtteranceSettings()
        assert (settings.rate, settings.pitch, settings.volume) == (1.0, 1.0, 1.0)
        assert settings.lang == "en-US"

    def test_with_rate(self):
        settings = UtteranceSettings(volume=0.5).with_rate(2.0)
        assert settings.rate == 2.0
        assert settings.volume == 0.5

    @pytest.mark.parametrize("rate", [0.0, 10.5])
    def test_rate_bounds(self, rate):
        with pytest.raises(ConfigurationError):
            UtteranceSettings().with_rate(rate)
