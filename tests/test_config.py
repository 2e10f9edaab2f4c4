#!/usr/bin/env python3
"""Unit tests for config.py functions."""

import json
import os
from unittest.mock import patch

import pytest

from chordtone import AudioRenderConfig, ChordEvent, ConfigInvalid, WELCOME_PROGRESSION
from welcometone.config import (
    DEFAULT_CONFIG,
    get_config,
    get_output_filename,
    get_progression,
    get_render_config,
    save_config,
)


class TestGetConfig:
    """Tests for get_config function."""

    def test_get_config_returns_dict(self, tmp_path):
        """Test that get_config returns a dictionary."""
        with patch.dict(os.environ, {"WELCOMETONE_DIR": str(tmp_path)}):
            config = get_config()
            assert isinstance(config, dict)

    def test_get_config_creates_default_file(self, tmp_path):
        """Test missing config file is created with defaults."""
        with patch.dict(os.environ, {"WELCOMETONE_DIR": str(tmp_path)}):
            config = get_config()
            assert config == DEFAULT_CONFIG
            with open(tmp_path / "config" / "config.json") as f:
                assert json.load(f) == DEFAULT_CONFIG

    def test_get_config_merges_with_defaults(self, tmp_path):
        """Test that loaded config is merged with defaults section by section."""
        with patch.dict(os.environ, {"WELCOMETONE_DIR": str(tmp_path)}):
            save_config({"render": {"fade": 0.25}})
            config = get_config()
            assert config["render"]["fade"] == 0.25
            assert config["render"]["sample_rate"] == 44100
            assert config["output"]["filename"] == "welcome_music.wav"

    def test_get_config_does_not_mutate_defaults(self, tmp_path):
        """Test merging leaves DEFAULT_CONFIG untouched."""
        with patch.dict(os.environ, {"WELCOMETONE_DIR": str(tmp_path)}):
            save_config({"render": {"fade": 0.25}})
            get_config()["render"]["channels"] = 9
            assert DEFAULT_CONFIG["render"]["fade"] == 0.1
            assert DEFAULT_CONFIG["render"]["channels"] == 2

    def test_get_config_invalid_json_returns_defaults(self, tmp_path):
        """Test corrupt config falls back to defaults."""
        with patch.dict(os.environ, {"WELCOMETONE_DIR": str(tmp_path)}):
            (tmp_path / "config").mkdir()
            (tmp_path / "config" / "config.json").write_text("{not json")
            assert get_config() == DEFAULT_CONFIG

    def test_get_config_non_object_returns_defaults(self, tmp_path):
        """Test a JSON list falls back to defaults."""
        with patch.dict(os.environ, {"WELCOMETONE_DIR": str(tmp_path)}):
            save_config([1, 2, 3])
            assert get_config() == DEFAULT_CONFIG


class TestSaveConfig:
    """Tests for save_config function."""

    def test_save_config_creates_valid_json(self, tmp_path):
        """Test that save_config creates valid JSON."""
        test_config = {"test": "value"}

        with patch.dict(os.environ, {"WELCOMETONE_DIR": str(tmp_path)}):
            save_config(test_config)

            config_file = tmp_path / "config" / "config.json"
            assert config_file.exists()

            with open(config_file) as f:
                loaded = json.load(f)
            assert loaded == test_config


class TestGetRenderConfig:
    """Tests for get_render_config function."""

    def test_defaults(self):
        """Test default config gives default render settings."""
        with patch.dict(os.environ, {}, clear=True):
            assert get_render_config(DEFAULT_CONFIG) == AudioRenderConfig()

    def test_values_from_config(self):
        """Test values are read from the render section."""
        config = {"render": {"duration": 2, "sample_rate": 22050.0, "channels": 1, "fade": 0}}
        with patch.dict(os.environ, {}, clear=True):
            result = get_render_config(config)
        assert result == AudioRenderConfig(duration=2.0, sample_rate=22050, channels=1, fade=0.0)
        assert isinstance(result.sample_rate, int)

    def test_env_overrides(self):
        """Test environment variables override the config file."""
        env = {"WELCOMETONE_SAMPLE_RATE": "8000", "WELCOMETONE_DURATION": "1.5"}
        with patch.dict(os.environ, env, clear=True):
            result = get_render_config(DEFAULT_CONFIG)
        assert result.sample_rate == 8000
        assert result.duration == 1.5

    def test_bad_type(self):
        """Test non-numeric values raise ConfigInvalid."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigInvalid):
                get_render_config({"render": {"channels": "stereo"}})

    def test_fractional_sample_rate(self):
        """Test a fractional sample rate is rejected."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigInvalid):
                get_render_config({"render": {"sample_rate": 44100.5}})

    @pytest.mark.parametrize("config", [{"render": "loud"}, {"render": [1, 2]}, "render"])
    def test_wrong_section_type(self, config):
        """Test a render section that is not an object raises ConfigInvalid."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigInvalid):
                get_render_config(config)

    def test_saved_wrong_section_type(self, tmp_path):
        """Test a saved non-object render section surfaces as ConfigInvalid."""
        with patch.dict(os.environ, {"WELCOMETONE_DIR": str(tmp_path)}):
            save_config({"render": "loud"})
            with pytest.raises(ConfigInvalid):
                get_render_config()

    def test_null_section_uses_defaults(self):
        """Test a null render section means defaults."""
        with patch.dict(os.environ, {}, clear=True):
            assert get_render_config({"render": None}) == AudioRenderConfig()

    @patch("welcometone.config.get_config")
    def test_loads_config_when_not_given(self, mock_get_config):
        """Test falls back to get_config()."""
        mock_get_config.return_value = {"render": {"bit_depth": 8}}
        with patch.dict(os.environ, {}, clear=True):
            assert get_render_config().bit_depth == 8


class TestGetProgression:
    """Tests for get_progression function."""

    def test_default(self):
        """Test None means the built-in progression."""
        assert get_progression(DEFAULT_CONFIG) is WELCOME_PROGRESSION

    def test_from_notes(self):
        """Test a progression given as note names."""
        config = {"progression": [{"notes": ["A4", "A5"], "duration": 2.0}]}
        assert get_progression(config) == (ChordEvent((440.0, 880.0), 2.0),)

    def test_not_a_list(self):
        """Test a non-list progression is invalid."""
        with pytest.raises(ConfigInvalid):
            get_progression({"progression": {"notes": ["A4"]}})

    def test_empty(self):
        """Test an empty list is invalid."""
        with pytest.raises(ConfigInvalid):
            get_progression({"progression": []})


class TestGetOutputFilename:
    """Tests for get_output_filename function."""

    def test_default(self):
        """Test default file name."""
        assert get_output_filename(DEFAULT_CONFIG) == "welcome_music.wav"

    def test_configured(self):
        """Test configured file name."""
        assert get_output_filename({"output": {"filename": "intro.wav"}}) == "intro.wav"

    def test_missing_section(self):
        """Test missing section falls back to default."""
        assert get_output_filename({}) == "welcome_music.wav"

    @pytest.mark.parametrize("config", [{"output": "x"}, {"output": {"filename": 5}}])
    def test_wrong_types(self, config):
        """Test wrong-typed output settings raise ConfigInvalid."""
        with pytest.raises(ConfigInvalid):
            get_output_filename(config)
