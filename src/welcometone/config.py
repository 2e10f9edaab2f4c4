"""Configuration management for welcometone."""

import copy
import json
import os

from chordtone import AudioRenderConfig, ConfigInvalid, WELCOME_PROGRESSION, progression_from_data

from .paths import DEFAULT_TONE_FILENAME, config_dir, config_file, ensure_dir

DEFAULT_CONFIG = {
    "render": {
        "duration": 5.0,
        "sample_rate": 44100,
        "channels": 2,
        "bit_depth": 16,
        "fade": 0.1,
    },
    # None = built-in welcome progression, or a list like
    # [{"notes": ["A4", "C#5", "E5"], "duration": 1.0}, ...]
    "progression": None,
    "output": {
        "filename": DEFAULT_TONE_FILENAME,
    },
}


def get_config() -> dict:
    """Load configuration, creating default if needed."""
    ensure_dir(config_dir())
    cfg_file = config_file()

    if cfg_file.exists():
        try:
            with open(cfg_file) as f:
                config = json.load(f)
            if not isinstance(config, dict):
                return copy.deepcopy(DEFAULT_CONFIG)
            # Merge with defaults for any missing keys
            merged = copy.deepcopy(DEFAULT_CONFIG)
            for key, value in config.items():
                if isinstance(value, dict) and isinstance(merged.get(key), dict):
                    merged[key] = {**merged[key], **value}
                else:
                    merged[key] = value
            return merged
        except (json.JSONDecodeError, IOError):
            return copy.deepcopy(DEFAULT_CONFIG)
    else:
        save_config(DEFAULT_CONFIG)
        return copy.deepcopy(DEFAULT_CONFIG)


def save_config(config: dict) -> None:
    """Save configuration to file."""
    ensure_dir(config_dir())
    with open(config_file(), "w") as f:
        json.dump(config, f, indent=2)


def _coerce(value, kind, name: str):
    try:
        if kind is int and isinstance(value, float):
            if not value.is_integer():
                raise ValueError(value)
        return kind(value)
    except (TypeError, ValueError):
        raise ConfigInvalid(f"render.{name} must be {kind.__name__}, got {value!r}") from None


def _section(config, name: str) -> dict:
    """Return a dict section of the config; missing or null means empty."""
    if not isinstance(config, dict):
        raise ConfigInvalid(f"config must be an object, got {type(config).__name__}")
    section = config.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigInvalid(f"{name} must be an object, got {type(section).__name__}")
    return section


def get_render_config(config: dict | None = None) -> AudioRenderConfig:
    """Build the render settings (env vars override config file)."""
    if config is None:
        config = get_config()
    render = {**DEFAULT_CONFIG["render"], **_section(config, "render")}

    sample_rate = os.environ.get("WELCOMETONE_SAMPLE_RATE") or render["sample_rate"]
    duration = os.environ.get("WELCOMETONE_DURATION") or render["duration"]

    return AudioRenderConfig(
        duration=_coerce(duration, float, "duration"),
        sample_rate=_coerce(sample_rate, int, "sample_rate"),
        channels=_coerce(render["channels"], int, "channels"),
        bit_depth=_coerce(render["bit_depth"], int, "bit_depth"),
        fade=_coerce(render["fade"], float, "fade"),
    )


def get_progression(config: dict | None = None) -> tuple:
    """Get the configured chord progression, or the built-in one."""
    if config is None:
        config = get_config()
    if not isinstance(config, dict):
        raise ConfigInvalid(f"config must be an object, got {type(config).__name__}")
    items = config.get("progression")
    if items is None:
        return WELCOME_PROGRESSION
    if not isinstance(items, list):
        raise ConfigInvalid("progression must be a list of chords")
    return progression_from_data(items)


def get_output_filename(config: dict | None = None) -> str:
    """Get the file name used for the rendered tone."""
    if config is None:
        config = get_config()
    filename = _section(config, "output").get("filename")
    if filename is None or filename == "":
        return DEFAULT_TONE_FILENAME
    if not isinstance(filename, str):
        raise ConfigInvalid(f"output.filename must be a string, got {filename!r}")
    return filename
