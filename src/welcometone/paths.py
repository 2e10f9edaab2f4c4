"""Centralized path management for welcometone using XDG conventions.

All path functions (not constants) so WELCOMETONE_DIR is checked at call time.
When WELCOMETONE_DIR is set, all subdirectories live under it.
Otherwise, platformdirs determines OS-appropriate locations.
"""

import os
from pathlib import Path

from platformdirs import user_cache_dir, user_data_dir

_APP_NAME = "welcometone"

DEFAULT_TONE_FILENAME = "welcome_music.wav"


def _override_root() -> Path | None:
    """Return the WELCOMETONE_DIR override path, or None."""
    val = os.environ.get("WELCOMETONE_DIR")
    return Path(val) if val else None


# -- Config ------------------------------------------------------------------

def config_dir() -> Path:
    """Config directory (config.json)."""
    root = _override_root()
    if root:
        return root / "config"
    # macOS has no separate XDG config dir; share the data dir there too.
    return Path(user_data_dir(_APP_NAME))


def config_file() -> Path:
    return config_dir() / "config.json"


# -- Data --------------------------------------------------------------------

def data_dir() -> Path:
    """Persistent data (the rendered welcome tone)."""
    root = _override_root()
    if root:
        return root / "data"
    return Path(user_data_dir(_APP_NAME))


def default_tone_path(filename: str = DEFAULT_TONE_FILENAME) -> Path:
    return data_dir() / filename


# -- Cache -------------------------------------------------------------------

def cache_dir() -> Path:
    """Expendable cached files (tones/)."""
    root = _override_root()
    if root:
        return root / "cache"
    return Path(user_cache_dir(_APP_NAME))


def tones_dir() -> Path:
    return cache_dir() / "tones"


# -- Helpers -----------------------------------------------------------------

def ensure_dir(path: Path) -> Path:
    """Create *path* (and parents) if missing, then return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path
