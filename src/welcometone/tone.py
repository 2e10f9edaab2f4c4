"""Prepare the onboarding welcome tone, reusing cached renders."""

import hashlib
import logging
from pathlib import Path

from chordtone import AudioRenderConfig, OutputPathUnwritable, RenderError, render

from .config import get_config, get_output_filename, get_progression, get_render_config
from .paths import ensure_dir, tones_dir

log = logging.getLogger(__name__)

# Bump when synthesis output changes for the same inputs
CACHE_VERSION = "v1"

_tone_cache: dict[str, Path] = {}


def cache_key(config: AudioRenderConfig, progression) -> str:
    """Stable hash of everything that determines the rendered bytes."""
    parts = [
        CACHE_VERSION,
        f"{config.duration!r}",
        f"{config.sample_rate}",
        f"{config.channels}",
        f"{config.bit_depth}",
        f"{config.fade!r}",
    ]
    for chord in progression:
        freqs = ",".join(repr(f) for f in chord.frequencies)
        parts.append(f"{freqs}@{chord.duration!r}")
    return hashlib.sha256("|".join(parts).encode()).hexdigest()[:16]


def cached_tone_path(config: AudioRenderConfig, progression, filename: str) -> Path:
    stem = Path(filename).stem or "tone"
    return tones_dir() / f"{stem}_{cache_key(config, progression)}.wav"


def get_welcome_tone(config: dict | None = None) -> Path:
    """Return a rendered welcome tone, rendering it only if not cached.

    Raises:
        RenderError: Settings are invalid or the file could not be written
    """
    if config is None:
        config = get_config()
    render_config = get_render_config(config)
    progression = get_progression(config)

    path = cached_tone_path(render_config, progression, get_output_filename(config))
    key = str(path)
    if key in _tone_cache and _tone_cache[key].exists():
        return _tone_cache[key]

    if path.exists():
        log.debug("using cached tone %s", path)
    else:
        try:
            ensure_dir(path.parent)
        except OSError as exc:
            raise OutputPathUnwritable(f"cannot create {path.parent}: {exc}") from exc
        render(path, render_config, progression)
        log.info("rendered welcome tone to %s", path)

    _tone_cache[key] = path
    return path


def prepare_welcome_tone(config: dict | None = None) -> Path | None:
    """Get the welcome tone, or None if it could not be produced.

    The onboarding flow carries on without ambient audio when this fails.
    """
    try:
        return get_welcome_tone(config)
    except (RenderError, OSError):
        log.warning("Could not prepare welcome tone; continuing without it", exc_info=True)
        return None


def clear_cache() -> int:
    """Delete cached renders. Returns the number of files removed."""
    _tone_cache.clear()
    directory = tones_dir()
    if not directory.is_dir():
        return 0
    removed = 0
    for wav in directory.glob("*.wav"):
        wav.unlink(missing_ok=True)
        removed += 1
    log.debug("removed %d cached tones from %s", removed, directory)
    return removed
