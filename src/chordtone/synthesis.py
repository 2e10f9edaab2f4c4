"""Chord progression synthesis using additive partials and soft clipping."""

import logging
import math
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from scipy.io import wavfile

from .errors import ConfigInvalid, EncodingFailure, OutputPathUnwritable
from .progression import WELCOME_PROGRESSION, ChordEvent, total_duration, validate_progression

log = logging.getLogger(__name__)

# (multiple of the fundamental, relative amplitude)
HARMONICS = (
    (1.0, 1.0),
    (2.0, 0.5),
    (3.0, 0.25),
)

PARTIAL_GAIN = 0.2
CLIP_CEILING = 0.7

SUPPORTED_BIT_DEPTHS = (8, 16, 32)


@dataclass(frozen=True)
class AudioRenderConfig:
    """Settings for one render.

    Attributes:
        duration:    Total render length in seconds
        sample_rate: Frames per second
        channels:    Output channels (all carry the same signal)
        bit_depth:   PCM sample width of the written file
        fade:        Linear fade in/out length in seconds, over the whole render
    """

    duration: float = 5.0
    sample_rate: int = 44100
    channels: int = 2
    bit_depth: int = 16
    fade: float = 0.1

    @property
    def frame_count(self) -> int:
        return int(round(self.sample_rate * self.duration))

    def validate(self) -> "AudioRenderConfig":
        """Raise ConfigInvalid if any setting is out of range, else return self."""
        if isinstance(self.sample_rate, bool) or not isinstance(self.sample_rate, int):
            raise ConfigInvalid(f"sample_rate must be an integer, got {self.sample_rate!r}")
        if self.sample_rate <= 0:
            raise ConfigInvalid(f"sample_rate must be positive, got {self.sample_rate}")
        if not _is_finite_number(self.duration) or self.duration <= 0:
            raise ConfigInvalid(f"duration must be positive, got {self.duration!r}")
        if not _is_finite_number(self.fade) or self.fade < 0:
            raise ConfigInvalid(f"fade must be zero or positive, got {self.fade!r}")
        if self.fade * 2 > self.duration:
            raise ConfigInvalid(
                f"fade in and out ({self.fade}s each) do not fit in {self.duration}s"
            )
        if isinstance(self.channels, bool) or not isinstance(self.channels, int) or self.channels < 1:
            raise ConfigInvalid(f"channels must be an integer >= 1, got {self.channels!r}")
        if self.bit_depth not in SUPPORTED_BIT_DEPTHS:
            raise ConfigInvalid(
                f"bit_depth must be one of {SUPPORTED_BIT_DEPTHS}, got {self.bit_depth!r}"
            )
        if self.frame_count < 1:
            raise ConfigInvalid(
                f"{self.duration}s at {self.sample_rate} Hz renders no frames"
            )
        return self


DEFAULT_CONFIG = AudioRenderConfig()


def _is_finite_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def frame_times(config: AudioRenderConfig) -> np.ndarray:
    """Time in seconds of every frame."""
    return np.arange(config.frame_count, dtype=np.float64) / config.sample_rate


def fade_envelope(times: np.ndarray, config: AudioRenderConfig) -> np.ndarray:
    """Linear ramp up over the first `fade` seconds and down over the last."""
    times = np.asarray(times, dtype=np.float64)
    if config.fade == 0:
        return np.ones_like(times)
    fade_in = np.minimum(times / config.fade, 1.0)
    fade_out = np.minimum((config.duration - times) / config.fade, 1.0)
    return np.clip(fade_in * fade_out, 0.0, 1.0)


def chord_index_at(times: np.ndarray, progression) -> np.ndarray:
    """Index of the chord sounding at each time.

    The progression loops every `total_duration` seconds. Each chord owns
    the half-open interval [start, start + duration). A time that lands in
    no interval (a remainder equal to the cycle length after rounding)
    falls back to the first chord.
    """
    times = np.asarray(times, dtype=np.float64)
    cycle = np.fmod(times, total_duration(progression))

    index = np.full(cycle.shape, -1, dtype=np.int64)
    elapsed = 0.0
    for i, chord in enumerate(progression):
        end = elapsed + chord.duration
        hit = (index == -1) & (cycle >= elapsed) & (cycle < end)
        index[hit] = i
        elapsed = end

    index[index == -1] = 0
    return index


def chord_at(time: float, progression=WELCOME_PROGRESSION) -> ChordEvent:
    """The chord sounding at a single point in time."""
    progression = validate_progression(progression)
    return progression[int(chord_index_at(np.array([time]), progression)[0])]


def synthesize(
    config: AudioRenderConfig = DEFAULT_CONFIG,
    progression=WELCOME_PROGRESSION,
) -> np.ndarray:
    """Render the progression to float32 samples of shape (frames, channels).

    Each chord frequency contributes its fundamental plus the 2nd and 3rd
    harmonics at half and quarter amplitude, scaled by the fade envelope.
    The summed frame goes through tanh and is capped at CLIP_CEILING.
    """
    config.validate()
    progression = validate_progression(progression)

    times = frame_times(config)
    envelope = fade_envelope(times, config) * PARTIAL_GAIN
    index = chord_index_at(times, progression)

    mono = np.zeros_like(times)
    for i, chord in enumerate(progression):
        rows = np.flatnonzero(index == i)
        if rows.size == 0:
            continue
        t = times[rows]
        for freq in chord.frequencies:
            partial = np.zeros_like(t)
            for mult, amp in HARMONICS:
                partial += amp * np.sin(2.0 * np.pi * freq * mult * t)
            mono[rows] += partial * envelope[rows]

    clipped = (np.tanh(mono) * CLIP_CEILING).astype(np.float32)
    return np.repeat(clipped[:, np.newaxis], config.channels, axis=1)


def to_pcm(samples: np.ndarray, bit_depth: int = 16) -> np.ndarray:
    """Convert float samples in [-1, 1] to integer PCM for the given width."""
    clipped = np.clip(samples.astype(np.float64), -1.0, 1.0)
    if bit_depth == 16:
        return (clipped * 32767).astype(np.int16)
    if bit_depth == 32:
        return (clipped * 2147483647).astype(np.int32)
    if bit_depth == 8:
        # 8-bit WAV is unsigned with silence at 128
        return (clipped * 127 + 128).astype(np.uint8)
    raise ConfigInvalid(f"bit_depth must be one of {SUPPORTED_BIT_DEPTHS}, got {bit_depth!r}")


def write_wav(path: Path, samples: np.ndarray, sample_rate: int = 44100, bit_depth: int = 16) -> None:
    """Write float samples to a WAV file. No atomicity; see render()."""
    wavfile.write(str(path), sample_rate, to_pcm(samples, bit_depth))


def _prepare_output(path: Path) -> Path:
    """Remove any existing file at *path* and open a sibling temp file.

    Returns the temp file path. The parent directory must already exist.
    """
    parent = path.parent
    if not parent.is_dir():
        raise OutputPathUnwritable(f"directory does not exist: {parent}")
    if path.is_dir():
        raise OutputPathUnwritable(f"output path is a directory: {path}")

    try:
        path.unlink(missing_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=parent, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as exc:
        raise OutputPathUnwritable(f"cannot write to {path}: {exc}") from exc

    tmp_path = Path(tmp_name)
    try:
        os.close(fd)
        # mkstemp creates the file 0600
        os.chmod(tmp_path, 0o644)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise OutputPathUnwritable(f"cannot write to {path}: {exc}") from exc
    return tmp_path


def render(
    output_path: Path | str,
    config: AudioRenderConfig | None = None,
    progression=None,
) -> Path:
    """Render the progression to a WAV file at *output_path*.

    Any existing file at the path is replaced. Samples go to a temp file in
    the same directory which is renamed into place once complete, so after
    a failure no file is left at the path.

    Args:
        output_path: Destination WAV file
        config: Render settings (default: AudioRenderConfig())
        progression: ChordEvents to play (default: WELCOME_PROGRESSION)

    Returns:
        The output path

    Raises:
        ConfigInvalid: Bad settings or progression; nothing touched on disk
        OutputPathUnwritable: Destination cannot be created or replaced
        EncodingFailure: The WAV writer failed
    """
    config = (config or DEFAULT_CONFIG).validate()
    progression = validate_progression(WELCOME_PROGRESSION if progression is None else progression)
    path = Path(output_path)

    samples = synthesize(config, progression)
    tmp_path = _prepare_output(path)

    try:
        write_wav(tmp_path, samples, config.sample_rate, config.bit_depth)
        os.replace(tmp_path, path)
    except ValueError as exc:
        raise EncodingFailure(f"cannot encode {path.name}: {exc}", stage="encode") from exc
    except OSError as exc:
        raise EncodingFailure(f"writing {path} failed: {exc}", stage="write") from exc
    finally:
        tmp_path.unlink(missing_ok=True)

    log.debug(
        "rendered %d frames x %d channels (%d-bit, %d Hz) to %s",
        config.frame_count, config.channels, config.bit_depth, config.sample_rate, path,
    )
    return path
