"""chordtone - Chord progression tone rendering to PCM WAV."""

from .errors import (
    RenderError,
    ConfigInvalid,
    OutputPathUnwritable,
    EncodingFailure,
)
from .progression import (
    ChordEvent,
    WELCOME_PROGRESSION,
    NOTE_SEMITONES,
    note_to_frequency,
    frequency_to_note,
    parse_chord,
    progression_from_data,
    total_duration,
)
from .synthesis import (
    AudioRenderConfig,
    DEFAULT_CONFIG,
    chord_at,
    chord_index_at,
    fade_envelope,
    synthesize,
    to_pcm,
    render,
)

__version__ = "0.1.0"
__all__ = [
    "RenderError",
    "ConfigInvalid",
    "OutputPathUnwritable",
    "EncodingFailure",
    "ChordEvent",
    "WELCOME_PROGRESSION",
    "NOTE_SEMITONES",
    "note_to_frequency",
    "frequency_to_note",
    "parse_chord",
    "progression_from_data",
    "total_duration",
    "AudioRenderConfig",
    "DEFAULT_CONFIG",
    "chord_at",
    "chord_index_at",
    "fade_envelope",
    "synthesize",
    "to_pcm",
    "render",
]
