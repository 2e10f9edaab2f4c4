"""Chord events, note names and the welcome progression."""

import math
import re
from dataclasses import dataclass

from .errors import ConfigInvalid

# Semitone offsets from A in the same octave (A4 = 440 Hz standard tuning)
NOTE_SEMITONES = {
    "C": -9, "D": -7, "E": -5, "F": -4, "G": -2, "A": 0, "B": 2
}

NOTE_PATTERN = re.compile(r"^([A-Ga-g])([b#])?([0-8])$")

# "A4 C#5 E5:1.0" or "440,554.37,659.25:0.5"
CHORD_TOKEN_PATTERN = re.compile(r"^\s*(?P<notes>[^:]+?)\s*(?::\s*(?P<duration>[0-9.]+))?\s*$")


@dataclass(frozen=True)
class ChordEvent:
    """A set of simultaneous sine partials and how long they sound.

    Attributes:
        frequencies: Partial frequencies in Hz, in order
        duration:    Seconds before the progression advances
    """

    frequencies: tuple[float, ...]
    duration: float

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "frequencies", tuple(float(f) for f in self.frequencies))
            object.__setattr__(self, "duration", float(self.duration))
        except (TypeError, ValueError):
            raise ConfigInvalid(f"chord values must be numbers: {self.frequencies!r}, {self.duration!r}") from None
        if not self.frequencies:
            raise ConfigInvalid("chord must have at least one frequency")
        if any(not (math.isfinite(f) and f > 0) for f in self.frequencies):
            raise ConfigInvalid(f"chord frequencies must be positive, got {self.frequencies}")
        if not (math.isfinite(self.duration) and self.duration > 0):
            raise ConfigInvalid(f"chord duration must be positive, got {self.duration}")


def note_to_frequency(note: str) -> float | None:
    """Convert a note like 'C#5' to frequency in Hz.

    Format: [A-G][b/#]?[0-8]
    Examples: A4=440, C#5=554.37, Eb4=311.13
    """
    match = NOTE_PATTERN.match(note.strip())
    if not match:
        return None

    semitones = NOTE_SEMITONES[match.group(1).upper()]
    accidental = match.group(2)
    octave = int(match.group(3))

    if accidental == "b":
        semitones -= 1
    elif accidental == "#":
        semitones += 1

    semitones += (octave - 4) * 12
    return 440.0 * (2.0 ** (semitones / 12.0))


def frequency_to_note(frequency: float) -> str:
    """Name the nearest equal-tempered note, preferring sharps."""
    names = ["A", "A#", "B", "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#"]
    semitones = round(12 * math.log2(frequency / 440.0))
    name = names[semitones % 12]
    # Octave numbers change at C, which sits 3 semitones above A
    octave = 4 + (semitones + 9) // 12
    return f"{name}{octave}"


def parse_pitch(token: str) -> float:
    """Parse a note name or a bare frequency into Hz."""
    freq = note_to_frequency(token)
    if freq is not None:
        return round(freq, 2)
    try:
        return float(token)
    except ValueError:
        raise ConfigInvalid(f"not a note or frequency: {token!r}") from None


def parse_chord(text: str, default_duration: float = 1.0) -> ChordEvent:
    """Parse a chord token such as "A4 C#5 E5:1.0" into a ChordEvent.

    Pitches may be separated by spaces or commas. The duration suffix is
    optional.
    """
    match = CHORD_TOKEN_PATTERN.match(text)
    if not match:
        raise ConfigInvalid(f"cannot parse chord: {text!r}")

    pitches = [p for p in re.split(r"[\s,]+", match.group("notes")) if p]
    duration = match.group("duration")
    return ChordEvent(
        frequencies=tuple(parse_pitch(p) for p in pitches),
        duration=duration if duration else default_duration,
    )


def progression_from_data(items: list[dict]) -> tuple[ChordEvent, ...]:
    """Build a progression from config data.

    Each item has a "duration" and either "notes" (names) or "frequencies".
    """
    if not isinstance(items, (list, tuple)):
        raise ConfigInvalid("progression must be a list of chords")
    chords = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise ConfigInvalid(f"progression entry {i} must be an object")
        key = "notes" if "notes" in item else "frequencies"
        values = item.get(key) or ()
        if not isinstance(values, (list, tuple)):
            raise ConfigInvalid(f"progression entry {i}: {key} must be a list, got {values!r}")
        if key == "notes":
            freqs = tuple(parse_pitch(str(n)) for n in values)
        else:
            freqs = tuple(values)
        chords.append(ChordEvent(frequencies=freqs, duration=item.get("duration", 1.0)))
    return validate_progression(chords)


def validate_progression(progression) -> tuple[ChordEvent, ...]:
    """Return the progression as a tuple, raising ConfigInvalid if it is empty."""
    chords = tuple(progression)
    if not chords:
        raise ConfigInvalid("progression must contain at least one chord")
    for chord in chords:
        if not isinstance(chord, ChordEvent):
            raise ConfigInvalid(f"progression entries must be ChordEvent, got {type(chord).__name__}")
    return chords


def total_duration(progression) -> float:
    """Length of one pass through the progression, summed in order."""
    total = 0.0
    for chord in progression:
        total += chord.duration
    return total


A_MAJOR = ChordEvent((440.0, 554.37, 659.25), 1.0)     # A4, C#5, E5
B_MINOR = ChordEvent((493.88, 587.33, 739.99), 1.0)    # B4, D5, F#5
C_MAJOR = ChordEvent((523.25, 659.25, 783.99), 1.0)    # C5, E5, G5
D_MAJOR = ChordEvent((587.33, 739.99, 880.00), 1.0)    # D5, F#5, A5

WELCOME_PROGRESSION: tuple[ChordEvent, ...] = (
    A_MAJOR,
    B_MINOR,
    C_MAJOR,
    D_MAJOR,
    A_MAJOR,
)
