"""
Pitch primitives - PitchClass and the note name resolver.

Note names use the convention where C3 is middle C (MIDI 60), so the
lowest MIDI note is C-2 and the highest is G8.
"""

from __future__ import annotations

import re
from enum import IntEnum

from chuk_mcp_notation.constants import MIDI_MAX, MIDI_MIN, ErrorMessages
from chuk_mcp_notation.errors import NotationRangeError

# Display name mappings (module level to avoid IntEnum member issues)
_FLAT_NAMES: list[str] = [
    "C",
    "Db",
    "D",
    "Eb",
    "E",
    "F",
    "Gb",
    "G",
    "Ab",
    "A",
    "Bb",
    "B",
]

_ACCIDENTALS: dict[str, int] = {"": 0, "#": 1, "b": -1}

NOTE_NAME_PATTERN = re.compile(r"^([A-Ga-g])([#b]?)(-?\d+)$")


class PitchClass(IntEnum):
    """
    The 7 natural pitch classes by semitone (0-11).

    Accidentals shift the natural by one semitone, so enharmonic names
    (C# and Db) land on the same integer.
    """

    C = 0
    D = 2
    E = 4
    F = 5
    G = 7
    A = 9
    B = 11

    @classmethod
    def semitone(cls, letter: str, accidental: str = "") -> int:
        """Semitone offset of a letter plus accidental, e.g. ('C', '#') -> 1."""
        try:
            natural = cls[letter.upper()]
        except KeyError:
            raise ValueError(f"Unknown pitch class: {letter}") from None
        if accidental not in _ACCIDENTALS:
            raise ValueError(f"Unknown accidental: {accidental}")
        return natural.value + _ACCIDENTALS[accidental]


def resolve(letter: str, accidental: str | None, octave: int) -> int:
    """
    Resolve a note name to a MIDI pitch number.

    midi = (octave + 2) * 12 + pitch class

    Args:
        letter: Note letter A-G (case-insensitive)
        accidental: '#', 'b', or None
        octave: Signed octave number

    Returns:
        MIDI pitch number

    Raises:
        NotationRangeError: If the result falls outside 0-127
    """
    accidental = accidental or ""
    midi = (octave + 2) * 12 + PitchClass.semitone(letter, accidental)
    if not MIDI_MIN <= midi <= MIDI_MAX:
        name = f"{letter.upper()}{accidental}{octave}"
        raise NotationRangeError(ErrorMessages.PITCH_OUT_OF_RANGE.format(pitch=midi, name=name))
    return midi


def parse_note_name(name: str) -> int:
    """Parse a note name like 'C3', 'F#-1' or 'Bb2' into a MIDI pitch."""
    match = NOTE_NAME_PATTERN.match(name.strip())
    if not match:
        raise ValueError(f"Invalid note name: {name}")
    letter, accidental, octave = match.groups()
    return resolve(letter, accidental, int(octave))


def midi_to_note_name(midi: int) -> str:
    """Convert a MIDI pitch to a note name with flat spelling (60 -> 'C3')."""
    if not MIDI_MIN <= midi <= MIDI_MAX:
        raise ValueError(f"Invalid MIDI pitch: {midi}")
    octave = midi // 12 - 2
    return f"{_FLAT_NAMES[midi % 12]}{octave}"
