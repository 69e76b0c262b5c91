"""
Core notation primitives - the leaf layer.

Everything else composes on these:
- PitchClass / resolve: note names to MIDI pitch numbers
- TimeSignature: beats per bar and beat unit
- Time conversion: bar|beat positions and durations to beats and back
"""

from chuk_mcp_notation.core.pitch import (
    PitchClass,
    midi_to_note_name,
    parse_note_name,
    resolve,
)
from chuk_mcp_notation.core.rhythm import (
    TimeSignature,
    bar_beat_to_beats,
    beats_to_bar_beat,
    beats_to_bar_beat_duration,
    duration_to_beats,
    format_number,
    parse_beat_value,
    position_to_beats,
)

__all__ = [
    # Pitch
    "PitchClass",
    "resolve",
    "parse_note_name",
    "midi_to_note_name",
    # Rhythm
    "TimeSignature",
    "position_to_beats",
    "bar_beat_to_beats",
    "duration_to_beats",
    "parse_beat_value",
    "beats_to_bar_beat",
    "beats_to_bar_beat_duration",
    "format_number",
]
