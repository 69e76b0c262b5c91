"""
Notation formatter - note events back to bar|beat text.

Output re-interprets to the same notes: notes are grouped by time
position, and velocity, duration and probability are only written when
they change from the running state.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from chuk_mcp_notation.constants import (
    DEFAULT_DURATION,
    DEFAULT_PROBABILITY,
    DEFAULT_VELOCITY,
    DEFAULT_VELOCITY_DEVIATION,
    MIDI_MAX,
    TIME_EPSILON,
)
from chuk_mcp_notation.core.pitch import midi_to_note_name
from chuk_mcp_notation.core.rhythm import TimeSignature, format_number
from chuk_mcp_notation.models.note import NoteEvent


@dataclass
class _TimeGroup:
    bar: int
    beat: float
    notes: list[NoteEvent] = field(default_factory=list)


@dataclass
class _RunningState:
    velocity: int = DEFAULT_VELOCITY
    velocity_deviation: int = DEFAULT_VELOCITY_DEVIATION
    duration: float = DEFAULT_DURATION
    probability: float = DEFAULT_PROBABILITY


def _bar_beat(start_time: float, ts: TimeSignature) -> tuple[int, float]:
    beats = ts.to_musical_beats(round(start_time * 1000) / 1000)
    bar = int(beats // ts.beats_per_bar) + 1
    return bar, beats % ts.beats_per_bar + 1


def _group_by_time(notes: list[NoteEvent], ts: TimeSignature) -> list[_TimeGroup]:
    groups: list[_TimeGroup] = []
    for note in notes:
        bar, beat = _bar_beat(note.start_time, ts)
        current = groups[-1] if groups else None
        if current is None or current.bar != bar or abs(current.beat - beat) > TIME_EPSILON:
            current = _TimeGroup(bar, beat)
            groups.append(current)
        current.notes.append(note)
    return groups


def _velocity_elements(note: NoteEvent, state: _RunningState) -> list[str]:
    if note.velocity_deviation > 0:
        low = max(1, min(MIDI_MAX, note.velocity))
        high = min(MIDI_MAX, low + note.velocity_deviation)
        current_low = max(1, min(MIDI_MAX, state.velocity))
        current_high = min(MIDI_MAX, current_low + state.velocity_deviation)
        if (low, high) == (current_low, current_high):
            return []
        state.velocity = low
        state.velocity_deviation = high - low
        return [f"v{low}"] if high == low else [f"v{low}-{high}"]

    if note.velocity != state.velocity or state.velocity_deviation > 0:
        state.velocity = note.velocity
        state.velocity_deviation = 0
        return [f"v{note.velocity}"]
    return []


def format_notation(
    notes: Iterable[NoteEvent],
    time_signature: TimeSignature | None = None,
) -> str:
    """
    Format note events as bar|beat notation.

    Args:
        notes: Note events (times in quarter-note beats)
        time_signature: Time signature, 4/4 by default

    Returns:
        bar|beat text, empty for no notes
    """
    ts = time_signature or TimeSignature.COMMON_TIME
    ordered = sorted(notes, key=lambda n: (n.start_time, n.pitch))
    if not ordered:
        return ""

    elements: list[str] = []
    state = _RunningState()

    for group in _group_by_time(ordered, ts):
        for note in group.notes:
            elements.extend(_velocity_elements(note, state))

            duration = ts.to_musical_beats(note.duration)
            if abs(duration - state.duration) > TIME_EPSILON:
                elements.append(f"t{format_number(duration)}")
                state.duration = duration

            if abs(note.probability - state.probability) > TIME_EPSILON:
                elements.append(f"p{format_number(note.probability)}")
                state.probability = note.probability

            elements.append(midi_to_note_name(note.pitch))

        elements.append(f"{group.bar}|{format_number(group.beat)}")

    return " ".join(elements)
