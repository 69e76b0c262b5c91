"""
Flat-sequence notation - the legacy dialect.

Notes play one after another from time 0, each advancing the cursor by
its own duration unless a 't' modifier says otherwise:

    C3 D3 E3                 three notes at 0, 1, 2
    C3v90n2t1                velocity 90, two beats long, next note 1 beat later
    [C3 E3v80 G3]v70n2       chord; note modifiers override the chord's
    C3 R2 D3                 rests advance time (R alone is one beat)
    (C3 D3)*2 C4*3 [C3 G3]*2 repetition of groups, notes and chords
    C3 D3; G2 A2             voices separated by ';' each restart at 0

Velocity defaults to 70 and duration to 1 beat.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from chuk_mcp_notation.constants import (
    MIDI_MAX,
    MIDI_MIN,
    SEQUENCE_DEFAULT_DURATION,
    SEQUENCE_DEFAULT_VELOCITY,
    ErrorMessages,
)
from chuk_mcp_notation.core.pitch import resolve
from chuk_mcp_notation.errors import NotationRangeError, NotationSyntaxError
from chuk_mcp_notation.models.note import NoteEvent
from chuk_mcp_notation.notation.source import SourceText

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"\d*\.?\d+")
_INTEGER = re.compile(r"\d+")
_PITCH = re.compile(r"([A-G])([#b]?)(-?\d+)")
_MODIFIERS = "vnt"
_BOUNDARY = frozenset(" \t\r\n;)]")


@dataclass(frozen=True)
class Modifiers:
    """Optional per-element overrides: velocity, duration, time until next."""

    velocity: int | None = None
    duration: float | None = None
    advance: float | None = None


@dataclass(frozen=True)
class NoteElement:
    midi: int
    modifiers: Modifiers = field(default_factory=Modifiers)
    repeat: int = 1


@dataclass(frozen=True)
class ChordElement:
    notes: tuple[NoteElement, ...]
    modifiers: Modifiers = field(default_factory=Modifiers)
    repeat: int = 1


@dataclass(frozen=True)
class RestElement:
    beats: float
    repeat: int = 1


@dataclass(frozen=True)
class GroupElement:
    elements: tuple[Element, ...]
    modifiers: Modifiers = field(default_factory=Modifiers)
    repeat: int = 1


Element = NoteElement | ChordElement | RestElement | GroupElement


class SequenceParser:
    """Recursive-descent parser for the flat-sequence dialect."""

    def __init__(self, text: str) -> None:
        self.source = SourceText(text, dialect="sequence")
        self.text = text
        self.pos = 0

    # --- scanning -------------------------------------------------------

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _error(self, message: str, offset: int | None = None) -> NotationSyntaxError:
        return self.source.error(message, self.pos if offset is None else offset)

    def _unexpected(self) -> NotationSyntaxError:
        char = self._peek()
        return self._error(f"Unexpected '{char}'" if char else "Unexpected end of input")

    def _skip_space(self) -> None:
        while self._peek() and self._peek() in " \t\r\n":
            self.pos += 1

    def _match(self, pattern: re.Pattern[str]) -> re.Match[str] | None:
        match = pattern.match(self.text, self.pos)
        if match:
            self.pos = match.end()
        return match

    def _expect_boundary(self) -> None:
        if self._peek() and self._peek() not in _BOUNDARY:
            raise self._unexpected()

    # --- grammar --------------------------------------------------------

    def parse(self) -> list[list[Element]]:
        """Parse the whole text into voices of elements."""
        voices: list[list[Element]] = []
        while True:
            voices.append(self._elements(closing=""))
            if self._peek() == ";":
                self.pos += 1
                continue
            if self._peek():
                raise self._unexpected()
            return voices

    def _elements(self, closing: str) -> list[Element]:
        elements: list[Element] = []
        while True:
            self._skip_space()
            char = self._peek()
            if not char or char == ";" or char == closing:
                return elements
            elements.append(self._element())

    def _element(self) -> Element:
        char = self._peek()
        element: Element
        if char == "(":
            start = self.pos
            self.pos += 1
            inner = self._elements(closing=")")
            if self._peek() != ")":
                raise self._error("Unclosed '('", start)
            self.pos += 1
            element = GroupElement(tuple(inner), self._modifiers(allowed="vn"))
        elif char == "[":
            element = self._chord()
        elif char == "R":
            self.pos += 1
            number = self._match(_NUMBER)
            element = RestElement(float(number.group(0)) if number else SEQUENCE_DEFAULT_DURATION)
        else:
            element = self._note()

        repeat = self._repeat()
        if repeat != 1:
            element = _with_repeat(element, repeat)
        self._expect_boundary()
        return element

    def _chord(self) -> ChordElement:
        start = self.pos
        self.pos += 1
        notes: list[NoteElement] = []
        while True:
            self._skip_space()
            if self._peek() == "]":
                self.pos += 1
                break
            if not self._peek():
                raise self._error("Unclosed '['", start)
            notes.append(self._note())
            self._expect_boundary()
        if not notes:
            raise self._error("Empty chord", start)
        return ChordElement(tuple(notes), self._modifiers())

    def _note(self) -> NoteElement:
        start = self.pos
        match = self._match(_PITCH)
        if not match:
            raise self._unexpected()
        letter, accidental, octave = match.groups()
        try:
            midi = resolve(letter, accidental, int(octave))
        except NotationRangeError as e:
            raise NotationRangeError(e.message, self.source.span(start), "sequence") from e
        return NoteElement(midi, self._modifiers())

    def _modifiers(self, allowed: str = _MODIFIERS) -> Modifiers:
        values: dict[str, float] = {}
        while self._peek() and self._peek() in allowed:
            start = self.pos
            name = self._peek()
            self.pos += 1
            if name in values:
                raise self._error(f"Duplicate modifier '{name}'", start)
            if name == "v":
                number = self._match(_INTEGER)
                if not number:
                    raise self._unexpected()
                velocity = int(number.group(0))
                if not MIDI_MIN <= velocity <= MIDI_MAX:
                    raise NotationRangeError(
                        ErrorMessages.VELOCITY_OUT_OF_RANGE.format(velocity=velocity),
                        self.source.span(start),
                        "sequence",
                    )
                values[name] = velocity
            else:
                number = self._match(_NUMBER)
                if not number:
                    raise self._unexpected()
                values[name] = float(number.group(0))
                if name == "n" and values[name] <= 0:
                    raise self._error("Note duration must be greater than 0", start)

        velocity_value = values.get("v")
        return Modifiers(
            velocity=int(velocity_value) if velocity_value is not None else None,
            duration=values.get("n"),
            advance=values.get("t"),
        )

    def _repeat(self) -> int:
        if self._peek() != "*":
            return 1
        self.pos += 1
        number = self._match(_INTEGER)
        if not number:
            raise self._unexpected()
        return int(number.group(0))


def _with_repeat(element: Element, repeat: int) -> Element:
    if isinstance(element, NoteElement):
        return NoteElement(element.midi, element.modifiers, repeat)
    if isinstance(element, ChordElement):
        return ChordElement(element.notes, element.modifiers, repeat)
    if isinstance(element, RestElement):
        return RestElement(element.beats, repeat)
    return GroupElement(element.elements, element.modifiers, repeat)


class SequenceRenderer:
    """Walks parsed elements, advancing a time cursor and emitting notes."""

    def __init__(self) -> None:
        self.notes: list[NoteEvent] = []

    def render(
        self,
        elements: tuple[Element, ...] | list[Element],
        time: float,
        inherited: Modifiers,
    ) -> float:
        for element in elements:
            for _ in range(element.repeat):
                time = self._render_one(element, time, inherited)
        return time

    def _render_one(self, element: Element, time: float, inherited: Modifiers) -> float:
        if isinstance(element, RestElement):
            return time + element.beats
        if isinstance(element, GroupElement):
            return self.render(element.elements, time, _merge(element.modifiers, inherited))
        if isinstance(element, ChordElement):
            chord = _merge(element.modifiers, inherited)
            for note in element.notes:
                self._emit(note, time, chord)
            chord_duration = chord.duration if chord.duration is not None else SEQUENCE_DEFAULT_DURATION
            return time + (chord.advance if chord.advance is not None else chord_duration)

        resolved = self._emit(element, time, inherited)
        return time + (resolved.advance if resolved.advance is not None else resolved.duration or 0)

    def _emit(self, note: NoteElement, time: float, inherited: Modifiers) -> Modifiers:
        resolved = _merge(note.modifiers, inherited)
        duration = resolved.duration if resolved.duration is not None else SEQUENCE_DEFAULT_DURATION
        velocity = resolved.velocity if resolved.velocity is not None else SEQUENCE_DEFAULT_VELOCITY
        self.notes.append(
            NoteEvent(pitch=note.midi, start_time=time, duration=duration, velocity=velocity)
        )
        return Modifiers(velocity, duration, note.modifiers.advance)


def _merge(own: Modifiers, inherited: Modifiers) -> Modifiers:
    """Own values win over inherited ones. Time-until-next never inherits."""
    return Modifiers(
        velocity=own.velocity if own.velocity is not None else inherited.velocity,
        duration=own.duration if own.duration is not None else inherited.duration,
        advance=own.advance,
    )


def parse_sequence(text: str | None) -> list[NoteEvent]:
    """
    Parse flat-sequence notation into note events.

    Voices are flattened in order; each voice starts at time 0.

    Raises:
        NotationSyntaxError: On malformed input
        NotationRangeError: On out-of-range pitch or velocity
    """
    if not text or not text.strip():
        return []

    voices = SequenceParser(text).parse()
    renderer = SequenceRenderer()
    for voice in voices:
        renderer.render(voice, 0.0, Modifiers())
    logger.debug(f"Parsed {len(voices)} voice(s) into {len(renderer.notes)} notes")
    return renderer.notes
