"""
bar|beat interpreter - directives to note events.

The interpreter is a fold: each directive maps one immutable
InterpreterState to the next, and the final state holds the emitted
notes and diagnostics. Nothing is shared between calls.

Buffering rules:
- Pitches collect in a buffer until a time position emits them.
- Each buffered pitch captures velocity, duration and probability when
  it is typed, so a chord can mix per-note state.
- After emission the buffer persists. A later bare time position
  re-emits it, and state set in between rewrites the buffered values,
  so 'C1 1|1 v80 |2' plays the second hit at velocity 80.
- The first pitch after an emission starts a new group.
- Beat lists (1|1,2,3) emit once per beat and then drop the buffer.
- A velocity 0 note deletes earlier notes with the same pitch and start
  time and is never emitted itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from functools import reduce

from chuk_mcp_notation.constants import (
    DEFAULT_DURATION,
    DEFAULT_PROBABILITY,
    DEFAULT_VELOCITY,
    DEFAULT_VELOCITY_DEVIATION,
    TIME_EPSILON,
    DiagnosticKind,
    DiagnosticMessages,
)
from chuk_mcp_notation.core.rhythm import TimeSignature, format_number, position_to_beats
from chuk_mcp_notation.errors import Diagnostic, report
from chuk_mcp_notation.models.directive import (
    ClearCopyBuffer,
    CopyRange,
    Directive,
    DurationState,
    Pitch,
    ProbabilityState,
    TimeList,
    TimePosition,
    VelocityRangeState,
    VelocityState,
)
from chuk_mcp_notation.models.note import InterpretResult, NoteEvent
from chuk_mcp_notation.notation.barbeat_parser import parse_barbeat

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BufferedPitch:
    """A pitch waiting for a time position, with the state it captured."""

    midi: int
    velocity: int
    velocity_deviation: int
    duration: float
    probability: float


@dataclass(frozen=True)
class BarNote:
    """An emitted note remembered for bar copies."""

    bar: int
    offset: float  # quarter notes from the start of its bar
    note: NoteEvent


@dataclass(frozen=True)
class InterpreterState:
    """Everything the interpreter knows after a prefix of the directives."""

    bar: int = 1
    beat: float = 1.0
    has_explicit_bar: bool = False
    velocity: int = DEFAULT_VELOCITY
    velocity_deviation: int = DEFAULT_VELOCITY_DEVIATION
    duration: float = DEFAULT_DURATION
    probability: float = DEFAULT_PROBABILITY
    buffer: tuple[BufferedPitch, ...] = ()
    group_open: bool = False
    emitted: bool = False
    changed_since_pitch: bool = False
    notes: tuple[NoteEvent, ...] = ()
    bar_notes: tuple[BarNote, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    def warn(self, kind: DiagnosticKind, message: str) -> InterpreterState:
        return replace(self, diagnostics=self.diagnostics + (report(logger, kind, message),))


class BarBeatInterpreter:
    """Interprets bar|beat notation for one time signature."""

    def __init__(self, time_signature: TimeSignature | None = None) -> None:
        self.time_signature = time_signature or TimeSignature.COMMON_TIME

    def interpret(self, text: str) -> InterpretResult:
        """
        Interpret notation text into note events.

        Args:
            text: bar|beat notation

        Returns:
            Notes in emission order plus diagnostics

        Raises:
            NotationSyntaxError: If the text does not parse
        """
        if not text or not text.strip():
            return InterpretResult()
        directives = parse_barbeat(text, self.time_signature.beats_per_bar)
        return self.interpret_directives(directives)

    def interpret_directives(self, directives: list[Directive]) -> InterpretResult:
        """Fold directives into notes."""
        state = reduce(self.step, directives, InterpreterState())

        if state.buffer and not state.emitted:
            state = state.warn(
                DiagnosticKind.ORPHAN_PITCHES,
                DiagnosticMessages.ORPHAN_PITCHES.format(count=len(state.buffer)),
            )

        notes = apply_deletions(list(state.notes))
        logger.debug(f"Interpreted {len(directives)} directives into {len(notes)} notes")
        return InterpretResult(notes=notes, diagnostics=list(state.diagnostics))

    def step(self, state: InterpreterState, directive: Directive) -> InterpreterState:
        """Apply one directive."""
        if isinstance(directive, Pitch):
            return self._pitch(state, directive)
        if isinstance(directive, TimePosition):
            return self._time_position(state, directive.bar, (directive.beat,), keep_buffer=True)
        if isinstance(directive, TimeList):
            return self._time_position(state, directive.bar, directive.beats, keep_buffer=False)
        if isinstance(directive, VelocityState):
            return self._set_state(state, velocity=directive.value, velocity_deviation=0)
        if isinstance(directive, VelocityRangeState):
            return self._set_state(
                state,
                velocity=directive.min,
                velocity_deviation=directive.max - directive.min,
            )
        if isinstance(directive, DurationState):
            return self._set_state(state, duration=directive.beats)
        if isinstance(directive, ProbabilityState):
            return self._set_state(state, probability=directive.value)
        if isinstance(directive, CopyRange):
            return self._copy(state, directive)
        if isinstance(directive, ClearCopyBuffer):
            state = self._check_buffer(state)
            return _reset_buffer(replace(state, bar_notes=()))
        raise TypeError(f"Unknown directive: {directive!r}")

    def _pitch(self, state: InterpreterState, directive: Pitch) -> InterpreterState:
        buffer = state.buffer if state.group_open else ()
        captured = BufferedPitch(
            midi=directive.midi,
            velocity=state.velocity,
            velocity_deviation=state.velocity_deviation,
            duration=state.duration,
            probability=state.probability,
        )
        return replace(
            state,
            buffer=buffer + (captured,),
            group_open=True,
            emitted=state.emitted and state.group_open,
            changed_since_pitch=False,
        )

    def _set_state(self, state: InterpreterState, **fields: int | float) -> InterpreterState:
        state = replace(state, **fields)  # type: ignore[arg-type]
        if not state.buffer:
            return state
        if state.group_open:
            return replace(state, changed_since_pitch=True)
        # Group already emitted: later re-emission uses the new value
        buffer = tuple(replace(pitch, **fields) for pitch in state.buffer)  # type: ignore[arg-type]
        return replace(state, buffer=buffer)

    def _time_position(
        self,
        state: InterpreterState,
        bar: int | None,
        beats: tuple[float, ...],
        keep_buffer: bool,
    ) -> InterpreterState:
        if bar is None:
            bar = state.bar if state.has_explicit_bar else 1
            has_explicit_bar = state.has_explicit_bar
        else:
            has_explicit_bar = True

        if state.changed_since_pitch and state.buffer:
            state = state.warn(DiagnosticKind.INEFFECTIVE_STATE, DiagnosticMessages.INEFFECTIVE_STATE)

        for beat in beats:
            state = replace(state, bar=bar, beat=beat, has_explicit_bar=has_explicit_bar)
            if not state.buffer:
                position = f"{bar}|{format_number(beat)}"
                state = state.warn(
                    DiagnosticKind.EMPTY_TIME_POSITION,
                    DiagnosticMessages.EMPTY_TIME_POSITION.format(position=position),
                )
                continue
            state = self._emit(state, bar, beat)

        state = replace(state, group_open=False, changed_since_pitch=False)
        if not keep_buffer:
            state = replace(state, buffer=())
        return state

    def _emit(self, state: InterpreterState, bar: int, beat: float) -> InterpreterState:
        ts = self.time_signature
        bar_length = ts.quarter_notes_per_bar
        start = ts.to_quarter_notes(position_to_beats(bar, beat, ts.beats_per_bar))
        # Copies find notes by the bar they start in, which differs from the
        # written bar when the beat runs past the end of it
        start_bar = int(start // bar_length) + 1
        bar_start = (start_bar - 1) * bar_length

        notes = tuple(
            NoteEvent(
                pitch=pitch.midi,
                start_time=start,
                duration=ts.to_quarter_notes(pitch.duration),
                velocity=pitch.velocity,
                velocity_deviation=pitch.velocity_deviation,
                probability=pitch.probability,
            )
            for pitch in state.buffer
        )
        bar_notes = tuple(BarNote(start_bar, start - bar_start, note) for note in notes)
        return replace(
            state,
            notes=state.notes + notes,
            bar_notes=state.bar_notes + bar_notes,
            emitted=True,
        )

    def _copy(self, state: InterpreterState, directive: CopyRange) -> InterpreterState:
        if directive.source_start is None:
            if directive.dest_start <= 1:
                return state.warn(
                    DiagnosticKind.COPY,
                    DiagnosticMessages.COPY_NO_SOURCE.format(bar=directive.dest_start),
                )
            sources = [directive.dest_start - 1]
        else:
            source_end = directive.source_end or directive.source_start
            sources = list(range(directive.source_start, source_end + 1))

        state = self._check_buffer(state)
        bar_length = self.time_signature.quarter_notes_per_bar
        copied_any = False

        for index, dest in enumerate(range(directive.dest_start, directive.dest_end + 1)):
            source = sources[index % len(sources)]
            if source == dest:
                state = state.warn(DiagnosticKind.COPY, DiagnosticMessages.COPY_SELF.format(bar=source))
                continue
            source_notes = [entry for entry in state.bar_notes if entry.bar == source]
            if not source_notes:
                state = state.warn(DiagnosticKind.COPY, DiagnosticMessages.COPY_EMPTY.format(bar=source))
                continue

            dest_start = (dest - 1) * bar_length
            copies = tuple(
                BarNote(
                    dest,
                    entry.offset,
                    entry.note.model_copy(update={"start_time": dest_start + entry.offset}),
                )
                for entry in source_notes
            )
            state = replace(
                state,
                notes=state.notes + tuple(copy.note for copy in copies),
                bar_notes=state.bar_notes + copies,
            )
            copied_any = True

        if copied_any:
            state = replace(state, bar=directive.dest_start, beat=1.0, has_explicit_bar=True)
        return _reset_buffer(state)

    def _check_buffer(self, state: InterpreterState) -> InterpreterState:
        """Warn about pitches that a copy or @clear is about to discard."""
        if state.buffer and not state.emitted:
            return state.warn(
                DiagnosticKind.ORPHAN_PITCHES,
                DiagnosticMessages.ORPHAN_PITCHES.format(count=len(state.buffer)),
            )
        return state


def _reset_buffer(state: InterpreterState) -> InterpreterState:
    return replace(state, buffer=(), group_open=False, emitted=False, changed_since_pitch=False)


def apply_deletions(notes: list[NoteEvent]) -> list[NoteEvent]:
    """
    Resolve velocity 0 deletion markers.

    A marker removes every earlier note with the same pitch and start time,
    then disappears itself.
    """
    result: list[NoteEvent] = []
    for note in notes:
        if note.velocity == 0:
            result = [
                kept
                for kept in result
                if kept.pitch != note.pitch or abs(kept.start_time - note.start_time) > TIME_EPSILON
            ]
        else:
            result.append(note)
    return result


def interpret_barbeat(
    text: str,
    time_signature: TimeSignature | None = None,
) -> InterpretResult:
    """Interpret bar|beat notation into note events."""
    return BarBeatInterpreter(time_signature).interpret(text)
