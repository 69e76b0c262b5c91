"""
Transform applier - modulation text applied to a list of notes.

Each assignment runs over every note its pitch/time ranges select, with
note.* bound to that note's own fields:

    note.pitch, note.start, note.velocity, note.deviation,
    note.duration, note.probability, note.index, note.count

note.start and note.duration (and the timing/duration parameters) are in
musical beats of the time signature; note.index/note.count count the notes
the assignment selected, in (start, pitch) order.
"""

from __future__ import annotations

import logging
import random
from typing import Any

from pydantic import BaseModel, Field

from chuk_mcp_notation.constants import (
    MIDI_MAX,
    MIDI_MIN,
    MIN_NOTE_DURATION,
    DiagnosticKind,
    DiagnosticMessages,
    Operator,
    Parameter,
)
from chuk_mcp_notation.core.rhythm import TimeSignature
from chuk_mcp_notation.errors import Diagnostic, NotationError, report
from chuk_mcp_notation.models.note import NoteEvent
from chuk_mcp_notation.modulation.ast import Assignment, PitchRange
from chuk_mcp_notation.modulation.evaluator import (
    EvaluationContext,
    active_time_range,
    evaluate_expression,
)
from chuk_mcp_notation.modulation.parser import parse_modulation

logger = logging.getLogger(__name__)


class TransformResult(BaseModel):
    """Transformed notes plus any diagnostics."""

    notes: list[NoteEvent] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    def warnings(self) -> list[str]:
        return [d.message for d in self.diagnostics]


class TransformApplier:
    """
    Applies modulation assignments to notes.

    Usage:
        applier = TransformApplier(rng=random.Random(7))
        result = applier.apply(notes, "velocity += 20 * cos(1:0t)")
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def apply(
        self,
        notes: list[NoteEvent],
        text: str,
        time_signature: TimeSignature | None = None,
        clip_time_range: tuple[float, float] | None = None,
    ) -> TransformResult:
        """
        Apply a transform to notes.

        Args:
            notes: Notes to transform (not modified)
            text: Modulation text
            time_signature: Defaults to 4/4
            clip_time_range: Range ramp/curve run over, in musical beats.
                Defaults to the span of the notes.

        Returns:
            TransformResult with new notes sorted by (start_time, pitch)

        Raises:
            NotationSyntaxError: If the text does not parse
            SemanticError: On unknown parameters or inverted pitch ranges
        """
        time_signature = time_signature or TimeSignature.COMMON_TIME
        assignments = parse_modulation(text)
        working = [note.model_dump() for note in sorted(notes, key=lambda n: (n.start_time, n.pitch))]

        if clip_time_range is None and working:
            clip_time_range = (
                time_signature.to_musical_beats(min(n["start_time"] for n in working)),
                time_signature.to_musical_beats(max(n["start_time"] + n["duration"] for n in working)),
            )

        diagnostics: list[Diagnostic] = []
        pitch_range: PitchRange | None = None
        for assignment in assignments:
            pitch_range = assignment.pitch_range or pitch_range
            self._apply_assignment(
                assignment, pitch_range, working, time_signature, clip_time_range, diagnostics
            )

        survivors = [NoteEvent(**note) for note in working if note["velocity"] >= 1]
        survivors.sort(key=lambda n: (n.start_time, n.pitch))
        removed = len(working) - len(survivors)
        logger.debug(
            f"Applied {len(assignments)} assignment(s) to {len(working)} note(s), removed {removed}"
        )
        return TransformResult(notes=survivors, diagnostics=diagnostics)

    def _apply_assignment(
        self,
        assignment: Assignment,
        pitch_range: PitchRange | None,
        working: list[dict[str, Any]],
        time_signature: TimeSignature,
        clip_time_range: tuple[float, float] | None,
        diagnostics: list[Diagnostic],
    ) -> None:
        # Every note inside the pitch range counts toward note.index and
        # note.count, even when the time range then excludes it
        candidates = working
        if pitch_range is not None:
            candidates = [n for n in working if pitch_range.contains(n["pitch"])]
        count = len(candidates)

        for index, note in enumerate(candidates):
            position = time_signature.to_musical_beats(note["start_time"])
            applies, time_range = active_time_range(
                assignment,
                EvaluationContext(position=position, time_signature=time_signature, clip_time_range=clip_time_range),
            )
            if not applies:
                continue

            context = EvaluationContext(
                position=position,
                time_signature=time_signature,
                clip_time_range=clip_time_range,
                note_vars=self._note_vars(note, index, count, time_signature),
            )
            try:
                value = evaluate_expression(assignment.expression, context, self.rng, time_range)
            except NotationError as e:
                diagnostics.append(
                    report(
                        logger,
                        DiagnosticKind.EVALUATION,
                        DiagnosticMessages.EVALUATION_FAILED_FOR_NOTE.format(
                            parameter=assignment.parameter.value, start=note["start_time"], error=e
                        ),
                    )
                )
                continue
            self._set(note, assignment.parameter, assignment.operator, value, time_signature, diagnostics)

    @staticmethod
    def _note_vars(
        note: dict[str, Any], index: int, count: int, time_signature: TimeSignature
    ) -> dict[str, float]:
        return {
            "pitch": note["pitch"],
            "start": time_signature.to_musical_beats(note["start_time"]),
            "velocity": note["velocity"],
            "deviation": note["velocity_deviation"],
            "duration": time_signature.to_musical_beats(note["duration"]),
            "probability": note["probability"],
            "index": index,
            "count": count,
        }

    def _set(
        self,
        note: dict[str, Any],
        parameter: Parameter,
        operator: Operator,
        value: float,
        time_signature: TimeSignature,
        diagnostics: list[Diagnostic],
    ) -> None:
        if parameter is Parameter.VELOCITY:
            target = value if operator is Operator.SET else note["velocity"] + value
            rounded = int(target + 0.5) if target >= 0 else -int(-target + 0.5)
            note["velocity"] = self._clamp(note, "velocity", rounded, MIDI_MIN, MIDI_MAX, diagnostics)
        elif parameter is Parameter.PROBABILITY:
            target = value if operator is Operator.SET else note["probability"] + value
            note["probability"] = self._clamp(note, "probability", target, 0.0, 1.0, diagnostics)
        elif parameter is Parameter.TIMING:
            shift = time_signature.to_quarter_notes(value)
            target = shift if operator is Operator.SET else note["start_time"] + shift
            note["start_time"] = self._clamp(note, "timing", target, 0.0, float("inf"), diagnostics)
        elif parameter is Parameter.DURATION:
            length = time_signature.to_quarter_notes(value)
            target = length if operator is Operator.SET else note["duration"] + length
            note["duration"] = max(target, MIN_NOTE_DURATION)

    @staticmethod
    def _clamp(
        note: dict[str, Any],
        name: str,
        value: float,
        low: float,
        high: float,
        diagnostics: list[Diagnostic],
    ) -> float:
        clamped = max(low, min(high, value))
        if clamped != value:
            diagnostics.append(
                report(
                    logger,
                    DiagnosticKind.CLAMPED,
                    DiagnosticMessages.CLAMPED.format(
                        parameter=name, value=value, clamped=clamped, start=note["start_time"]
                    ),
                )
            )
        return clamped


def apply_transform(
    notes: list[NoteEvent],
    text: str,
    time_signature: TimeSignature | None = None,
    rng: random.Random | None = None,
) -> TransformResult:
    """Apply a transform with a fresh TransformApplier."""
    return TransformApplier(rng=rng).apply(notes, text, time_signature)
