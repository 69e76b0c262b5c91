"""
Note event models - the terminal output of every notation pipeline.

A NoteEvent is emitted once and never mutated afterwards; transforms
produce new events with model_copy(update=...).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from chuk_mcp_notation.constants import (
    DEFAULT_PROBABILITY,
    DEFAULT_VELOCITY_DEVIATION,
    MIDI_MAX,
    MIDI_MIN,
)
from chuk_mcp_notation.errors import Diagnostic


class NoteEvent(BaseModel):
    """
    A single timestamped note.

    Times are in quarter-note beats from the start of the clip.
    Velocity 0 is reserved as a deletion marker while interpreting and
    never appears in a finished result.
    """

    pitch: int = Field(ge=MIDI_MIN, le=MIDI_MAX, description="MIDI pitch number")
    start_time: float = Field(description="Start time in quarter-note beats")
    duration: float = Field(gt=0, description="Length in quarter-note beats")
    velocity: int = Field(ge=MIDI_MIN, le=MIDI_MAX, description="MIDI velocity")
    velocity_deviation: int = Field(
        default=DEFAULT_VELOCITY_DEVIATION,
        ge=0,
        description="Random velocity spread above velocity",
    )
    probability: float = Field(
        default=DEFAULT_PROBABILITY,
        ge=0.0,
        le=1.0,
        description="Chance the note plays",
    )

    model_config = {"frozen": True}

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()


class InterpretResult(BaseModel):
    """Notes produced from notation text plus any diagnostics."""

    notes: list[NoteEvent] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    def warnings(self) -> list[str]:
        return [d.message for d in self.diagnostics]
