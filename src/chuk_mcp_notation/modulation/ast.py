"""
Modulation AST - assignments and expression nodes.

All nodes are immutable. Expression nodes form a closed tagged union;
the evaluator rejects anything else.
"""

from __future__ import annotations

from dataclasses import dataclass

from chuk_mcp_notation.constants import Operator, Parameter, VariableNamespace
from chuk_mcp_notation.core.rhythm import position_to_beats


@dataclass(frozen=True)
class Literal:
    value: float


@dataclass(frozen=True)
class BinaryOp:
    op: str  # one of + - * /
    left: ExpressionNode
    right: ExpressionNode


@dataclass(frozen=True)
class FunctionCall:
    name: str
    args: tuple[ExpressionNode, ...]


@dataclass(frozen=True)
class Variable:
    namespace: VariableNamespace
    name: str


@dataclass(frozen=True)
class Period:
    """A period literal such as '2t' (2 beats) or '1:0t' (1 bar)."""

    bars: int
    beats: float

    def to_beats(self, beats_per_bar: int) -> float:
        return self.bars * beats_per_bar + self.beats


ExpressionNode = Literal | BinaryOp | FunctionCall | Variable | Period


@dataclass(frozen=True)
class PitchRange:
    """Inclusive MIDI pitch range."""

    start_pitch: int
    end_pitch: int

    def contains(self, pitch: int) -> bool:
        return self.start_pitch <= pitch <= self.end_pitch


@dataclass(frozen=True)
class TimeRange:
    """Inclusive bar|beat range."""

    start_bar: int
    start_beat: float
    end_bar: int
    end_beat: float

    def to_beats(self, beats_per_bar: int) -> tuple[float, float]:
        """Start and end in musical beats."""
        return (
            position_to_beats(self.start_bar, self.start_beat, beats_per_bar),
            position_to_beats(self.end_bar, self.end_beat, beats_per_bar),
        )

    def contains(self, bar: int, beat: float) -> bool:
        after_start = bar > self.start_bar or (bar == self.start_bar and beat >= self.start_beat)
        before_end = bar < self.end_bar or (bar == self.end_bar and beat <= self.end_beat)
        return after_start and before_end


@dataclass(frozen=True)
class Assignment:
    """One modulation statement: [pitch range] [time range] parameter op expression."""

    parameter: Parameter
    operator: Operator
    expression: ExpressionNode
    pitch_range: PitchRange | None = None
    time_range: TimeRange | None = None
    line: int = 1
