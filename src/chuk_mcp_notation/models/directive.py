"""
Directive models - the token stream produced by the bar|beat parser.

Each directive is an immutable record of one source element, tagged by
its class. The interpreter folds over them in document order.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from chuk_mcp_notation.errors import Span

_NO_SPAN = Span(0, 1, 1)


@dataclass(frozen=True)
class TimePosition:
    """Emit buffered pitches at bar|beat. bar is None for the |beat shorthand."""

    bar: int | None
    beat: float
    span: Span = field(default=_NO_SPAN, compare=False)


@dataclass(frozen=True)
class TimeList:
    """Emit buffered pitches once per beat of one bar (1|1,2,3)."""

    bar: int | None
    beats: tuple[float, ...]
    span: Span = field(default=_NO_SPAN, compare=False)


@dataclass(frozen=True)
class VelocityState:
    """v<value>"""

    value: int
    span: Span = field(default=_NO_SPAN, compare=False)


@dataclass(frozen=True)
class VelocityRangeState:
    """v<min>-<max>, already ordered so min <= max."""

    min: int
    max: int
    span: Span = field(default=_NO_SPAN, compare=False)


@dataclass(frozen=True)
class DurationState:
    """t<duration>, in musical beats."""

    beats: float
    span: Span = field(default=_NO_SPAN, compare=False)


@dataclass(frozen=True)
class ProbabilityState:
    """p<probability>"""

    value: float
    span: Span = field(default=_NO_SPAN, compare=False)


@dataclass(frozen=True)
class Pitch:
    """A resolved pitch token."""

    midi: int
    span: Span = field(default=_NO_SPAN, compare=False)


@dataclass(frozen=True)
class CopyRange:
    """
    Copy bars into dest_start..dest_end.

    source_start is None for the default (previous bar) source. A source
    range (source_end set) is tiled across the destination.
    """

    dest_start: int
    dest_end: int
    source_start: int | None = None
    source_end: int | None = None
    span: Span = field(default=_NO_SPAN, compare=False)


@dataclass(frozen=True)
class ClearCopyBuffer:
    """@clear - forget all bars remembered for copying."""

    span: Span = field(default=_NO_SPAN, compare=False)


Directive = (
    TimePosition
    | TimeList
    | VelocityState
    | VelocityRangeState
    | DurationState
    | ProbabilityState
    | Pitch
    | CopyRange
    | ClearCopyBuffer
)
