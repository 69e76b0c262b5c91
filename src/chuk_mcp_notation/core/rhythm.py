"""
Rhythm primitives - TimeSignature and the bar|beat time converter.

Positions are 1-based (bar 1, beat 1 is the start). Conversions here are
linear in musical beats: a "beat" is whatever the time signature's
denominator says it is, and only the numerator scales bars to beats.
Quarter-note conversion is a separate, explicit step.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar

from chuk_mcp_notation.constants import DEFAULT_BEATS_PER_BAR, ErrorMessages
from chuk_mcp_notation.errors import NotationRangeError, TimeFormatError

_BAR_BEAT = re.compile(r"^(-?\d+)\|(-?\d+(?:\+\d+/\d+|\.\d+|/\d+)?)$")
_BAR_BEAT_DURATION = re.compile(r"^(-?\d+):(-?\d*\.?\d+(?:\+\d+/\d+|/\d+)?)$")


@dataclass(frozen=True)
class TimeSignature:
    """
    A time signature: beats per bar over the beat unit.

    Examples:
        TimeSignature(4, 4) = common time
        TimeSignature(6, 8) = six eighth-note beats per bar
    """

    numerator: int
    denominator: int

    COMMON_TIME: ClassVar[TimeSignature]  # 4/4
    WALTZ: ClassVar[TimeSignature]  # 3/4
    SIX_EIGHT: ClassVar[TimeSignature]  # 6/8

    def __post_init__(self) -> None:
        if self.numerator <= 0:
            raise ValueError(f"Beats per bar must be positive, got {self.numerator}")
        if self.denominator <= 0:
            raise ValueError(f"Beat unit must be positive, got {self.denominator}")

    @property
    def beats_per_bar(self) -> int:
        """Musical beats in one bar."""
        return self.numerator

    @property
    def quarter_notes_per_beat(self) -> float:
        """Length of one musical beat in quarter notes (0.5 in 6/8)."""
        return 4 / self.denominator

    @property
    def quarter_notes_per_bar(self) -> float:
        """Length of one bar in quarter notes."""
        return self.numerator * self.quarter_notes_per_beat

    def to_quarter_notes(self, musical_beats: float) -> float:
        return musical_beats * self.quarter_notes_per_beat

    def to_musical_beats(self, quarter_notes: float) -> float:
        return quarter_notes / self.quarter_notes_per_beat

    def __str__(self) -> str:
        return f"{self.numerator}/{self.denominator}"

    @classmethod
    def parse(cls, notation: str) -> TimeSignature:
        """
        Parse a time signature from notation like '4/4', '3/4', '6/8'.

        Args:
            notation: Time signature string

        Returns:
            TimeSignature object
        """
        parts = notation.split("/")
        if len(parts) != 2:
            raise ValueError(f"Invalid time signature format: {notation}")
        return cls(int(parts[0]), int(parts[1]))

    @classmethod
    def from_parts(
        cls,
        numerator: int | None = None,
        denominator: int | None = None,
    ) -> TimeSignature:
        """
        Build a time signature from optional parts, defaulting to 4/4.

        Raises:
            ValueError: If only one of numerator/denominator is given
        """
        if (numerator is None) != (denominator is None):
            raise ValueError(ErrorMessages.PARTIAL_TIME_SIGNATURE)
        if numerator is None or denominator is None:
            return cls.COMMON_TIME
        return cls(numerator, denominator)


TimeSignature.COMMON_TIME = TimeSignature(4, 4)
TimeSignature.WALTZ = TimeSignature(3, 4)
TimeSignature.SIX_EIGHT = TimeSignature(6, 8)


def parse_beat_value(text: str, context: str | None = None, kind: str = "duration") -> float:
    """
    Parse a beat value: '2', '1.5', '.5', '3/4' or the mixed form '2+1/3'.

    Args:
        text: Beat value text
        context: Full text for error messages (defaults to text)
        kind: Format name for error messages

    Returns:
        Beat value as a float

    Raises:
        TimeFormatError: On malformed text or division by zero
    """
    context = context if context is not None else text
    whole = 0
    fraction = text
    try:
        if "+" in text:
            whole_text, fraction = text.split("+", 1)
            whole = int(whole_text)
            if "/" not in fraction:
                raise ValueError(fraction)
        if "/" not in fraction:
            return float(fraction)
        numerator_text, denominator_text = fraction.split("/", 1)
        numerator = int(numerator_text)
        denominator = int(denominator_text)
    except ValueError:
        raise TimeFormatError(ErrorMessages.INVALID_FORMAT.format(kind=kind, text=context)) from None

    if denominator == 0:
        raise TimeFormatError(ErrorMessages.DIVISION_BY_ZERO.format(kind=kind, text=context))
    return whole + numerator / denominator


def position_to_beats(bar: int, beat: float, beats_per_bar: int = DEFAULT_BEATS_PER_BAR) -> float:
    """
    Convert a 1-based bar|beat position to an absolute musical beat offset.

    Raises:
        NotationRangeError: If bar or beat is below 1
    """
    if bar < 1:
        raise NotationRangeError(ErrorMessages.BAR_TOO_SMALL.format(bar=bar))
    if beat < 1:
        raise NotationRangeError(ErrorMessages.BEAT_TOO_SMALL.format(beat=beat))
    return (bar - 1) * beats_per_bar + (beat - 1)


def bar_beat_to_beats(text: str, beats_per_bar: int = DEFAULT_BEATS_PER_BAR) -> float:
    """Convert bar|beat text like '2|3.5' or '1|2+1/3' to musical beats."""
    match = _BAR_BEAT.match(text.strip())
    if not match:
        raise TimeFormatError(
            f'Invalid bar|beat format: "{text}". Expected "{{int}}|{{beat}}" like "1|2", '
            '"2|3.5", "1|4/3" or "1|2+1/3"'
        )
    bar = int(match.group(1))
    beat = parse_beat_value(match.group(2), text, "bar|beat")
    return position_to_beats(bar, beat, beats_per_bar)


def duration_to_beats(text: str, beats_per_bar: int = DEFAULT_BEATS_PER_BAR) -> float:
    """
    Convert duration text to musical beats.

    Accepted forms: '1.5', '3/4', '2+1/3', 'bars:beats' ('2:1.5' is
    2 * beats_per_bar + 1.5) and 'bars:beats' with a fractional beat part
    ('1:3/4', '1:2+1/3').

    Raises:
        TimeFormatError: On malformed or negative durations
    """
    text = text.strip()
    if ":" in text:
        match = _BAR_BEAT_DURATION.match(text)
        if not match:
            raise TimeFormatError(
                f'Invalid bar:beat duration format: "{text}". Expected "{{int}}:{{beat}}" '
                'like "1:2", "2:1.5", "0:4/3" or "1:2+1/3"'
            )
        bars = int(match.group(1))
        beats = parse_beat_value(match.group(2), text) if match.group(2) else 0.0
        if bars < 0:
            raise TimeFormatError(ErrorMessages.NEGATIVE_BARS.format(bars=bars))
        if beats < 0:
            raise TimeFormatError(ErrorMessages.NEGATIVE_DURATION.format(beats=beats))
        return bars * beats_per_bar + beats

    if "|" in text:
        raise TimeFormatError(ErrorMessages.PIPE_IN_DURATION.format(text=text))

    beats = parse_beat_value(text, text)
    if beats < 0:
        raise TimeFormatError(ErrorMessages.NEGATIVE_DURATION.format(beats=beats))
    return beats


def format_number(value: float) -> str:
    """Format a number without trailing zeros (3 decimal places at most)."""
    if value % 1 == 0:
        return str(int(value))
    return f"{value:.3f}".rstrip("0").rstrip(".")


def beats_to_bar_beat(beats: float, beats_per_bar: int = DEFAULT_BEATS_PER_BAR) -> str:
    """Convert musical beats to bar|beat text (0 -> '1|1')."""
    bar = int(beats // beats_per_bar) + 1
    beat = beats % beats_per_bar + 1
    return f"{bar}|{format_number(beat)}"


def beats_to_bar_beat_duration(beats: float, beats_per_bar: int = DEFAULT_BEATS_PER_BAR) -> str:
    """Convert a musical beat duration to bars:beats text (9.5 -> '2:1.5' in 4/4)."""
    if beats < 0:
        raise TimeFormatError(f"Duration cannot be negative, got: {beats}")
    bars = int(beats // beats_per_bar)
    return f"{bars}:{format_number(beats % beats_per_bar)}"
