"""
bar|beat notation parser - text to directive stream.

Grammar (informal):

    document  := element (separator element)*
    separator := whitespace | ';' | newline
    element   := time | velocity | duration | probability | pitch | copy
    time      := [bar] '|' beat (',' beat)*
    velocity  := 'v' int ['-' int]
    duration  := 't' duration-value
    probability := 'p' number
    pitch     := letter [accidental] octave
    copy      := '@' bar ['-' bar] '=' [bar ['-' bar]] | '@clear'

Adjacent elements must be separated; 'C3D3' or '1|1v100' is a syntax
error. Every value is validated here so the interpreter never sees an
out-of-range pitch, velocity or probability.
"""

from __future__ import annotations

import logging
import re

from chuk_mcp_notation.constants import DEFAULT_BEATS_PER_BAR, MIDI_MAX, MIDI_MIN, ErrorMessages
from chuk_mcp_notation.core.pitch import resolve
from chuk_mcp_notation.core.rhythm import duration_to_beats, parse_beat_value
from chuk_mcp_notation.errors import NotationRangeError, Span, TimeFormatError
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
from chuk_mcp_notation.notation.source import RawToken, SourceText

logger = logging.getLogger(__name__)

_BEAT = r"\d*\.?\d+(?:\+\d+/\d+|/\d+)?"

_PITCH = re.compile(r"([A-G])([#b]?)(-?\d+)")
_VELOCITY = re.compile(r"v(\d+)(?:-(\d+))?")
_DURATION = re.compile(r"t(\S+)")
_PROBABILITY = re.compile(r"p(\d*\.?\d+)")
_TIME = re.compile(rf"(\d+)?\|({_BEAT}(?:,{_BEAT})*)")
_COPY = re.compile(r"@(\d+)(?:-(\d+))?=(?:(\d+)(?:-(\d+))?)?")
_CLEAR = "@clear"


class BarBeatParser:
    """
    Parses bar|beat notation into directives.

    Duration values in bar:beat form ('t1:2') need the bars-to-beats
    factor, so the parser is built for one beats-per-bar value.
    """

    def __init__(self, beats_per_bar: int = DEFAULT_BEATS_PER_BAR) -> None:
        self.beats_per_bar = beats_per_bar

    def parse(self, text: str) -> list[Directive]:
        """
        Parse a notation document.

        Args:
            text: bar|beat notation

        Returns:
            Directives in document order

        Raises:
            NotationSyntaxError: On malformed tokens
            NotationRangeError: On out-of-range values
        """
        source = SourceText(text)
        directives = [self._parse_token(source, token) for token in source.tokens()]
        logger.debug(f"Parsed {len(directives)} bar|beat directives")
        return directives

    def _parse_token(self, source: SourceText, token: RawToken) -> Directive:
        text = token.text
        span = source.span(token.offset)

        try:
            if match := _PITCH.fullmatch(text):
                letter, accidental, octave = match.groups()
                return Pitch(resolve(letter, accidental, int(octave)), span)

            if match := _TIME.fullmatch(text):
                return self._parse_time(match, span)

            if match := _VELOCITY.fullmatch(text):
                return self._parse_velocity(match, span)

            if match := _DURATION.fullmatch(text):
                beats = duration_to_beats(match.group(1), self.beats_per_bar)
                if beats <= 0:
                    raise NotationRangeError(f"Note duration must be greater than 0, got {beats}")
                return DurationState(beats, span)

            if match := _PROBABILITY.fullmatch(text):
                probability = float(match.group(1))
                if not 0.0 <= probability <= 1.0:
                    raise NotationRangeError(
                        ErrorMessages.PROBABILITY_OUT_OF_RANGE.format(probability=match.group(1))
                    )
                return ProbabilityState(probability, span)

            if text == _CLEAR:
                return ClearCopyBuffer(span)

            if match := _COPY.fullmatch(text):
                return self._parse_copy(match, span)
        except NotationRangeError as e:
            raise NotationRangeError(e.message, span) from e
        except TimeFormatError as e:
            raise source.error(str(e), token.offset) from e

        raise source.error(self._describe_unexpected(text), token.offset)

    def _parse_time(self, match: re.Match[str], span: Span) -> Directive:
        bar_text, beats_text = match.groups()
        bar = int(bar_text) if bar_text is not None else None
        if bar is not None and bar < 1:
            raise NotationRangeError(ErrorMessages.BAR_TOO_SMALL.format(bar=bar))

        beats = []
        for beat_text in beats_text.split(","):
            beat = parse_beat_value(beat_text, match.group(0), "bar|beat")
            if beat < 1:
                raise NotationRangeError(ErrorMessages.BEAT_TOO_SMALL.format(beat=beat_text))
            beats.append(beat)

        if len(beats) == 1:
            return TimePosition(bar, beats[0], span)
        return TimeList(bar, tuple(beats), span)

    def _parse_velocity(self, match: re.Match[str], span: Span) -> Directive:
        low_text, high_text = match.groups()
        values = [int(low_text)] + ([int(high_text)] if high_text is not None else [])
        for value in values:
            if not MIDI_MIN <= value <= MIDI_MAX:
                raise NotationRangeError(ErrorMessages.VELOCITY_OUT_OF_RANGE.format(velocity=value))

        if high_text is None:
            return VelocityState(values[0], span)
        low, high = sorted(values)
        return VelocityRangeState(low, high, span)

    def _parse_copy(self, match: re.Match[str], span: Span) -> Directive:
        dest_start, dest_end, source_start, source_end = (
            int(group) if group is not None else None for group in match.groups()
        )
        assert dest_start is not None

        for bar in (dest_start, dest_end, source_start, source_end):
            if bar is not None and bar < 1:
                raise NotationRangeError(ErrorMessages.BAR_TOO_SMALL.format(bar=bar))
        if dest_end is not None and dest_end < dest_start:
            raise NotationRangeError(f"Invalid destination range @{dest_start}-{dest_end}= (start > end)")
        if source_start is not None and source_end is not None and source_end < source_start:
            raise NotationRangeError(f"Invalid source range {source_start}-{source_end} (start > end)")

        if dest_end is None:
            # @N=P-Q lays the whole source range down starting at bar N
            width = (source_end - source_start) if source_end is not None and source_start is not None else 0
            dest_end = dest_start + width

        return CopyRange(dest_start, dest_end, source_start, source_end, span)

    @staticmethod
    def _describe_unexpected(text: str) -> str:
        # Name the first element that parses, so 'C3D3' reads as a missing separator
        for pattern in (_PITCH, _TIME, _VELOCITY, _PROBABILITY):
            match = pattern.match(text)
            if match and match.end() < len(text):
                return (
                    f"Expected whitespace between \"{match.group(0)}\" and "
                    f"\"{text[match.end():]}\""
                )
        return f"Unexpected token \"{text}\""


def parse_barbeat(text: str, beats_per_bar: int = DEFAULT_BEATS_PER_BAR) -> list[Directive]:
    """Parse bar|beat notation into directives."""
    return BarBeatParser(beats_per_bar).parse(text)
