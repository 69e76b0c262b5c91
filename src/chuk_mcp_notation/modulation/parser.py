"""
Modulation parser - text to assignment ASTs.

One statement per line:

    [pitchRange] [timeRange] parameter (= | +=) expression

    velocity += 20 * cos(1:0t)
    C1-C2 velocity = rand(80, 110)
    1|1-2|4 timing += 0.05 * noise()

Expression precedence, loosest first: '+' '-', then '*' '/', then unary
minus. Operators of equal precedence group to the right, so '8 - 4 - 2'
is 8 - (4 - 2). Function names are not checked here; the evaluator
resolves them. Comments ('//', '#', '/* */') and blank lines are skipped.
"""

from __future__ import annotations

import logging
import re

from chuk_mcp_notation.constants import ErrorMessages, Operator, Parameter, VariableNamespace
from chuk_mcp_notation.core.pitch import resolve
from chuk_mcp_notation.core.rhythm import parse_beat_value
from chuk_mcp_notation.errors import NotationRangeError, NotationSyntaxError, SemanticError, TimeFormatError
from chuk_mcp_notation.modulation.ast import (
    Assignment,
    BinaryOp,
    ExpressionNode,
    FunctionCall,
    Literal,
    Period,
    PitchRange,
    TimeRange,
    Variable,
)
from chuk_mcp_notation.notation.source import SourceText

logger = logging.getLogger(__name__)

_BEAT = r"\d*\.?\d+(?:\+\d+/\d+|/\d+)?"

_PITCH = re.compile(r"([A-G])([#b]?)(-?\d+)")
_TIME_RANGE = re.compile(rf"(\d+)\|({_BEAT})-(\d+)\|({_BEAT})")
_PERIOD = re.compile(rf"(?:(\d+):)?({_BEAT})t(?![A-Za-z0-9_])")
_NUMBER = re.compile(r"\d*\.?\d+")
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_INLINE_SPACE = " \t\r"


class ModulationParser:
    """Recursive-descent parser over the whole modulation text."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.source = SourceText(text, dialect="modulation")
        self.pos = 0

    # --- scanning -------------------------------------------------------

    def _peek(self, length: int = 1) -> str:
        return self.text[self.pos : self.pos + length]

    def _at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _error(self, message: str, offset: int | None = None) -> NotationSyntaxError:
        return self.source.error(message, self.pos if offset is None else offset)

    def _unexpected(self, expected: str) -> NotationSyntaxError:
        if self._at_end() or self._peek() == "\n":
            return self._error(f"Expected {expected} but found end of line")
        return self._error(f"Expected {expected} but found '{self._peek()}'")

    def _skip_inline(self) -> None:
        """Skip spaces and comments without crossing a line break."""
        while not self._at_end():
            if self._peek() in _INLINE_SPACE:
                self.pos += 1
            elif self._peek(2) == "/*":
                close = self.text.find("*/", self.pos + 2)
                if close == -1:
                    raise self._error("Unterminated block comment")
                self.pos = close + 2
            elif self._peek(2) == "//" or self._peek() == "#":
                newline = self.text.find("\n", self.pos)
                self.pos = len(self.text) if newline == -1 else newline
            else:
                return

    def _skip_blank(self) -> None:
        """Skip spaces, comments and line breaks between statements."""
        while True:
            self._skip_inline()
            if self._peek() != "\n":
                return
            self.pos += 1

    def _match(self, pattern: re.Pattern[str]) -> re.Match[str] | None:
        match = pattern.match(self.text, self.pos)
        if match:
            self.pos = match.end()
        return match

    # --- statements -----------------------------------------------------

    def parse(self) -> list[Assignment]:
        assignments: list[Assignment] = []
        while True:
            self._skip_blank()
            if self._at_end():
                break
            assignments.append(self._statement())
            self._skip_inline()
            if not self._at_end() and self._peek() != "\n":
                raise self._unexpected("end of line")
        logger.debug(f"Parsed {len(assignments)} modulation assignment(s)")
        return assignments

    def _statement(self) -> Assignment:
        line = self.source.span(self.pos).line
        pitch_range = None
        time_range = None

        if self._peek() and self._peek() in "ABCDEFG":
            pitch_range = self._pitch_range()
            self._skip_inline()
        if self._peek().isdigit():
            time_range = self._time_range()
            self._skip_inline()

        start = self.pos
        identifier = self._match(_IDENTIFIER)
        if not identifier:
            raise self._unexpected("a parameter name")
        try:
            parameter = Parameter(identifier.group(0))
        except ValueError:
            names = ", ".join(p.value for p in Parameter)
            raise SemanticError(
                f"Unknown parameter \"{identifier.group(0)}\" at "
                f"{self.source.span(start)}, expected one of: {names}"
            ) from None

        self._skip_inline()
        operator = self._operator()
        self._skip_inline()
        expression = self._additive()

        return Assignment(
            parameter=parameter,
            operator=operator,
            expression=expression,
            pitch_range=pitch_range,
            time_range=time_range,
            line=line,
        )

    def _operator(self) -> Operator:
        if self._peek(2) == "+=":
            self.pos += 2
            return Operator.ADD
        if self._peek() == "=":
            self.pos += 1
            return Operator.SET
        if self._peek() == ":":
            raise self._error(ErrorMessages.DEPRECATED_COLON)
        raise self._unexpected("'=' or '+='")

    def _pitch(self) -> int:
        start = self.pos
        match = self._match(_PITCH)
        if not match:
            raise self._unexpected("a note name")
        letter, accidental, octave = match.groups()
        try:
            return resolve(letter, accidental, int(octave))
        except NotationRangeError as e:
            raise NotationRangeError(e.message, self.source.span(start), "modulation") from e

    def _pitch_range(self) -> PitchRange:
        start = self.pos
        start_pitch = self._pitch()
        start_name = self.text[start : self.pos]
        end_pitch = start_pitch
        end_name = start_name
        if self._peek() == "-":
            self.pos += 1
            end_start = self.pos
            end_pitch = self._pitch()
            end_name = self.text[end_start : self.pos]
        if start_pitch > end_pitch:
            message = ErrorMessages.INVALID_PITCH_RANGE.format(start=start_name, end=end_name)
            raise SemanticError(f"{message} at {self.source.span(start)}")
        return PitchRange(start_pitch, end_pitch)

    def _time_range(self) -> TimeRange:
        start = self.pos
        match = self._match(_TIME_RANGE)
        if not match:
            raise self._unexpected("a time range like 1|1-2|1")
        start_bar, start_beat, end_bar, end_beat = match.groups()
        try:
            time_range = TimeRange(
                int(start_bar),
                parse_beat_value(start_beat, match.group(0), "bar|beat"),
                int(end_bar),
                parse_beat_value(end_beat, match.group(0), "bar|beat"),
            )
        except TimeFormatError as e:
            raise self._error(str(e), start) from e
        if time_range.start_bar < 1 or time_range.end_bar < 1:
            raise NotationRangeError(
                ErrorMessages.BAR_TOO_SMALL.format(bar=min(time_range.start_bar, time_range.end_bar)),
                self.source.span(start),
                "modulation",
            )
        if time_range.start_beat < 1 or time_range.end_beat < 1:
            raise NotationRangeError(
                ErrorMessages.BEAT_TOO_SMALL.format(beat=min(time_range.start_beat, time_range.end_beat)),
                self.source.span(start),
                "modulation",
            )
        return time_range

    # --- expressions ----------------------------------------------------

    def _additive(self) -> ExpressionNode:
        left = self._term()
        self._skip_inline()
        if self._peek() in ("+", "-") and self._peek(2) != "+=":
            op = self._peek()
            self.pos += 1
            self._skip_inline()
            return BinaryOp(op, left, self._additive())
        return left

    def _term(self) -> ExpressionNode:
        left = self._unary()
        self._skip_inline()
        if self._peek() in ("*", "/"):
            op = self._peek()
            self.pos += 1
            self._skip_inline()
            return BinaryOp(op, left, self._term())
        return left

    def _unary(self) -> ExpressionNode:
        if self._peek() == "-":
            self.pos += 1
            self._skip_inline()
            operand = self._unary()
            if isinstance(operand, Literal):
                return Literal(-operand.value)
            return BinaryOp("-", Literal(0.0), operand)
        return self._primary()

    def _primary(self) -> ExpressionNode:
        if self._peek() == "(":
            start = self.pos
            self.pos += 1
            self._skip_inline()
            inner = self._additive()
            self._skip_inline()
            if self._peek() != ")":
                raise self._error("Unclosed '('", start)
            self.pos += 1
            return inner

        char = self._peek()
        if char.isdigit() or char == ".":
            return self._number_or_period()

        if char and (char.isalpha() or char == "_"):
            return self._call_or_variable()

        raise self._unexpected("an expression")

    def _number_or_period(self) -> ExpressionNode:
        start = self.pos
        period = self._match(_PERIOD)
        if period:
            bars_text, beats_text = period.groups()
            try:
                beats = parse_beat_value(beats_text, period.group(0), "period")
            except TimeFormatError as e:
                raise self._error(str(e), start) from e
            return Period(int(bars_text) if bars_text else 0, beats)

        number = self._match(_NUMBER)
        if not number:
            raise self._unexpected("a number")
        return Literal(float(number.group(0)))

    def _call_or_variable(self) -> ExpressionNode:
        start = self.pos
        identifier = self._match(_IDENTIFIER)
        assert identifier is not None
        name = identifier.group(0)

        if self._peek() == "(":
            self.pos += 1
            return FunctionCall(name, tuple(self._arguments()))

        if self._peek() == ".":
            try:
                namespace = VariableNamespace(name)
            except ValueError:
                raise self._error(f"Unknown variable namespace \"{name}\"", start) from None
            self.pos += 1
            member = self._match(_IDENTIFIER)
            if not member:
                raise self._unexpected("a variable name")
            return Variable(namespace, member.group(0))

        raise self._error(f"Unexpected identifier \"{name}\"", start)

    def _arguments(self) -> list[ExpressionNode]:
        args: list[ExpressionNode] = []
        self._skip_inline()
        if self._peek() == ")":
            self.pos += 1
            return args
        while True:
            self._skip_inline()
            args.append(self._additive())
            self._skip_inline()
            if self._peek() == ",":
                self.pos += 1
                continue
            if self._peek() == ")":
                self.pos += 1
                return args
            raise self._unexpected("',' or ')'")


def parse_modulation(text: str) -> list[Assignment]:
    """
    Parse modulation text into assignments.

    Raises:
        NotationSyntaxError: On malformed text (including the deprecated ':' operator)
        SemanticError: On unknown parameters or inverted pitch ranges
    """
    return ModulationParser(text).parse()
