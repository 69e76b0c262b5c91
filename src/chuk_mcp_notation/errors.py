"""
Error taxonomy and non-fatal diagnostics.

Fatal errors abort the current parse or evaluation. Diagnostics are
collected alongside a best-effort result and never stop processing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from chuk_mcp_notation.constants import DiagnosticKind


@dataclass(frozen=True)
class Span:
    """A location in source text (offset is 0-based, line/column are 1-based)."""

    offset: int
    line: int
    column: int

    def __str__(self) -> str:
        return f"position {self.offset} (line {self.line}, column {self.column})"


class NotationError(ValueError):
    """Base class for all notation and modulation errors."""


class NotationSyntaxError(NotationError):
    """
    Malformed input text.

    Carries the location of the offending token so callers can point at it.
    """

    def __init__(self, message: str, span: Span, dialect: str = "bar|beat") -> None:
        self.message = message
        self.span = span
        self.dialect = dialect
        super().__init__(f"{dialect} syntax error at {span}: {message}")

    @property
    def offset(self) -> int:
        return self.span.offset

    @property
    def line(self) -> int:
        return self.span.line

    @property
    def column(self) -> int:
        return self.span.column

    def to_dict(self) -> dict[str, int | str]:
        """Serialize for JSON responses."""
        return {
            "offset": self.offset,
            "line": self.line,
            "column": self.column,
            "message": self.message,
        }


class NotationRangeError(NotationSyntaxError):
    """
    A value (pitch, velocity, probability, bar, beat) outside its domain.

    Raised without a span by the leaf helpers; parsers re-raise it with the
    span of the token that produced the value.
    """

    def __init__(self, message: str, span: Span | None = None, dialect: str = "bar|beat") -> None:
        if span is not None:
            super().__init__(message, span, dialect)
            return
        self.message = message
        self.span = Span(0, 1, 1)
        self.dialect = dialect
        ValueError.__init__(self, message)


class TimeFormatError(NotationError):
    """Invalid bar|beat position or duration text, raised without a source location."""


class SemanticError(NotationError):
    """Unknown function/variable/parameter, wrong arity, or invalid range."""


class RuntimeNumericError(NotationError):
    """Invalid waveform arguments or a non-finite numeric result."""


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem found while processing input."""

    kind: DiagnosticKind
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "message": self.message}


def report(logger: logging.Logger, kind: DiagnosticKind, message: str) -> Diagnostic:
    """Log a diagnostic at WARNING and return it for collection."""
    logger.warning(message)
    return Diagnostic(kind, message)
