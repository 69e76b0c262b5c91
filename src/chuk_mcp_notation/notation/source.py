"""
Source text helpers shared by the notation parsers.

Splits text into whitespace-delimited raw tokens, drops comments, and maps
character offsets to 1-based line/column spans for error reporting.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass

from chuk_mcp_notation.errors import NotationSyntaxError, Span

SEPARATORS = frozenset(" \t\r\n;")


@dataclass(frozen=True)
class RawToken:
    """A whitespace-delimited chunk of source text and where it starts."""

    text: str
    offset: int


class SourceText:
    """Notation source with offset to line/column mapping."""

    def __init__(self, text: str, dialect: str = "bar|beat") -> None:
        self.text = text
        self.dialect = dialect
        self._line_starts = [0]
        for index, char in enumerate(text):
            if char == "\n":
                self._line_starts.append(index + 1)

    def span(self, offset: int) -> Span:
        """Span for a 0-based character offset."""
        line_index = bisect_right(self._line_starts, offset) - 1
        return Span(offset, line_index + 1, offset - self._line_starts[line_index] + 1)

    def error(self, message: str, offset: int) -> NotationSyntaxError:
        return NotationSyntaxError(message, self.span(offset), self.dialect)

    def tokens(self, separators: frozenset[str] = SEPARATORS) -> list[RawToken]:
        """
        Split into raw tokens.

        Comments: '//' and '#' run to end of line, '/* ... */' is a block.
        A '#' only opens a comment at the start of a token, since inside a
        token it is a sharp sign.
        """
        text = self.text
        tokens: list[RawToken] = []
        index = 0
        start: int | None = None

        def flush(end: int) -> None:
            nonlocal start
            if start is not None and end > start:
                tokens.append(RawToken(text[start:end], start))
            start = None

        while index < len(text):
            char = text[index]
            if text.startswith("/*", index):
                flush(index)
                close = text.find("*/", index + 2)
                if close == -1:
                    raise self.error("Unterminated block comment", index)
                index = close + 2
            elif text.startswith("//", index) or (char == "#" and start is None):
                flush(index)
                newline = text.find("\n", index)
                index = len(text) if newline == -1 else newline
            elif char in separators:
                flush(index)
                index += 1
            else:
                if start is None:
                    start = index
                index += 1

        flush(len(text))
        return tokens
