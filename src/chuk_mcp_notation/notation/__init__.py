"""
Notation dialects - text to note events and back.

- bar|beat: bar/beat-addressed notation with persistent state and bar copies
- sequence: the legacy flat-sequence dialect
- formatter: note events back to bar|beat text
"""

from chuk_mcp_notation.notation.barbeat_interpreter import (
    BarBeatInterpreter,
    InterpreterState,
    apply_deletions,
    interpret_barbeat,
)
from chuk_mcp_notation.notation.barbeat_parser import BarBeatParser, parse_barbeat
from chuk_mcp_notation.notation.formatter import format_notation
from chuk_mcp_notation.notation.sequence import parse_sequence

__all__ = [
    "BarBeatParser",
    "parse_barbeat",
    "BarBeatInterpreter",
    "InterpreterState",
    "apply_deletions",
    "interpret_barbeat",
    "parse_sequence",
    "format_notation",
]
