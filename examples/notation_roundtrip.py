#!/usr/bin/env python3
"""
Example: Parsing and formatting notation.

This demonstrates the two input dialects. bar|beat text buffers pitches
until a time position emits them; the flat-sequence dialect plays notes
one after another. Notes format back into compact bar|beat text.

Usage:
    python examples/notation_roundtrip.py
"""

from chuk_mcp_notation.core import TimeSignature
from chuk_mcp_notation.errors import NotationSyntaxError
from chuk_mcp_notation.notation import format_notation, interpret_barbeat, parse_sequence


def main() -> None:
    """Demonstrate parsing and formatting."""
    print("CHUK Notation Demo")
    print("=" * 40)
    print()

    # A drum pattern with a copied bar
    text = "v100 C1 1|1,3 v80 D1 1|2,4 @2=1"
    result = interpret_barbeat(text)
    print(f"bar|beat: {text}")
    for note in result.notes:
        print(f"  pitch {note.pitch:3d} at {note.start_time:5.2f} vel {note.velocity}")
    print()

    # Times are always quarter notes, whatever the meter
    text = "t1.5 C3 1|1 E3 |4"
    result = interpret_barbeat(text, TimeSignature.SIX_EIGHT)
    print(f"6/8: {text}")
    for note in result.notes:
        print(f"  pitch {note.pitch:3d} at {note.start_time:5.2f} for {note.duration:.2f}")
    print()

    # Diagnostics do not stop interpretation
    result = interpret_barbeat("C3 1|1,3 2|1")
    print("Warnings:")
    for warning in result.warnings():
        print(f"  - {warning}")
    print()

    # Errors carry a location
    try:
        interpret_barbeat("C3 1|1\nD3 X9")
    except NotationSyntaxError as e:
        print(f"Error at line {e.line}, column {e.column}: {e.message}")
    print()

    # The flat-sequence dialect
    notes = parse_sequence("C3v90 [E3 G3]n2 R (C4 D4)*2")
    print("Sequence formatted as bar|beat:")
    print(f"  {format_notation(notes)}")


if __name__ == "__main__":
    main()
