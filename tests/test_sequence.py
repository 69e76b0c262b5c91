"""
Tests for the legacy flat-sequence dialect.
"""

import pytest

from chuk_mcp_notation.errors import NotationRangeError, NotationSyntaxError
from chuk_mcp_notation.notation import parse_sequence


def timeline(text: str) -> list[tuple[int, float]]:
    return [(note.pitch, note.start_time) for note in parse_sequence(text)]


class TestSequence:
    """Tests for notes played one after another."""

    def test_notes_follow_each_other(self) -> None:
        """Each note starts when the previous one ends."""
        notes = parse_sequence("C3 D3 E3")
        assert [(n.pitch, n.start_time) for n in notes] == [(60, 0.0), (62, 1.0), (64, 2.0)]
        assert all(n.velocity == 70 and n.duration == 1.0 for n in notes)

    def test_note_modifiers(self) -> None:
        """v, n and t on a note."""
        notes = parse_sequence("C3v90n2t1 D3")
        assert (notes[0].velocity, notes[0].duration) == (90, 2.0)
        assert notes[1].start_time == 1.0

    def test_duration_advances(self) -> None:
        """Without t the cursor moves by the note's duration."""
        assert timeline("C3n2 D3") == [(60, 0.0), (62, 2.0)]

    def test_rests(self) -> None:
        """R is one beat; R2 and R.5 take a length."""
        assert timeline("C3 R D3 R2 E3 R.5 F3") == [
            (60, 0.0),
            (62, 2.0),
            (64, 5.0),
            (65, 6.5),
        ]

    def test_chord(self) -> None:
        """Chord modifiers apply to every note; note modifiers win."""
        notes = parse_sequence("[C3 E3v80 G3]v70n2 C4")
        assert [(n.pitch, n.start_time, n.velocity, n.duration) for n in notes] == [
            (60, 0.0, 70, 2.0),
            (64, 0.0, 80, 2.0),
            (67, 0.0, 70, 2.0),
            (72, 2.0, 70, 1.0),
        ]

    def test_chord_time_until_next(self) -> None:
        """t on a chord sets when the next element starts."""
        assert timeline("[C3 E3]n4t1 G3")[-1] == (67, 1.0)

    def test_repetition(self) -> None:
        """Groups, notes and chords repeat."""
        assert timeline("(C3 D3)*2") == [(60, 0.0), (62, 1.0), (60, 2.0), (62, 3.0)]
        assert timeline("C4*3") == [(72, 0.0), (72, 1.0), (72, 2.0)]
        assert len(parse_sequence("[C3 G3]*2")) == 4

    def test_nested_repetition(self) -> None:
        """Repeats nest."""
        assert len(parse_sequence("((C3 D3)*2 E3)*2")) == 10

    def test_group_modifiers(self) -> None:
        """A group passes velocity and duration to its notes."""
        notes = parse_sequence("(C3 D3v100)v50n.5")
        assert [(n.velocity, n.duration, n.start_time) for n in notes] == [
            (50, 0.5, 0.0),
            (100, 0.5, 0.5),
        ]

    def test_voices_restart(self) -> None:
        """Each ';' voice starts again at 0."""
        assert timeline("C3 D3; G2 A2") == [(60, 0.0), (62, 1.0), (55, 0.0), (57, 1.0)]

    def test_empty(self) -> None:
        """Empty input has no notes."""
        assert parse_sequence("") == []
        assert parse_sequence(None) == []


class TestSequenceErrors:
    """Tests for malformed sequences."""

    def test_unexpected_character(self) -> None:
        """Unknown characters are reported with their position."""
        with pytest.raises(NotationSyntaxError, match="Unexpected 'X'") as exc_info:
            parse_sequence("C3 X")
        assert exc_info.value.offset == 3
        assert str(exc_info.value).startswith("sequence syntax error")

    def test_missing_separator(self) -> None:
        """Notes must be separated."""
        with pytest.raises(NotationSyntaxError, match="Unexpected 'D'"):
            parse_sequence("C3D3")

    def test_duplicate_modifier(self) -> None:
        """A modifier may appear once."""
        with pytest.raises(NotationSyntaxError, match="Duplicate modifier 'v'"):
            parse_sequence("C3v90v80")

    def test_unclosed_group(self) -> None:
        """Open parentheses must close."""
        with pytest.raises(NotationSyntaxError, match="Unclosed"):
            parse_sequence("(C3 D3")

    def test_unclosed_chord(self) -> None:
        """Open brackets must close."""
        with pytest.raises(NotationSyntaxError, match="Unclosed"):
            parse_sequence("[C3 E3")

    def test_velocity_out_of_range(self) -> None:
        """Velocity above 127."""
        with pytest.raises(NotationRangeError):
            parse_sequence("C3v200")

    def test_pitch_out_of_range(self) -> None:
        """Pitch above 127."""
        with pytest.raises(NotationRangeError):
            parse_sequence("C9")
