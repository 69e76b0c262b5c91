"""
Tests for core notation primitives.

Tests cover:
- PitchClass, resolve, note names (pitch.py)
- TimeSignature and the time converter (rhythm.py)
"""

import pytest

from chuk_mcp_notation.core import (
    PitchClass,
    TimeSignature,
    bar_beat_to_beats,
    beats_to_bar_beat,
    beats_to_bar_beat_duration,
    duration_to_beats,
    format_number,
    midi_to_note_name,
    parse_beat_value,
    parse_note_name,
    position_to_beats,
    resolve,
)
from chuk_mcp_notation.errors import NotationRangeError, TimeFormatError


class TestPitchClass:
    """Tests for PitchClass enum."""

    def test_pitch_values(self) -> None:
        """Naturals have the right semitones."""
        assert PitchClass.C == 0
        assert PitchClass.E == 4
        assert PitchClass.B == 11

    def test_semitone_with_accidentals(self) -> None:
        """Accidentals shift by one semitone."""
        assert PitchClass.semitone("C", "#") == 1
        assert PitchClass.semitone("D", "b") == 1
        assert PitchClass.semitone("c") == 0

    def test_unknown_letter(self) -> None:
        """Unknown letters are rejected."""
        with pytest.raises(ValueError):
            PitchClass.semitone("H")


class TestResolve:
    """Tests for the note name resolver."""

    def test_octave_anchors(self) -> None:
        """C-2 is 0, C3 is middle C, G8 is the top."""
        assert resolve("C", None, -2) == 0
        assert resolve("C", None, -1) == 12
        assert resolve("C", None, 0) == 24
        assert resolve("C", None, 3) == 60
        assert resolve("G", None, 8) == 127

    def test_enharmonics_match(self) -> None:
        """C#3 and Db3 are the same pitch."""
        assert resolve("C", "#", 3) == resolve("D", "b", 3) == 61

    def test_out_of_range_octaves(self) -> None:
        """Pitches outside 0-127 raise a range error naming the note."""
        with pytest.raises(NotationRangeError, match="G#8"):
            resolve("G", "#", 8)
        with pytest.raises(NotationRangeError):
            resolve("C", None, -3)
        with pytest.raises(NotationRangeError):
            resolve("C", "b", -2)

    def test_parse_note_name(self) -> None:
        """Note names parse with signed octaves."""
        assert parse_note_name("C3") == 60
        assert parse_note_name("F#-1") == 18
        assert parse_note_name("Bb2") == 58

    def test_parse_invalid_note_name(self) -> None:
        """Malformed note names are rejected."""
        with pytest.raises(ValueError):
            parse_note_name("X3")

    def test_midi_to_note_name(self) -> None:
        """Names use flat spellings."""
        assert midi_to_note_name(60) == "C3"
        assert midi_to_note_name(61) == "Db3"
        assert midi_to_note_name(0) == "C-2"
        assert midi_to_note_name(127) == "G8"


class TestTimeSignature:
    """Tests for TimeSignature."""

    def test_parse(self) -> None:
        """Parse from string."""
        ts = TimeSignature.parse("6/8")
        assert ts.numerator == 6
        assert ts.denominator == 8
        assert str(ts) == "6/8"

    def test_parse_invalid(self) -> None:
        """Invalid formats raise."""
        with pytest.raises(ValueError):
            TimeSignature.parse("4")

    def test_quarter_note_lengths(self) -> None:
        """Beat and bar lengths in quarter notes."""
        assert TimeSignature.COMMON_TIME.quarter_notes_per_beat == 1.0
        assert TimeSignature.SIX_EIGHT.quarter_notes_per_beat == 0.5
        assert TimeSignature.SIX_EIGHT.quarter_notes_per_bar == 3.0
        assert TimeSignature.WALTZ.quarter_notes_per_bar == 3.0

    def test_conversions(self) -> None:
        """Musical beats and quarter notes convert both ways."""
        ts = TimeSignature(6, 8)
        assert ts.to_quarter_notes(6) == 3.0
        assert ts.to_musical_beats(3.0) == 6.0

    def test_from_parts(self) -> None:
        """Both parts or neither."""
        assert TimeSignature.from_parts() == TimeSignature.COMMON_TIME
        assert TimeSignature.from_parts(3, 4) == TimeSignature.WALTZ
        with pytest.raises(ValueError, match="both numerator and denominator"):
            TimeSignature.from_parts(numerator=3)

    def test_invalid_parts(self) -> None:
        """Zero or negative parts are rejected."""
        with pytest.raises(ValueError):
            TimeSignature(0, 4)


class TestTimeConverter:
    """Tests for bar|beat and duration conversion."""

    def test_position_to_beats(self) -> None:
        """Positions are 1-based and linear in beats per bar."""
        assert position_to_beats(1, 1, 4) == 0
        assert position_to_beats(2, 3.5, 4) == 6.5
        assert position_to_beats(2, 1, 6) == 6

    def test_position_below_one(self) -> None:
        """Bar or beat below 1 is a range error."""
        with pytest.raises(NotationRangeError):
            position_to_beats(0, 1, 4)
        with pytest.raises(NotationRangeError):
            position_to_beats(1, 0.5, 4)

    def test_bar_beat_text(self) -> None:
        """bar|beat text with fractional and mixed beats."""
        assert bar_beat_to_beats("2|3.5") == 6.5
        assert bar_beat_to_beats("1|2+1/2") == 1.5
        assert bar_beat_to_beats("1|4/2") == 1.0

    def test_bar_beat_invalid(self) -> None:
        """Malformed bar|beat text is rejected."""
        with pytest.raises(TimeFormatError):
            bar_beat_to_beats("2:1")

    def test_beat_values(self) -> None:
        """Decimal, fraction and mixed forms."""
        assert parse_beat_value("1.5") == 1.5
        assert parse_beat_value(".5") == 0.5
        assert parse_beat_value("3/4") == 0.75
        assert parse_beat_value("2+1/4") == 2.25

    def test_beat_value_division_by_zero(self) -> None:
        """A zero denominator is an error, not infinity."""
        with pytest.raises(TimeFormatError, match="division by zero"):
            parse_beat_value("1/0")

    def test_duration_bar_beat(self) -> None:
        """bars:beats durations scale by beats per bar."""
        assert duration_to_beats("2:1.5", 4) == 9.5
        assert duration_to_beats("1:3/4", 4) == 4.75
        assert duration_to_beats("1:2+1/2", 3) == 5.5
        assert duration_to_beats("1:0", 6) == 6

    def test_duration_plain(self) -> None:
        """Bare numbers and fractions are beats."""
        assert duration_to_beats("0.5") == 0.5
        assert duration_to_beats("1/3") == pytest.approx(1 / 3)

    def test_duration_rejects_pipe(self) -> None:
        """'|' in a duration points at ':'."""
        with pytest.raises(TimeFormatError, match="Use ':' for bar:beat format"):
            duration_to_beats("1|2")

    def test_duration_rejects_negative(self) -> None:
        """Negative durations are rejected."""
        with pytest.raises(TimeFormatError):
            duration_to_beats("-1")
        with pytest.raises(TimeFormatError):
            duration_to_beats("-1:0")

    def test_format_back(self) -> None:
        """Beats format back without trailing zeros."""
        assert beats_to_bar_beat(0) == "1|1"
        assert beats_to_bar_beat(6.5) == "2|3.5"
        assert beats_to_bar_beat_duration(9.5) == "2:1.5"
        assert beats_to_bar_beat_duration(4) == "1:0"

    def test_format_number(self) -> None:
        """Whole numbers drop the decimal point."""
        assert format_number(2.0) == "2"
        assert format_number(0.25) == "0.25"
        assert format_number(1 / 3) == "0.333"
