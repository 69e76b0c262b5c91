"""
Tests for formatting note events back to bar|beat notation.
"""

from chuk_mcp_notation.core import TimeSignature
from chuk_mcp_notation.models import NoteEvent
from chuk_mcp_notation.notation import format_notation, interpret_barbeat


def note(pitch: int, start: float, **fields) -> NoteEvent:
    values = {"duration": 1.0, "velocity": 100, **fields}
    return NoteEvent(pitch=pitch, start_time=start, **values)


class TestFormatter:
    """Tests for format_notation."""

    def test_empty(self) -> None:
        """No notes, no text."""
        assert format_notation([]) == ""

    def test_default_state_is_implicit(self) -> None:
        """Default velocity/duration/probability are not written."""
        assert format_notation([note(60, 0)]) == "C3 1|1"

    def test_groups_by_time(self) -> None:
        """Notes at one position share a time element, sorted by pitch."""
        text = format_notation([note(64, 0), note(60, 0), note(62, 1)])
        assert text == "C3 E3 1|1 D3 1|2"

    def test_state_only_on_change(self) -> None:
        """v, t and p are written when they change."""
        text = format_notation(
            [
                note(60, 0, velocity=80, duration=0.5),
                note(62, 1, velocity=80, duration=0.5),
                note(64, 2, velocity=90, probability=0.5),
            ]
        )
        assert text == "v80 t0.5 C3 1|1 D3 1|2 v90 t1 p0.5 E3 1|3"

    def test_velocity_range(self) -> None:
        """A deviation is written as a range."""
        assert format_notation([note(60, 0, velocity=80, velocity_deviation=20)]) == "v80-100 C3 1|1"

    def test_flat_names_and_bars(self) -> None:
        """Sharps come out flat; later bars get their own number."""
        assert format_notation([note(61, 4.5)]) == "Db3 2|1.5"

    def test_six_eight(self) -> None:
        """Times and durations are converted to eighth-note beats."""
        text = format_notation([note(60, 3.0, duration=0.5)], TimeSignature.SIX_EIGHT)
        assert text == "C3 2|1"

    def test_reinterprets_to_same_notes(self) -> None:
        """Formatted text interprets back to the original notes."""
        original = interpret_barbeat("v90 t0.5 C3 E3 1|1 v70-90 D3 1|2.5 p0.5 G3 2|3").notes
        again = interpret_barbeat(format_notation(original)).notes
        assert again == original
